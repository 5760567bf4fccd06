"""Biometric envelope encryption and face matching for face-based login."""

__version__ = "0.1.0"
