"""Custom exceptions for the face authentication service."""
from typing import Optional


class FaceAuthError(Exception):
    """Base exception for face authentication operations."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize face authentication error.

        Args:
            message: Error description
            details: Additional error context (never key material or vectors)
        """
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(FaceAuthError):
    """Raised at startup when key derivation or matching settings are invalid."""
    pass


class MalformedEnvelopeError(FaceAuthError):
    """Raised when the input does not parse as a recognized envelope."""
    pass


class UnsupportedEnvelopeVersionError(MalformedEnvelopeError):
    """Raised when a structured envelope carries an unknown format version."""
    pass


class WrongKeyOrCorruptError(FaceAuthError):
    """Raised when a ciphertext does not decrypt cleanly under the given key."""
    pass


class DecryptionExhaustedError(FaceAuthError):
    """Raised when every candidate key failed to decrypt the envelope."""

    def __init__(self, attempts: int):
        super().__init__("Failed to decrypt image data", {"attempts": attempts})
        self.attempts = attempts


class InvalidImageError(FaceAuthError):
    """Raised when the decrypted payload is not a decodable image."""
    pass


class NoFaceDetectedError(FaceAuthError):
    """Raised when no face is detected in the image."""
    pass


class TemplateLengthMismatchError(FaceAuthError):
    """Raised when two descriptors (or a descriptor and the expected size) differ in length."""
    pass


class ModelLoadError(FaceAuthError):
    """Raised when the face detection models fail to load."""
    pass
