"""Value objects package."""
from .authentication import (
    Accepted,
    AuthenticationResult,
    AuthPhase,
    RegistrationResult,
    Rejected,
    RejectReason,
    SystemFailure,
    SystemFailureReason,
)
from .envelope import EncryptionEnvelope, LegacyEnvelope, ParsedEnvelope, StructuredEnvelope
from .matching import MatchDecision

__all__ = [
    "Accepted",
    "AuthenticationResult",
    "AuthPhase",
    "EncryptionEnvelope",
    "LegacyEnvelope",
    "MatchDecision",
    "ParsedEnvelope",
    "RegistrationResult",
    "Rejected",
    "RejectReason",
    "StructuredEnvelope",
    "SystemFailure",
    "SystemFailureReason",
]
