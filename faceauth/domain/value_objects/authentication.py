"""Authentication outcome value objects.

Every call into the authentication service ends in exactly one of
`Accepted`, `Rejected` or `SystemFailure`; no exception crosses that
boundary. Messages are safe to show to the end user.
"""
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from faceauth.domain.entities.identity import Identity
from faceauth.domain.value_objects.matching import MatchDecision


class AuthPhase(str, Enum):
    """Trust phase an envelope was encrypted for."""
    REGISTRATION = "registration"
    AUTHENTICATION = "authentication"


class RejectReason(str, Enum):
    """Caller-visible rejection categories."""
    MALFORMED_ENVELOPE = "malformed_envelope"
    AUTHENTICATION_FAILED = "authentication_failed"
    INVALID_IMAGE = "invalid_image"
    NO_FACE_DETECTED = "no_face_detected"
    NO_TEMPLATE = "no_template"
    FACE_MISMATCH = "face_mismatch"
    ALREADY_REGISTERED = "already_registered"


class SystemFailureReason(str, Enum):
    """Operational failures that need attention rather than a retry by the user."""
    TEMPLATE_LENGTH_MISMATCH = "template_length_mismatch"
    MODEL_LOAD_FAILURE = "model_load_failure"
    INTERNAL_ERROR = "internal_error"


REJECT_MESSAGES = {
    RejectReason.MALFORMED_ENVELOPE: "The uploaded image data could not be read. Please capture a new photo.",
    RejectReason.AUTHENTICATION_FAILED: "Authentication failed.",
    RejectReason.INVALID_IMAGE: "The uploaded image could not be processed. Please capture a new photo.",
    RejectReason.NO_FACE_DETECTED: (
        "No face detected in the image. Please ensure your face is clearly visible "
        "and well-lit, then try again."
    ),
    RejectReason.NO_TEMPLATE: (
        "No registered face found for this user. Please contact support to "
        "re-register your account."
    ),
    RejectReason.FACE_MISMATCH: (
        "Face verification failed. The face in the image doesn't match your "
        "registered face. Please try again or contact support if this continues."
    ),
    RejectReason.ALREADY_REGISTERED: "An account with this email already exists. Please log in instead.",
}

SYSTEM_FAILURE_MESSAGE = "The service is temporarily unable to verify faces. Please try again later."


class Accepted(BaseModel):
    """Successful registration or authentication."""
    outcome: Literal["accepted"] = "accepted"
    identity: Identity
    token: Optional[str] = Field(None, description="Issued only by authentication")
    decision: Optional[MatchDecision] = Field(None, description="Match details, authentication only")


class Rejected(BaseModel):
    """Attempt refused for a reason the user can act on."""
    outcome: Literal["rejected"] = "rejected"
    reason: RejectReason
    message: str

    @classmethod
    def because(cls, reason: RejectReason) -> "Rejected":
        return cls(reason=reason, message=REJECT_MESSAGES[reason])


class SystemFailure(BaseModel):
    """Attempt aborted by a system-level fault."""
    outcome: Literal["system_failure"] = "system_failure"
    reason: SystemFailureReason
    message: str = SYSTEM_FAILURE_MESSAGE


RegistrationResult = Union[Accepted, Rejected, SystemFailure]
AuthenticationResult = Union[Accepted, Rejected, SystemFailure]
