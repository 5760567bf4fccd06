"""Face registration and authentication service."""
import asyncio
import base64
from typing import List, Optional, Union

import numpy as np

from faceauth.core.exceptions import (
    DecryptionExhaustedError,
    FaceAuthError,
    InvalidImageError,
    MalformedEnvelopeError,
    ModelLoadError,
    NoFaceDetectedError,
    TemplateLengthMismatchError,
)
from faceauth.core.logging import get_logger
from faceauth.core.utils.timing import log_duration
from faceauth.domain.entities.identity import IdentityKey
from faceauth.domain.interfaces.auth.token_issuer import TokenIssuer
from faceauth.domain.interfaces.recognition.face_detector import FaceDetector
from faceauth.domain.interfaces.storage.template_store import TemplateStore
from faceauth.domain.value_objects.authentication import (
    Accepted,
    AuthenticationResult,
    AuthPhase,
    RegistrationResult,
    Rejected,
    RejectReason,
    SystemFailure,
    SystemFailureReason,
)
from faceauth.domain.value_objects.envelope import ParsedEnvelope
from faceauth.services.crypto.decryption import DecryptionOrchestrator
from faceauth.services.crypto.envelope_codec import EnvelopeCodec
from faceauth.services.crypto.key_candidates import KeyCandidateResolver
from faceauth.services.matching.descriptor_matcher import DescriptorMatcher
from faceauth.services.recognition.model_lifecycle import ModelLifecycle

logger = get_logger(__name__)


class AuthenticationService:
    """Service for enrolling faces and authenticating users against them.

    This service:
    1. Parses the uploaded envelope and resolves candidate keys for the phase
    2. Decrypts the image with the first key that fits
    3. Extracts a face descriptor with the detector
    4. Stores it (registration) or compares it to the template (authentication)

    No exception crosses this boundary: every call returns `Accepted`,
    `Rejected` or `SystemFailure`.

    Example:
        ```python
        service = container.authentication_service
        result = await service.authenticate("a@b.com", envelope_body)
        if result.outcome == "accepted":
            token = result.token
        ```
    """

    def __init__(
        self,
        codec: EnvelopeCodec,
        key_resolver: KeyCandidateResolver,
        decryptor: DecryptionOrchestrator,
        matcher: DescriptorMatcher,
        detector: FaceDetector,
        model_lifecycle: ModelLifecycle,
        template_store: TemplateStore,
        token_issuer: TokenIssuer,
        match_threshold: float,
    ) -> None:
        """Initialize the authentication service.

        Args:
            codec: Envelope parser and cipher
            key_resolver: Builds candidate base keys per phase
            decryptor: Tries candidate keys in order
            matcher: Descriptor comparison
            detector: Face detection and descriptor extraction
            model_lifecycle: Single-flight loader for the detector's models
            template_store: Identity and template persistence
            token_issuer: Session token issuance after a match
            match_threshold: Maximum Euclidean distance accepted as a match
        """
        self.codec = codec
        self.key_resolver = key_resolver
        self.decryptor = decryptor
        self.matcher = matcher
        self.detector = detector
        self.model_lifecycle = model_lifecycle
        self.template_store = template_store
        self.token_issuer = token_issuer
        self.match_threshold = match_threshold

    async def register_template(self, email: str, envelope_body: Union[bytes, str]) -> RegistrationResult:
        """Enroll the face in a temporary-key envelope as the identity's template.

        Open registration only enrolls emails without a template. The
        temporary key is computable from the email alone, so it cannot
        authorize replacing an enrolled face; use `replace_template` from
        an authenticated session for that.

        Args:
            email: Email the client derived the temporary key from
            envelope_body: Content of the `encryptedImage` upload

        Returns:
            Accepted with the identity, Rejected or SystemFailure
        """
        try:
            if await self._is_enrolled(email):
                logger.info("Registration refused for enrolled email")
                return Rejected.because(RejectReason.ALREADY_REGISTERED)

            parsed = self.codec.parse(envelope_body)
            candidates = self.key_resolver.resolve_candidates(AuthPhase.REGISTRATION, email)
            descriptor = await self._decrypt_and_extract(parsed, candidates)
            self._check_dimension(descriptor)

            # Another registration for the same email may have finished meanwhile
            if await self._is_enrolled(email):
                logger.info("Registration refused for enrolled email")
                return Rejected.because(RejectReason.ALREADY_REGISTERED)
            identity = await self.template_store.put_template(email, descriptor.tolist())
        except Exception as e:
            return self._failure(e, operation="register")

        logger.info("Face template registered", user_id=identity.id)
        return Accepted(identity=identity)

    async def replace_template(
        self,
        email: str,
        envelope_body: Union[bytes, str],
        user_id: int,
    ) -> RegistrationResult:
        """Replace an enrolled identity's template wholesale.

        Only call this for a session that is already authenticated as
        `user_id`. The envelope must be sealed with the user-specific key;
        the temporary-key fallback is not tried.

        Args:
            email: Email of the enrolled identity
            envelope_body: Content of the `encryptedImage` upload
            user_id: Numeric id of the authenticated session

        Returns:
            Accepted with the identity, Rejected or SystemFailure
        """
        try:
            identity = await self.template_store.find_identity(email)
            if identity is None or identity.id is None or identity.id != user_id:
                logger.info("Template replacement for unknown identity")
                await self._derive_decoy_key(email)
                return Rejected.because(RejectReason.AUTHENTICATION_FAILED)

            parsed = self.codec.parse(envelope_body)
            candidates = [self.key_resolver.user_key(identity.id, email)]
            descriptor = await self._decrypt_and_extract(parsed, candidates)
            self._check_dimension(descriptor)
            identity = await self.template_store.put_template(identity.key, descriptor.tolist())
        except Exception as e:
            return self._failure(e, operation="replace")

        logger.info("Face template replaced", user_id=identity.id)
        return Accepted(identity=identity)

    async def authenticate(
        self,
        email: str,
        envelope_body: Union[bytes, str],
        user_id: Optional[int] = None,
    ) -> AuthenticationResult:
        """Verify the face in an envelope against the identity's template.

        Args:
            email: Email the user logs in with
            envelope_body: Content of the `encryptedImage` upload
            user_id: Identity hint from the caller's session, must match the email

        Returns:
            Accepted with identity, token and match decision, Rejected or SystemFailure
        """
        try:
            identity = await self.template_store.find_identity(email)
            if identity is None or (user_id is not None and identity.id != user_id):
                logger.info("Authentication for unknown identity", has_hint=user_id is not None)
                await self._derive_decoy_key(email)
                return Rejected.because(RejectReason.AUTHENTICATION_FAILED)

            template = await self.template_store.get_template(identity.key)
            if template is None:
                logger.warning("Identity has no face template", user_id=identity.id)
                return Rejected.because(RejectReason.NO_TEMPLATE)

            parsed = self.codec.parse(envelope_body)
            if identity.id is not None:
                candidates = self.key_resolver.resolve_candidates(
                    AuthPhase.AUTHENTICATION, email, identity.id
                )
            else:
                candidates = self.key_resolver.resolve_candidates(AuthPhase.REGISTRATION, email)
            descriptor = await self._decrypt_and_extract(parsed, candidates)

            with log_duration("compare"):
                decision = self.matcher.compare(template.descriptor, descriptor, self.match_threshold)
            logger.info(
                "Face comparison completed",
                user_id=identity.id,
                distance=round(decision.distance, 4),
                threshold=decision.threshold,
                is_match=decision.is_match
            )
            if not decision.is_match:
                return Rejected.because(RejectReason.FACE_MISMATCH)

            token = await self.token_issuer.issue_token(identity)
        except Exception as e:
            return self._failure(e, operation="authenticate")

        return Accepted(identity=identity, token=token, decision=decision)

    async def delete_identity(self, identity_key: IdentityKey) -> None:
        """Remove an identity together with its face template."""
        await self.template_store.delete_template(identity_key)

    async def _is_enrolled(self, email: str) -> bool:
        identity = await self.template_store.find_identity(email)
        if identity is None:
            return False
        return await self.template_store.get_template(identity.key) is not None

    async def _derive_decoy_key(self, email: str) -> None:
        """Spend one key derivation so unknown identities cost as much as known ones."""
        base_key = self.key_resolver.temporary_key(email)
        await asyncio.to_thread(self.decryptor.key_deriver.derive, base_key)

    def _check_dimension(self, descriptor: np.ndarray) -> None:
        if descriptor.size != self.detector.descriptor_dimension:
            raise TemplateLengthMismatchError(
                "Extracted descriptor has unexpected length",
                {"expected": self.detector.descriptor_dimension, "actual": int(descriptor.size)}
            )

    async def _decrypt_and_extract(self, parsed: ParsedEnvelope, candidates: List[str]) -> np.ndarray:
        with log_duration("decrypt", candidates=len(candidates)):
            plaintext = await asyncio.to_thread(self.decryptor.decrypt, parsed, candidates)
        image_bytes = base64.b64decode(plaintext)

        await self.model_lifecycle.ensure_loaded()
        with log_duration("detect"):
            descriptor = await self.detector.detect_and_extract(image_bytes)
        if descriptor is None:
            raise NoFaceDetectedError("No face detected in image")
        return np.asarray(descriptor, dtype=np.float64).ravel()

    def _failure(self, error: Exception, operation: str) -> Union[Rejected, SystemFailure]:
        """Map an internal error to the caller-visible outcome."""
        if isinstance(error, MalformedEnvelopeError):
            logger.info("Rejected malformed envelope", operation=operation, error=str(error))
            return Rejected.because(RejectReason.MALFORMED_ENVELOPE)
        if isinstance(error, DecryptionExhaustedError):
            return Rejected.because(RejectReason.AUTHENTICATION_FAILED)
        if isinstance(error, InvalidImageError):
            logger.info("Decrypted payload is not an image", operation=operation)
            return Rejected.because(RejectReason.INVALID_IMAGE)
        if isinstance(error, NoFaceDetectedError):
            logger.info("No face detected", operation=operation)
            return Rejected.because(RejectReason.NO_FACE_DETECTED)
        if isinstance(error, TemplateLengthMismatchError):
            logger.error(
                "Descriptor length mismatch, check detector and template versions",
                operation=operation,
                **error.details
            )
            return SystemFailure(reason=SystemFailureReason.TEMPLATE_LENGTH_MISMATCH)
        if isinstance(error, ModelLoadError):
            return SystemFailure(reason=SystemFailureReason.MODEL_LOAD_FAILURE)

        logger.error(
            "Unexpected failure",
            operation=operation,
            error_type=type(error).__name__,
            known=isinstance(error, FaceAuthError),
            exc_info=True
        )
        return SystemFailure(reason=SystemFailureReason.INTERNAL_ERROR)
