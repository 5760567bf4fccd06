"""Service container for dependency injection."""
from typing import Optional

from faceauth.core.config import Settings, settings
from faceauth.core.exceptions import ConfigurationError
from faceauth.domain.interfaces.auth.token_issuer import TokenIssuer
from faceauth.domain.interfaces.recognition.face_detector import FaceDetector
from faceauth.domain.interfaces.storage.template_store import TemplateStore
from faceauth.infrastructure.storage.memory import InMemoryTemplateStore
from faceauth.services.authentication import AuthenticationService
from faceauth.services.crypto.decryption import DecryptionOrchestrator
from faceauth.services.crypto.envelope_codec import EnvelopeCodec
from faceauth.services.crypto.key_candidates import KeyCandidateResolver
from faceauth.services.crypto.key_derivation import KeyDeriver
from faceauth.services.matching.descriptor_matcher import DescriptorMatcher
from faceauth.services.recognition.insight_face import InsightFaceDetector
from faceauth.services.recognition.model_lifecycle import ModelLifecycle


class ServiceContainer:
    """Container for application services.

    This container manages the lifecycle and dependencies of all services in the application.
    Storage and token issuance belong to the host application and are passed in.

    Example:
        ```python
        container = ServiceContainer()
        await container.initialize(token_issuer=my_issuer)

        result = await container.authentication_service.authenticate(email, body)
        ```
    """

    def __init__(self, config: Settings = settings) -> None:
        """Initialize empty container."""
        self.config = config

        # Crypto services
        self.key_deriver: Optional[KeyDeriver] = None
        self.envelope_codec: Optional[EnvelopeCodec] = None
        self.key_resolver: Optional[KeyCandidateResolver] = None
        self.decryptor: Optional[DecryptionOrchestrator] = None

        # Recognition services - Use interface type hints
        self.detector: Optional[FaceDetector] = None
        self.model_lifecycle: Optional[ModelLifecycle] = None
        self.matcher: Optional[DescriptorMatcher] = None

        # Collaborators
        self.template_store: Optional[TemplateStore] = None
        self.token_issuer: Optional[TokenIssuer] = None

        self.authentication_service: Optional[AuthenticationService] = None

    def _validate_matching_config(self) -> None:
        if self.config.FACE_MATCH_THRESHOLD < 0:
            raise ConfigurationError(
                "Face match threshold must be non-negative",
                {"threshold": self.config.FACE_MATCH_THRESHOLD}
            )
        if self.config.DESCRIPTOR_DIMENSION <= 0:
            raise ConfigurationError(
                "Descriptor dimension must be positive",
                {"dimension": self.config.DESCRIPTOR_DIMENSION}
            )

    async def initialize(
        self,
        token_issuer: TokenIssuer,
        template_store: Optional[TemplateStore] = None,
        detector: Optional[FaceDetector] = None,
        warm_up: bool = False,
    ) -> None:
        """Initialize all services in the correct order.

        Args:
            token_issuer: Issues session tokens after a successful match
            template_store: Template persistence, in-memory when omitted
            detector: Face detector, InsightFace when omitted
            warm_up: Load the detector models now instead of on first use

        Raises:
            ConfigurationError: If key derivation or matching settings are invalid
            ModelLoadError: If warm_up is set and the models fail to load
        """
        self._validate_matching_config()
        self.key_deriver = KeyDeriver(
            salt=self.config.ENCRYPTION_SALT,
            iterations=self.config.KDF_ITERATIONS,
            key_size_bits=self.config.KDF_KEY_SIZE_BITS,
        )
        self.envelope_codec = EnvelopeCodec()
        self.key_resolver = KeyCandidateResolver(
            app_secret=self.config.APP_SECRET_KEY,
            key_prefix=self.config.KEY_PREFIX,
        )
        self.decryptor = DecryptionOrchestrator(self.key_deriver, self.envelope_codec)

        self.detector = detector or InsightFaceDetector(
            descriptor_dimension=self.config.DESCRIPTOR_DIMENSION
        )
        self.model_lifecycle = ModelLifecycle(self.detector.artifact_loaders())
        self.matcher = DescriptorMatcher()

        self.template_store = template_store or InMemoryTemplateStore()
        self.token_issuer = token_issuer

        self.authentication_service = AuthenticationService(
            codec=self.envelope_codec,
            key_resolver=self.key_resolver,
            decryptor=self.decryptor,
            matcher=self.matcher,
            detector=self.detector,
            model_lifecycle=self.model_lifecycle,
            template_store=self.template_store,
            token_issuer=self.token_issuer,
            match_threshold=self.config.FACE_MATCH_THRESHOLD,
        )

        if warm_up:
            await self.model_lifecycle.ensure_loaded()

    async def cleanup(self) -> None:
        """Cleanup all services in reverse order of initialization."""
        self.authentication_service = None

        self.token_issuer = None
        self.template_store = None

        self.matcher = None
        self.model_lifecycle = None
        self.detector = None

        self.decryptor = None
        self.key_resolver = None
        self.envelope_codec = None
        self.key_deriver = None


# Global container instance
container = ServiceContainer()
