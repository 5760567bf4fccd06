"""Shared fixtures and fakes for the face authentication tests."""
import os

# Required settings must exist before faceauth.core.config is imported
os.environ.setdefault("ENCRYPTION_SALT", "test-salt")
os.environ.setdefault("APP_SECRET_KEY", "test-secret")
os.environ.setdefault("KDF_ITERATIONS", "1000")
os.environ.setdefault("DESCRIPTOR_DIMENSION", "128")

from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

from faceauth.core.exceptions import InvalidImageError
from faceauth.domain.entities.identity import Identity
from faceauth.domain.interfaces.auth.token_issuer import TokenIssuer
from faceauth.domain.interfaces.recognition.face_detector import ArtifactLoader, FaceDetector
from faceauth.infrastructure.storage.memory import InMemoryTemplateStore
from faceauth.services.authentication import AuthenticationService
from faceauth.services.crypto.decryption import DecryptionOrchestrator
from faceauth.services.crypto.envelope_codec import EnvelopeCodec
from faceauth.services.crypto.key_candidates import KeyCandidateResolver
from faceauth.services.crypto.key_derivation import KeyDeriver
from faceauth.services.matching.descriptor_matcher import DescriptorMatcher
from faceauth.services.recognition.model_lifecycle import ModelLifecycle

TEST_SALT = "test-salt"
TEST_SECRET = "test-secret"
TEST_ITERATIONS = 1000
MATCH_THRESHOLD = 0.6
DIMENSION = 128

# Stand-ins for decrypted JPEG captures; the fake detector keys on the bytes
IMAGE_FACE_A = b"jpeg:face-a"
IMAGE_FACE_A_AGAIN = b"jpeg:face-a-second-capture"
IMAGE_FACE_B = b"jpeg:face-b"
IMAGE_NO_FACE = b"jpeg:empty-room"
IMAGE_NOT_AN_IMAGE = b"not an image"

FACE_A = np.linspace(-1.0, 1.0, DIMENSION)
FACE_A_AGAIN = FACE_A + 0.01  # distance ~0.11
FACE_B = FACE_A + 0.2  # distance ~2.26


class FakeDetector(FaceDetector):
    """Detector that looks descriptors up by image bytes."""

    def __init__(self, faces: Dict[bytes, Optional[Sequence[float]]], dimension: int = DIMENSION) -> None:
        self.faces = faces
        self._dimension = dimension
        self.load_calls = 0
        self.seen_images: List[bytes] = []

    @property
    def descriptor_dimension(self) -> int:
        return self._dimension

    def artifact_loaders(self) -> List[ArtifactLoader]:
        return [self._load_artifact, self._load_artifact]

    async def _load_artifact(self) -> None:
        self.load_calls += 1

    async def detect_and_extract(self, image_bytes: bytes) -> Optional[np.ndarray]:
        self.seen_images.append(image_bytes)
        if image_bytes not in self.faces:
            raise InvalidImageError("Failed to decode image")
        descriptor = self.faces[image_bytes]
        return None if descriptor is None else np.asarray(descriptor, dtype=np.float32)


class RecordingTokenIssuer(TokenIssuer):
    """Token issuer that remembers who it issued tokens for."""

    def __init__(self) -> None:
        self.issued: List[Identity] = []

    async def issue_token(self, identity: Identity) -> str:
        self.issued.append(identity)
        return f"token-{identity.id}"


@pytest.fixture
def key_deriver() -> KeyDeriver:
    return KeyDeriver(salt=TEST_SALT, iterations=TEST_ITERATIONS, key_size_bits=256)


@pytest.fixture
def codec() -> EnvelopeCodec:
    return EnvelopeCodec()


@pytest.fixture
def key_resolver() -> KeyCandidateResolver:
    return KeyCandidateResolver(app_secret=TEST_SECRET, key_prefix="pwd-manager")


@pytest.fixture
def decryptor(key_deriver, codec) -> DecryptionOrchestrator:
    return DecryptionOrchestrator(key_deriver, codec)


@pytest.fixture
def detector() -> FakeDetector:
    return FakeDetector({
        IMAGE_FACE_A: FACE_A,
        IMAGE_FACE_A_AGAIN: FACE_A_AGAIN,
        IMAGE_FACE_B: FACE_B,
        IMAGE_NO_FACE: None,
    })


@pytest.fixture
def template_store() -> InMemoryTemplateStore:
    return InMemoryTemplateStore()


@pytest.fixture
def token_issuer() -> RecordingTokenIssuer:
    return RecordingTokenIssuer()


@pytest.fixture
def auth_service(
    codec, key_resolver, decryptor, detector, template_store, token_issuer
) -> AuthenticationService:
    return AuthenticationService(
        codec=codec,
        key_resolver=key_resolver,
        decryptor=decryptor,
        matcher=DescriptorMatcher(),
        detector=detector,
        model_lifecycle=ModelLifecycle(detector.artifact_loaders()),
        template_store=template_store,
        token_issuer=token_issuer,
        match_threshold=MATCH_THRESHOLD,
    )
