"""CLI tool that checks whether an envelope decrypts and contains a face."""
import argparse
import asyncio
import base64
import sys
from pathlib import Path
from typing import Optional

from faceauth.core.config import settings
from faceauth.core.exceptions import FaceAuthError
from faceauth.core.logging import get_logger, setup_logging
from faceauth.domain.value_objects.authentication import AuthPhase
from faceauth.services.crypto.decryption import DecryptionOrchestrator
from faceauth.services.crypto.envelope_codec import EnvelopeCodec
from faceauth.services.crypto.key_candidates import KeyCandidateResolver
from faceauth.services.crypto.key_derivation import KeyDeriver
from faceauth.services.recognition.insight_face import InsightFaceDetector
from faceauth.services.recognition.model_lifecycle import ModelLifecycle

logger = get_logger(__name__)


async def verify_envelope(envelope_path: str, email: str, user_id: Optional[int]) -> None:
    """
    Decrypt an envelope with the configured keys and run face detection on it.

    Args:
        envelope_path: Path to the envelope file
        email: Email the keys are derived from
        user_id: Numeric id, enables the user-specific key
    """
    envelope_file = Path(envelope_path)
    if not envelope_file.exists():
        logger.error("Envelope file not found", path=envelope_path)
        sys.exit(1)

    try:
        codec = EnvelopeCodec()
        parsed = codec.parse(envelope_file.read_bytes())
        logger.info(
            "Envelope parsed",
            kind=parsed.kind,
            content_type=parsed.content_type
        )

        resolver = KeyCandidateResolver(settings.APP_SECRET_KEY, settings.KEY_PREFIX)
        if user_id is not None:
            candidates = resolver.resolve_candidates(AuthPhase.AUTHENTICATION, email, user_id)
        else:
            candidates = resolver.resolve_candidates(AuthPhase.REGISTRATION, email)

        decryptor = DecryptionOrchestrator(
            KeyDeriver(
                salt=settings.ENCRYPTION_SALT,
                iterations=settings.KDF_ITERATIONS,
                key_size_bits=settings.KDF_KEY_SIZE_BITS,
            ),
            codec,
        )
        image_bytes = base64.b64decode(decryptor.decrypt(parsed, candidates))
        logger.info("Envelope decrypted", image_bytes=len(image_bytes))

        detector = InsightFaceDetector()
        await ModelLifecycle(detector.artifact_loaders()).ensure_loaded()
        descriptor = await detector.detect_and_extract(image_bytes)
    except FaceAuthError as e:
        logger.error("Envelope verification failed", error_type=type(e).__name__, error=str(e))
        sys.exit(1)

    if descriptor is None:
        logger.warning("No face detected in decrypted image")
        sys.exit(2)

    logger.info("Face detected", descriptor_length=int(descriptor.size))


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Check that an envelope decrypts and contains a face")
    parser.add_argument("envelope_path", help="Path to the envelope JSON (or bare ciphertext) file")
    parser.add_argument("--email", required=True, help="Email the keys are derived from")
    parser.add_argument("--user-id", type=int, help="Numeric user id, enables the user-specific key")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(verify_envelope(args.envelope_path, args.email, args.user_id))


if __name__ == "__main__":
    main()
