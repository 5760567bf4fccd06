"""CLI tool that encrypts an image into an upload envelope, like the web client."""
import argparse
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from faceauth.core.config import settings
from faceauth.core.exceptions import ConfigurationError
from faceauth.core.logging import get_logger, setup_logging
from faceauth.services.crypto.envelope_codec import EnvelopeCodec
from faceauth.services.crypto.key_candidates import KeyCandidateResolver
from faceauth.services.crypto.key_derivation import KeyDeriver
from faceauth.services.crypto.sealing import seal_image

logger = get_logger(__name__)


def seal(image_path: str, email: str, user_id: Optional[int], output: Optional[str]) -> None:
    """
    Encrypt an image file and write the envelope JSON.

    Args:
        image_path: Path to the image file
        email: Email the key is derived from
        user_id: Use the user-specific key for this id instead of the temporary key
        output: Output file, stdout when omitted
    """
    image_file = Path(image_path)
    if not image_file.exists():
        logger.error("Image file not found", path=image_path)
        sys.exit(1)

    content_type = mimetypes.guess_type(image_file.name)[0] or "application/octet-stream"

    try:
        key_deriver = KeyDeriver(
            salt=settings.ENCRYPTION_SALT,
            iterations=settings.KDF_ITERATIONS,
            key_size_bits=settings.KDF_KEY_SIZE_BITS,
        )
        resolver = KeyCandidateResolver(settings.APP_SECRET_KEY, settings.KEY_PREFIX)
    except ConfigurationError as e:
        logger.error("Invalid key derivation settings", error=str(e), **e.details)
        sys.exit(1)

    if user_id is not None:
        base_key = resolver.user_key(user_id, email)
    else:
        base_key = resolver.temporary_key(email)

    body = seal_image(EnvelopeCodec(), key_deriver, image_file.read_bytes(), content_type, base_key)

    if output:
        Path(output).write_text(body, encoding="utf-8")
        logger.info(
            "Envelope written",
            path=output,
            content_type=content_type,
            scheme="user" if user_id is not None else "temporary"
        )
    else:
        sys.stdout.write(body + "\n")


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Encrypt an image into an upload envelope")
    parser.add_argument("image_path", help="Path to the image file")
    parser.add_argument("--email", required=True, help="Email the key is derived from")
    parser.add_argument("--user-id", type=int, help="Use the user-specific key for this id")
    parser.add_argument("--output", "-o", help="Write the envelope to this file instead of stdout")
    args = parser.parse_args()

    setup_logging()
    seal(args.image_path, args.email, args.user_id, args.output)


if __name__ == "__main__":
    main()
