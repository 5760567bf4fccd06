"""Ordered multi-key decryption of image envelopes."""
from typing import List, Sequence

from faceauth.core.exceptions import DecryptionExhaustedError, WrongKeyOrCorruptError
from faceauth.core.logging import get_logger
from faceauth.domain.value_objects.envelope import ParsedEnvelope
from faceauth.services.crypto.envelope_codec import EnvelopeCodec
from faceauth.services.crypto.key_derivation import KeyDeriver

logger = get_logger(__name__)


class DecryptionOrchestrator:
    """Try candidate base keys in order and return the first clean plaintext.

    Failures are collapsed into a single `DecryptionExhaustedError` that only
    carries the attempt count; which key failed, and why, is never exposed.
    """

    def __init__(self, key_deriver: KeyDeriver, codec: EnvelopeCodec) -> None:
        self.key_deriver = key_deriver
        self.codec = codec

    def decrypt(self, envelope: ParsedEnvelope, candidates: Sequence[str]) -> str:
        """
        Decrypt an envelope with the first candidate that fits.

        Args:
            envelope: Parsed envelope
            candidates: Base keys in priority order

        Returns:
            The base64 image text

        Raises:
            DecryptionExhaustedError: If no candidate decrypts the envelope
            MalformedEnvelopeError: If the ciphertext layout is invalid
        """
        tried: List[str] = []
        for base_key in candidates:
            # The same base key can appear twice if two schemes coincide
            if base_key in tried:
                continue
            tried.append(base_key)

            key = self.key_deriver.derive(base_key)
            try:
                plaintext = self.codec.decode(envelope, key)
            except WrongKeyOrCorruptError:
                continue

            logger.debug(
                "Envelope decrypted",
                attempt=len(tried),
                envelope_kind=envelope.kind
            )
            return plaintext

        logger.info("Envelope decryption exhausted", attempts=len(tried))
        raise DecryptionExhaustedError(attempts=len(tried))
