"""
Codec for the encrypted image transport envelope.

Version 1.0 ciphertexts use the OpenSSL "salted" layout produced by the
web client's crypto library:

    base64("Salted__" || salt[8] || AES-256-CBC(PKCS7(plaintext)))

The AES key and IV come from EVP_BytesToKey (MD5, one round) over the
passphrase, and the passphrase is the lowercase hex form of the
PBKDF2-derived key. The plaintext is the base64 text of the image.

Bodies are parsed into a tagged variant before any key is tried:
`StructuredEnvelope` for the JSON wrapper, `LegacyEnvelope` for older
clients that post the bare ciphertext string.
"""
import base64
import binascii
import json
import os
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from pydantic import ValidationError

from faceauth.core.exceptions import (
    MalformedEnvelopeError,
    UnsupportedEnvelopeVersionError,
    WrongKeyOrCorruptError,
)
from faceauth.core.logging import get_logger
from faceauth.domain.value_objects.envelope import (
    ENVELOPE_VERSION,
    SUPPORTED_VERSIONS,
    EncryptionEnvelope,
    LegacyEnvelope,
    ParsedEnvelope,
    StructuredEnvelope,
)

logger = get_logger(__name__)

SALTED_MAGIC = b"Salted__"
SALT_SIZE = 8
AES_KEY_SIZE = 32
AES_BLOCK_SIZE = 16


def _evp_bytes_to_key(passphrase: bytes, salt: bytes) -> Tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single round."""
    derived = b""
    block = b""
    while len(derived) < AES_KEY_SIZE + AES_BLOCK_SIZE:
        digest = hashes.Hash(hashes.MD5())
        digest.update(block + passphrase + salt)
        block = digest.finalize()
        derived += block
    return derived[:AES_KEY_SIZE], derived[AES_KEY_SIZE:AES_KEY_SIZE + AES_BLOCK_SIZE]


def _passphrase(key: bytes) -> bytes:
    return key.hex().encode("ascii")


class EnvelopeCodec:
    """Parse, encrypt and decrypt image envelopes."""

    def parse(self, body: Union[bytes, str]) -> ParsedEnvelope:
        """
        Classify a received body as a structured or legacy envelope.

        Args:
            body: Raw content of the `encryptedImage` upload

        Returns:
            StructuredEnvelope or LegacyEnvelope

        Raises:
            MalformedEnvelopeError: If the body matches neither layout
            UnsupportedEnvelopeVersionError: If the wrapper has an unknown version
        """
        if isinstance(body, bytes):
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError:
                raise MalformedEnvelopeError("Envelope is not valid UTF-8 text")

        text = body.strip()
        if not text:
            raise MalformedEnvelopeError("Envelope is empty")

        if text.startswith("{"):
            parsed: ParsedEnvelope = self._parse_structured(text)
        else:
            parsed = LegacyEnvelope(raw=text)
            logger.debug("Received legacy envelope without JSON wrapper")

        # Key-independent structure is checked once, before any key is tried
        self._split_ciphertext(parsed.ciphertext)
        return parsed

    def _parse_structured(self, text: str) -> StructuredEnvelope:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            raise MalformedEnvelopeError("Envelope wrapper is not valid JSON")

        if not isinstance(payload, dict):
            raise MalformedEnvelopeError("Envelope wrapper must be a JSON object")

        version = payload.get("version")
        if version not in SUPPORTED_VERSIONS:
            raise UnsupportedEnvelopeVersionError(
                "Unsupported envelope version",
                {"version": version if isinstance(version, str) else None}
            )

        try:
            envelope = EncryptionEnvelope.model_validate(payload)
        except ValidationError as e:
            raise MalformedEnvelopeError(
                "Envelope wrapper is missing required fields",
                {"fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()]}
            )
        return StructuredEnvelope(envelope=envelope)

    def _split_ciphertext(self, ciphertext: str) -> Tuple[bytes, bytes]:
        """Return (salt, encrypted blocks) of a salted ciphertext."""
        try:
            raw = base64.b64decode(ciphertext, validate=True)
        except (binascii.Error, ValueError):
            raise MalformedEnvelopeError("Ciphertext is not valid base64")

        header_size = len(SALTED_MAGIC) + SALT_SIZE
        body_size = len(raw) - header_size
        if (
            not raw.startswith(SALTED_MAGIC)
            or body_size < AES_BLOCK_SIZE
            or body_size % AES_BLOCK_SIZE
        ):
            raise MalformedEnvelopeError("Ciphertext does not have the salted layout")

        return raw[len(SALTED_MAGIC):header_size], raw[header_size:]

    def encode(
        self,
        plaintext_base64: str,
        content_type: str,
        key: bytes,
        salt: Optional[bytes] = None,
    ) -> EncryptionEnvelope:
        """
        Encrypt base64 image text into a version 1.0 envelope.

        Args:
            plaintext_base64: Image data, already base64 encoded
            content_type: Original image MIME type
            key: Derived key bytes
            salt: Fixed OpenSSL salt, random when omitted

        Returns:
            EncryptionEnvelope stamped with the current UTC time
        """
        if not plaintext_base64:
            raise ValueError("Nothing to encrypt")
        salt = salt if salt is not None else os.urandom(SALT_SIZE)
        if len(salt) != SALT_SIZE:
            raise ValueError(f"Salt must be {SALT_SIZE} bytes")

        aes_key, iv = _evp_bytes_to_key(_passphrase(key), salt)
        padder = padding.PKCS7(AES_BLOCK_SIZE * 8).padder()
        padded = padder.update(plaintext_base64.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).encryptor()
        encrypted = encryptor.update(padded) + encryptor.finalize()

        return EncryptionEnvelope(
            ciphertext=base64.b64encode(SALTED_MAGIC + salt + encrypted).decode("ascii"),
            content_type=content_type,
            encrypted_at=datetime.now(timezone.utc),
            version=ENVELOPE_VERSION,
        )

    def decode(self, envelope: ParsedEnvelope, key: bytes) -> str:
        """
        Decrypt an envelope with one derived key.

        Args:
            envelope: Parsed structured or legacy envelope
            key: Derived key bytes

        Returns:
            The base64 image text

        Raises:
            MalformedEnvelopeError: If the ciphertext layout is invalid
            WrongKeyOrCorruptError: If the key does not fit or the data is damaged
        """
        salt, encrypted = self._split_ciphertext(envelope.ciphertext)
        aes_key, iv = _evp_bytes_to_key(_passphrase(key), salt)
        decryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(encrypted) + decryptor.finalize()

        unpadder = padding.PKCS7(AES_BLOCK_SIZE * 8).unpadder()
        try:
            data = unpadder.update(padded) + unpadder.finalize()
            plaintext = data.decode("utf-8")
            base64.b64decode(plaintext, validate=True)
        except (ValueError, binascii.Error):
            # UnicodeDecodeError is a ValueError too
            raise WrongKeyOrCorruptError("Ciphertext did not decrypt under this key")

        if not plaintext:
            raise WrongKeyOrCorruptError("Ciphertext did not decrypt under this key")
        return plaintext
