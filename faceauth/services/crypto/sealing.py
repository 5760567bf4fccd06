"""Client-side sealing of captured images into envelopes."""
import base64

from faceauth.services.crypto.envelope_codec import EnvelopeCodec
from faceauth.services.crypto.key_derivation import KeyDeriver


def seal_image(
    codec: EnvelopeCodec,
    key_deriver: KeyDeriver,
    image_bytes: bytes,
    content_type: str,
    base_key: str,
) -> str:
    """
    Encrypt an image the way the web client does before upload.

    Args:
        codec: Envelope codec
        key_deriver: Key deriver configured like the server
        image_bytes: Raw image data
        content_type: Image MIME type, e.g. image/jpeg
        base_key: Temporary or user-specific base key

    Returns:
        JSON envelope body for the `encryptedImage` file part
    """
    plaintext = base64.b64encode(image_bytes).decode("ascii")
    envelope = codec.encode(plaintext, content_type, key_deriver.derive(base_key))
    return envelope.to_wire()
