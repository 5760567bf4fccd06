"""Key derivation, envelope codec and multi-key decryption."""
from .decryption import DecryptionOrchestrator
from .envelope_codec import EnvelopeCodec
from .key_candidates import KeyCandidateResolver
from .key_derivation import KeyDeriver
from .sealing import seal_image

__all__ = [
    "DecryptionOrchestrator",
    "EnvelopeCodec",
    "KeyCandidateResolver",
    "KeyDeriver",
    "seal_image",
]
