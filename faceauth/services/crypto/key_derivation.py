"""PBKDF2 key derivation for image envelope keys."""
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from faceauth.core.exceptions import ConfigurationError

MIN_ITERATIONS = 1000
ALLOWED_KEY_SIZES = (128, 192, 256)


class KeyDeriver:
    """
    Strengthen low-entropy base keys into symmetric keys.

    Uses PBKDF2-HMAC-SHA256 with a fixed application-wide salt so that the
    client and the server compute the same key independently. Parameters
    are validated once, at construction, since a bad value is a deployment
    mistake rather than a per-request condition.

    Example:
        ```python
        deriver = KeyDeriver(salt="app-salt", iterations=10000, key_size_bits=256)
        key = deriver.derive("pwd-manager-temp-a@b.com-secret")
        ```
    """

    def __init__(self, salt: str, iterations: int, key_size_bits: int) -> None:
        if not salt:
            raise ConfigurationError("Encryption salt must not be empty")
        if iterations < MIN_ITERATIONS:
            raise ConfigurationError(
                f"Key derivation needs at least {MIN_ITERATIONS} iterations",
                {"iterations": iterations}
            )
        if key_size_bits not in ALLOWED_KEY_SIZES:
            raise ConfigurationError(
                "Unsupported key size",
                {"key_size_bits": key_size_bits, "allowed": list(ALLOWED_KEY_SIZES)}
            )
        self._salt = salt.encode("utf-8")
        self.iterations = iterations
        self.key_size_bits = key_size_bits

    def derive(self, base_key: str) -> bytes:
        """Derive the key bytes for a base key string."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self.key_size_bits // 8,
            salt=self._salt,
            iterations=self.iterations,
        )
        return kdf.derive(base_key.encode("utf-8"))
