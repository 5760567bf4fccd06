"""Configuration settings for the face authentication service."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    These settings are loaded from environment variables with the following precedence:
    1. Environment variables
    2. .env file
    3. Default values

    Attributes:
        ENCRYPTION_SALT: Fixed salt shared with clients for key derivation
        APP_SECRET_KEY: Application secret mixed into every base key
        FACE_MATCH_THRESHOLD: Maximum Euclidean distance accepted as a match
    """
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",  # No prefix for environment variables
    )

    # Core Settings
    PROJECT_NAME: str = "Face Authentication Service"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"

    # Key Derivation Settings (must match the client)
    ENCRYPTION_SALT: str
    APP_SECRET_KEY: str
    KEY_PREFIX: str = "pwd-manager"
    KDF_ITERATIONS: int = 10000
    KDF_KEY_SIZE_BITS: int = 256

    # Face Matching Settings
    FACE_MATCH_THRESHOLD: float = 1.0
    DESCRIPTOR_DIMENSION: int = 512

    # Face Detection Settings
    MODEL_NAME: str = "buffalo_l"
    MODEL_CACHE_DIR: str = ".model_cache"
    DETECTION_MODEL_FILE: str = "det_10g.onnx"
    RECOGNITION_MODEL_FILE: str = "w600k_r50.onnx"
    DETECTION_SIZE: int = 640
    MIN_FACE_CONFIDENCE: float = 0.5
    MAX_IMAGE_PIXELS: int = 1920 * 1080  # ~2MP (Full HD)

    # Optional settings with defaults
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

settings = Settings()
