"""Service interfaces package."""
from .auth import TokenIssuer
from .recognition import FaceDetector
from .storage import TemplateStore

__all__ = ["FaceDetector", "TemplateStore", "TokenIssuer"]
