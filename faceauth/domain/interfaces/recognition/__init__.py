"""Recognition interfaces."""
from .face_detector import ArtifactLoader, FaceDetector

__all__ = ["ArtifactLoader", "FaceDetector"]
