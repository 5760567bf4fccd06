"""
InsightFace-based implementation of the face detector.

This module provides the concrete detector used by the authentication
service. It decodes the decrypted image, runs face detection, keeps the
single most confident face and extracts its normalized embedding.

Key Features:
    - Detection and recognition models loaded as independent artifacts
    - Highest-confidence face selection when several faces are present
    - Downscaling of oversized captures before detection
    - Inference off the event loop

Example:
    ```python
    detector = InsightFaceDetector()
    lifecycle = ModelLifecycle(detector.artifact_loaders())
    await lifecycle.ensure_loaded()

    with open("selfie.jpg", "rb") as f:
        descriptor = await detector.detect_and_extract(f.read())
    ```

Note:
    This implementation uses CPU inference by default. For GPU support,
    pass providers including 'CUDAExecutionProvider'.
"""
import asyncio
import math
from pathlib import Path
from typing import Any, List, Optional, Sequence

import cv2
import numpy as np
from insightface.app.common import Face as InsightFace
from insightface.model_zoo import get_model

from faceauth.core.config import settings
from faceauth.core.exceptions import InvalidImageError, ModelLoadError
from faceauth.core.logging import get_logger
from faceauth.domain.interfaces.recognition.face_detector import ArtifactLoader, FaceDetector

logger = get_logger(__name__)


class InsightFaceDetector(FaceDetector):
    """
    Face detector backed by InsightFace ONNX models.

    Attributes:
        model_dir: Directory holding the model pack's ONNX files
        detection_model: SCRFD/RetinaFace detector, None until loaded
        recognition_model: ArcFace embedder, None until loaded
    """

    def __init__(
        self,
        model_dir: Optional[Path] = None,
        descriptor_dimension: int = settings.DESCRIPTOR_DIMENSION,
        providers: Sequence[str] = ("CPUExecutionProvider",),
    ) -> None:
        self.model_dir = model_dir or (
            Path(settings.MODEL_CACHE_DIR).expanduser() / "models" / settings.MODEL_NAME
        )
        self._descriptor_dimension = descriptor_dimension
        self._providers = list(providers)
        self.detection_model: Any = None
        self.recognition_model: Any = None

    @property
    def descriptor_dimension(self) -> int:
        return self._descriptor_dimension

    def artifact_loaders(self) -> List[ArtifactLoader]:
        return [self._load_detection_model, self._load_recognition_model]

    def _get_model(self, filename: str) -> Any:
        path = self.model_dir / filename
        if not path.exists():
            raise ModelLoadError("Model artifact not found", {"artifact": filename})
        model = get_model(str(path), providers=self._providers)
        if model is None:
            raise ModelLoadError("Unrecognized model artifact", {"artifact": filename})
        return model

    def _prepare_detection_model(self) -> Any:
        model = self._get_model(settings.DETECTION_MODEL_FILE)
        model.prepare(
            ctx_id=0,
            input_size=(settings.DETECTION_SIZE, settings.DETECTION_SIZE),
            det_thresh=settings.MIN_FACE_CONFIDENCE,
        )
        return model

    def _prepare_recognition_model(self) -> Any:
        model = self._get_model(settings.RECOGNITION_MODEL_FILE)
        model.prepare(ctx_id=0)
        return model

    async def _load_detection_model(self) -> None:
        self.detection_model = await asyncio.to_thread(self._prepare_detection_model)
        logger.debug("Detection model ready", artifact=settings.DETECTION_MODEL_FILE)

    async def _load_recognition_model(self) -> None:
        self.recognition_model = await asyncio.to_thread(self._prepare_recognition_model)
        logger.debug("Recognition model ready", artifact=settings.RECOGNITION_MODEL_FILE)

    def _load_and_validate_image(self, image_bytes: bytes) -> np.ndarray:
        """Decode image bytes and downscale images above the pixel budget."""
        nparr = np.frombuffer(image_bytes, np.uint8)
        img = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None

        if img is None:
            raise InvalidImageError("Failed to decode image")

        height, width = img.shape[:2]
        pixels = width * height

        # Only resize if image is too large
        if pixels > settings.MAX_IMAGE_PIXELS:
            scale = math.sqrt(settings.MAX_IMAGE_PIXELS / pixels)
            new_width = int(width * scale)
            new_height = int(height * scale)

            logger.debug(
                "Resizing large image",
                original_size=(width, height),
                new_size=(new_width, new_height)
            )

            img = cv2.resize(
                img,
                (new_width, new_height),
                interpolation=cv2.INTER_AREA
            )

        return img

    def _extract(self, image: np.ndarray) -> Optional[np.ndarray]:
        # max_num=0 keeps every detection so we can pick by score, not by area
        bboxes, kpss = self.detection_model.detect(image, max_num=0, metric="default")

        logger.debug(
            "Face detection results",
            faces_found=int(bboxes.shape[0]),
            image_shape=image.shape
        )

        if bboxes.shape[0] == 0 or kpss is None:
            return None

        best = int(np.argmax(bboxes[:, 4]))
        face = InsightFace(
            bbox=bboxes[best, 0:4],
            kps=kpss[best],
            det_score=float(bboxes[best, 4]),
        )
        self.recognition_model.get(image, face)
        return np.asarray(face.normed_embedding, dtype=np.float32)

    async def detect_and_extract(self, image_bytes: bytes) -> Optional[np.ndarray]:
        """
        Detect the most confident face and return its normalized embedding.
        """
        if self.detection_model is None or self.recognition_model is None:
            raise ModelLoadError("Face models are not loaded")

        img = self._load_and_validate_image(image_bytes)
        return await asyncio.to_thread(self._extract, img)
