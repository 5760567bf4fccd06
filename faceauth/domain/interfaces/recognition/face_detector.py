"""Face detector interface."""
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

import numpy as np

ArtifactLoader = Callable[[], Awaitable[None]]


class FaceDetector(ABC):
    """Interface for turning an image into a single face descriptor."""

    @property
    @abstractmethod
    def descriptor_dimension(self) -> int:
        """Length of every descriptor this detector produces."""
        pass

    @abstractmethod
    def artifact_loaders(self) -> List[ArtifactLoader]:
        """
        Return one loader per independent model artifact.

        The loaders have no ordering dependency and may be awaited
        concurrently. Each loader must be safe to call again after a
        failed attempt.
        """
        pass

    @abstractmethod
    async def detect_and_extract(self, image_bytes: bytes) -> Optional[np.ndarray]:
        """
        Detect the most confident face and extract its descriptor.

        Args:
            image_bytes: Raw (decrypted) image data

        Returns:
            Descriptor vector of length `descriptor_dimension`, or None when
            no face is found.

        Raises:
            InvalidImageError: If the image cannot be decoded
        """
        pass
