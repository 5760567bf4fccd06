"""
Single-flight loader for face detector model artifacts.

State machine:

    UNLOADED --ensure_loaded()--> LOADING --success--> LOADED
                                     |
                                     +----failure----> UNLOADED

There is no terminal error state: a failed load is reported to every
caller waiting on it, and the next `ensure_loaded()` starts a fresh
attempt. While a load is in flight, every caller awaits that same
attempt, so at most one load runs at a time.
"""
import asyncio
import time
from enum import Enum
from typing import List, Optional

from faceauth.core.exceptions import ModelLoadError
from faceauth.core.logging import get_logger
from faceauth.domain.interfaces.recognition.face_detector import ArtifactLoader

logger = get_logger(__name__)


class ModelState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class ModelLifecycle:
    """Owns the load state of a detector's model artifacts.

    Example:
        ```python
        lifecycle = ModelLifecycle(detector.artifact_loaders())
        await lifecycle.ensure_loaded()
        ```
    """

    def __init__(self, loaders: List[ArtifactLoader]) -> None:
        self._loaders = list(loaders)
        self._state = ModelState.UNLOADED
        self._inflight: Optional[asyncio.Future] = None
        self.load_attempts = 0

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is ModelState.LOADED

    async def ensure_loaded(self) -> None:
        """
        Make sure the artifacts are loaded, joining an in-flight load if any.

        Raises:
            ModelLoadError: If the load this caller waited on failed
        """
        if self._state is ModelState.LOADED:
            return

        if self._inflight is None:
            self._state = ModelState.LOADING
            self._inflight = asyncio.ensure_future(self._load())

        # A cancelled waiter must not cancel the load other callers share
        await asyncio.shield(self._inflight)

    async def _load(self) -> None:
        self.load_attempts += 1
        start = time.perf_counter()
        logger.info(
            "Loading face models",
            artifacts=len(self._loaders),
            attempt=self.load_attempts
        )
        try:
            # Every loader settles before the attempt ends, so a retry never overlaps a straggler
            results = await asyncio.gather(
                *(loader() for loader in self._loaders),
                return_exceptions=True
            )
        finally:
            self._inflight = None

        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            self._state = ModelState.UNLOADED
            for error in errors:
                logger.error(
                    "Face model loading failed",
                    error=str(error),
                    error_type=type(error).__name__,
                    attempt=self.load_attempts,
                    exc_info=error
                )
            raise ModelLoadError(
                "Failed to load face models",
                {"attempt": self.load_attempts, "failed_artifacts": len(errors)}
            ) from errors[0]

        self._state = ModelState.LOADED
        logger.info(
            "Face models loaded",
            duration_ms=round((time.perf_counter() - start) * 1000, 2)
        )
