"""Euclidean descriptor matching."""
from typing import Sequence, Union

import numpy as np

from faceauth.core.exceptions import TemplateLengthMismatchError
from faceauth.domain.value_objects.matching import MatchDecision

Vector = Union[np.ndarray, Sequence[float]]


class DescriptorMatcher:
    """
    Compare two face descriptors by Euclidean distance.

    A pair matches when the distance is at most the threshold (inclusive).
    Lower thresholds trade more false rejects for fewer false accepts.
    """

    def compare(self, stored: Vector, live: Vector, threshold: float) -> MatchDecision:
        """
        Compare a stored template against a freshly extracted descriptor.

        Args:
            stored: Enrolled descriptor
            live: Freshly extracted descriptor
            threshold: Maximum accepted distance, >= 0

        Returns:
            MatchDecision with distance, threshold and outcome

        Raises:
            TemplateLengthMismatchError: If the vectors differ in length
            ValueError: If the threshold is negative
        """
        if threshold < 0:
            raise ValueError("Match threshold must be non-negative")

        stored_vec = np.asarray(stored, dtype=np.float64).ravel()
        live_vec = np.asarray(live, dtype=np.float64).ravel()
        if stored_vec.shape != live_vec.shape:
            raise TemplateLengthMismatchError(
                "Descriptor lengths differ",
                {"stored_length": int(stored_vec.size), "live_length": int(live_vec.size)}
            )

        distance = float(np.linalg.norm(stored_vec - live_vec))
        return MatchDecision(
            distance=distance,
            threshold=threshold,
            is_match=distance <= threshold,
        )
