"""Tests for Euclidean descriptor matching."""
import numpy as np
import pytest

from faceauth.core.exceptions import TemplateLengthMismatchError
from faceauth.services.matching.descriptor_matcher import DescriptorMatcher


@pytest.fixture
def matcher() -> DescriptorMatcher:
    return DescriptorMatcher()


class TestDescriptorMatcher:
    """Test suite for DescriptorMatcher."""

    @pytest.mark.parametrize("threshold", [0.0, 0.6, 10.0])
    def test_identical_vectors_always_match(self, matcher, threshold):
        vector = np.random.default_rng(7).normal(size=128)
        decision = matcher.compare(vector, vector.copy(), threshold)
        assert decision.distance == 0.0
        assert decision.is_match is True

    def test_boundary_is_inclusive(self, matcher):
        """A 3-4-5 triangle puts the distance exactly on the threshold."""
        decision = matcher.compare([0.0, 0.0], [3.0, 4.0], 5.0)
        assert decision.distance == 5.0
        assert decision.is_match is True

    def test_just_over_threshold_is_rejected(self, matcher):
        decision = matcher.compare([0.0, 0.0], [3.0, 4.0], 4.999)
        assert decision.is_match is False
        assert decision.threshold == 4.999

    def test_accepts_lists_and_arrays(self, matcher):
        stored = [0.1] * 128
        live = np.full(128, 0.1, dtype=np.float32) + 0.01
        decision = matcher.compare(stored, live, 0.6)
        assert decision.distance == pytest.approx(0.01 * np.sqrt(128), rel=1e-4)
        assert decision.is_match is True

    def test_length_mismatch_raises_instead_of_rejecting(self, matcher):
        with pytest.raises(TemplateLengthMismatchError) as exc_info:
            matcher.compare([0.0] * 128, [0.0] * 512, 0.6)
        assert exc_info.value.details == {"stored_length": 128, "live_length": 512}

    def test_negative_threshold_is_refused(self, matcher):
        with pytest.raises(ValueError):
            matcher.compare([0.0], [0.0], -0.1)
