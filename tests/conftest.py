"""
Shared fixtures: a scripted stand-in for the Haar cascade.
"""

from typing import List, Optional, Sequence

import numpy as np
import pytest

from facesweep.model_loader import FaceDetector
from facesweep.rectangle import Rectangle


class FakeFaceDetector(FaceDetector):
    """Returns a fixed list of rectangles and records every call."""

    def __init__(self, faces: Optional[Sequence[Rectangle]] = None, error: Optional[Exception] = None):
        self.faces = list(faces or [])
        self.error = error
        self.calls: List[dict] = []

    def detect_multi_scale(self, image, scale_factor, min_neighbors, min_size):
        self.calls.append({
            "shape": image.shape,
            "dtype": image.dtype,
            "scale_factor": scale_factor,
            "min_neighbors": min_neighbors,
            "min_size": min_size,
        })
        if self.error is not None:
            raise self.error
        return list(self.faces)


@pytest.fixture
def fake_detector_factory():
    return FakeFaceDetector


@pytest.fixture
def noisy_frame():
    """A deterministic 240x320 BGR frame with some texture."""
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(240, 320, 3), dtype=np.uint8)
