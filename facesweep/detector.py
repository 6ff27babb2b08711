"""
Detection adapter: the bridge between a filtered image and the face
detector capability.

Responsibility:
    Derive a resolution-adaptive minimum search window and query the
    FaceDetector with the configured scale step and neighbour count.

Constraints:
    - The capability is passed in per call; nothing is cached here.
    - Rectangles are returned exactly as the capability reports them,
      in its native order. Deduplication is the suppressor's job.
"""

import logging
from typing import List

import numpy as np

from facesweep.config import DetectionConfig
from facesweep.model_loader import FaceDetector
from facesweep.rectangle import Rectangle

logger = logging.getLogger(__name__)


def min_window_size(width: int, height: int, config: DetectionConfig) -> int:
    """Smallest face window worth searching for an image of this size.

    One tenth of the shorter side by default, but never below the floor
    so that small images still get searched.

    >>> min_window_size(50, 50, DetectionConfig())
    60
    >>> min_window_size(2000, 1000, DetectionConfig())
    100
    """
    return max(config.min_window_floor, min(width, height) // config.min_window_divisor)


def detect_faces(
    filtered: np.ndarray,
    capability: FaceDetector,
    config: DetectionConfig,
) -> List[Rectangle]:
    """Run the face detector over a preprocessed grayscale image.

    Args:
        filtered: Single-channel image from filter_image().
        capability: Loaded FaceDetector shared across the run.
        config: Detection parameters (scale step, neighbours, window floor).

    Returns:
        Candidate rectangles in the order the detector reported them.
    """
    h, w = filtered.shape[:2]
    window = min_window_size(w, h, config)
    logger.debug("Searching %dx%d image with min window %dpx", w, h, window)

    candidates = capability.detect_multi_scale(
        filtered,
        scale_factor=config.scale_factor,
        min_neighbors=config.min_neighbors,
        min_size=(window, window),
    )
    return list(candidates)
