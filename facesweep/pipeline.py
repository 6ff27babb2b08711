"""
DetectionPipeline, the single public API for per-image face detection.

Public contract:
    DetectionPipeline.run(image: np.ndarray, capability: FaceDetector)
        -> list[Rectangle]

Constraints:
    - The face detector is loaded once by the caller and passed in on
      every call; the pipeline holds configuration only.
    - Each call is deterministic and keeps no reference to the image.
    - Any stage failure propagates to the caller, who decides whether
      to skip the image. Nothing is retried.

Non-goals:
    - No file reading, display, or saving.
    - No state carried between images.
"""

import logging
from typing import List, Optional

import numpy as np

from facesweep.config import AppConfig, load_config
from facesweep.detector import detect_faces
from facesweep.model_loader import FaceDetector
from facesweep.postprocessor import suppress
from facesweep.preprocessor import filter_image
from facesweep.rectangle import Rectangle

logger = logging.getLogger(__name__)


class DetectionPipeline:
    """Preprocess → detect → suppress, one image at a time.

    Usage:
        detector = load_detector(config.model)
        pipeline = DetectionPipeline(config)
        faces = pipeline.run(image, detector)
    """

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        """Initialize the pipeline.

        Args:
            config: Application configuration. If None, safe defaults
                    are used (no config file required).
        """
        if config is None:
            config = load_config()

        self._config = config

        logger.debug(
            "Pipeline ready (scale_factor=%.2f, min_neighbors=%d, overlap_threshold=%.2f)",
            config.detection.scale_factor,
            config.detection.min_neighbors,
            config.detection.overlap_threshold,
        )

    def run(self, image: np.ndarray, capability: FaceDetector) -> List[Rectangle]:
        """Detect faces in a single decoded image.

        Args:
            image: BGR, BGRA or grayscale uint8 array. Not modified.
            capability: The loaded FaceDetector.

        Returns:
            Face rectangles, deduplicated, in detection order. Empty if
            no faces were found.

        Raises:
            InvalidImage: If the image is empty or malformed.
            cv2.error: If an OpenCV stage fails on this image.
        """
        filtered = filter_image(image, self._config.filters)
        candidates = detect_faces(filtered, capability, self._config.detection)
        return suppress(candidates, self._config.detection.overlap_threshold)

    @property
    def config(self) -> AppConfig:
        """Return the active configuration (read-only)."""
        return self._config
