"""
Face detector loading for the face detection system.

Responsibility:
    Define the FaceDetector capability the pipeline depends on, provide
    the Haar cascade implementation of it, and load that cascade from
    disk once at startup.

Non-goals:
    - No preprocessing, suppression, or image-level logic.
    - No training, tuning, or automatic model downloading.
    - No fallback to alternative models.

Failure behavior:
    - A cascade file that cannot be found raises FileNotFoundError
      listing every location that was tried.
    - A cascade file that OpenCV cannot parse raises RuntimeError.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Tuple

import cv2
import numpy as np

from facesweep.config import ModelConfig, get_project_root
from facesweep.rectangle import Rectangle

logger = logging.getLogger(__name__)


class FaceDetector(ABC):
    """A pre-trained face-region detector.

    Implementations must treat detect_multi_scale as a read-only query:
    the same instance is shared by every image in a run.
    """

    @abstractmethod
    def detect_multi_scale(
        self,
        image: np.ndarray,
        scale_factor: float,
        min_neighbors: int,
        min_size: Tuple[int, int],
    ) -> List[Rectangle]:
        """Return candidate face rectangles found in a grayscale image."""


class CascadeFaceDetector(FaceDetector):
    """FaceDetector backed by an OpenCV Haar cascade classifier."""

    def __init__(self, classifier: cv2.CascadeClassifier, source: str = "") -> None:
        self._classifier = classifier
        self.source = source

    def detect_multi_scale(
        self,
        image: np.ndarray,
        scale_factor: float,
        min_neighbors: int,
        min_size: Tuple[int, int],
    ) -> List[Rectangle]:
        faces = self._classifier.detectMultiScale(
            image,
            scaleFactor=scale_factor,
            minNeighbors=min_neighbors,
            flags=cv2.CASCADE_SCALE_IMAGE,
            minSize=min_size,
        )
        # OpenCV returns an empty tuple when nothing is found
        return [
            Rectangle(x=int(x), y=int(y), width=int(w), height=int(h))
            for (x, y, w, h) in faces
        ]


def _candidate_paths(cascade_path: str) -> List[Path]:
    """Locations searched for the cascade file, in order."""
    path = Path(cascade_path)
    if path.is_absolute():
        return [path]

    candidates = [path, get_project_root() / path]
    # Wheels from PyPI ship the stock cascades under cv2.data
    cv2_data = getattr(cv2, "data", None)
    if cv2_data is not None:
        candidates.append(Path(cv2_data.haarcascades) / path)
    return candidates


def load_detector(config: ModelConfig) -> CascadeFaceDetector:
    """Load the Haar cascade face detector.

    Args:
        config: ModelConfig containing the cascade file path.

    Returns:
        A CascadeFaceDetector ready to be shared across the run.

    Raises:
        FileNotFoundError: If the cascade file cannot be located.
        RuntimeError: If OpenCV fails to load the cascade.
    """
    candidates = _candidate_paths(config.cascade_path)
    resolved = next((p for p in candidates if p.is_file()), None)

    # Fail fast with the searched locations
    if resolved is None:
        searched = "\n".join(f"    {p}" for p in candidates)
        raise FileNotFoundError(
            f"Face cascade not found: {config.cascade_path}\n"
            f"  Searched:\n{searched}\n"
            f"  Provide the file or update 'model.cascade_path' in your config."
        )

    logger.info("Loading face cascade: %s", resolved)
    try:
        classifier = cv2.CascadeClassifier(str(resolved))
    except cv2.error as e:
        raise RuntimeError(
            f"Failed to parse face cascade {resolved}.\n"
            f"  OpenCV error: {e}"
        ) from e

    if classifier.empty():
        raise RuntimeError(
            f"Face cascade loaded from {resolved} is empty. "
            f"Ensure the file is a valid OpenCV cascade XML."
        )

    logger.info("Face cascade loaded successfully.")
    return CascadeFaceDetector(classifier, source=str(resolved))
