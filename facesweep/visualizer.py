"""
Visualization for the face detection pipeline.

Responsibility:
    Draw face rectangles onto an image and show it in a window. Drawing
    produces an annotated copy of the image and performs no I/O.

Non-goals:
    - No file writing.
    - No detection or model logic.
"""

from typing import List

import cv2
import numpy as np

from facesweep.config import VisualizationConfig
from facesweep.rectangle import Rectangle


def draw_rectangles(
    image: np.ndarray,
    rectangles: List[Rectangle],
    config: VisualizationConfig,
) -> np.ndarray:
    """Draw face rectangles onto an image.

    Args:
        image: Input image (not modified, a copy is returned).
        rectangles: Face rectangles to render.
        config: Visualization parameters (color, thickness).

    Returns:
        A new numpy array with the rectangles drawn.
    """
    annotated = image.copy()

    for rect in rectangles:
        cv2.rectangle(
            annotated,
            (rect.x, rect.y),
            (rect.x2, rect.y2),
            color=config.box_color,
            thickness=config.thickness,
        )

    return annotated


def show_image(annotated: np.ndarray, config: VisualizationConfig) -> int:
    """Show an annotated image and block until a key is pressed.

    Returns:
        The key code pressed (masked to 8 bits).
    """
    cv2.imshow(config.window_name, annotated)
    return cv2.waitKey(0) & 0xFF
