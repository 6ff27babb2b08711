"""
Preprocessing for the face detection pipeline.

Responsibility:
    Reduce a raw decoded image to a denoised, contrast-normalized
    single-channel image that the Haar cascade can search.

Filter chain (fixed order, no branching on content):
    grayscale → Gaussian blur → histogram equalization → bilateral filter

Non-goals:
    - No image acquisition or I/O.
    - No resizing; output has the input's width and height.
    - No detection or coordinate mapping.
"""

import numpy as np
import cv2

from facesweep.config import FilterConfig


class InvalidImage(ValueError):
    """Raised when an image cannot be preprocessed (empty, wrong type or shape)."""


def filter_image(image: np.ndarray, config: FilterConfig) -> np.ndarray:
    """Run the preprocessing filter chain on a decoded image.

    Args:
        image: BGR (H, W, 3), BGRA (H, W, 4) or grayscale (H, W) uint8 array.
               It is never modified.
        config: FilterConfig providing the kernel and bilateral parameters.

    Returns:
        A new single-channel uint8 array of shape (H, W).

    Raises:
        InvalidImage: If the image is None, has a zero dimension, is not
                      uint8, or has an unsupported number of channels.
    """
    gray = _to_grayscale(image)

    kernel = (config.gaussian_kernel, config.gaussian_kernel)
    blurred = cv2.GaussianBlur(gray, kernel, 0)

    equalized = cv2.equalizeHist(blurred)

    return cv2.bilateralFilter(
        equalized,
        config.bilateral_diameter,
        config.bilateral_sigma_color,
        config.bilateral_sigma_space,
    )


def _to_grayscale(image: np.ndarray) -> np.ndarray:
    """Validate the image and return a single-channel copy of it."""
    if image is None or not isinstance(image, np.ndarray):
        raise InvalidImage(
            "Cannot preprocess a missing image. "
            "Ensure the file decoded to a numpy array."
        )

    if image.ndim not in (2, 3) or image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidImage(
            f"Cannot preprocess an empty or malformed image (shape={image.shape})."
        )

    if image.dtype != np.uint8:
        raise InvalidImage(
            f"Expected an 8-bit image, got dtype {image.dtype}."
        )

    if image.ndim == 2:
        return image.copy()

    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0].copy()
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)

    raise InvalidImage(
        f"Expected 1, 3 or 4 channels, got {channels} channels."
    )
