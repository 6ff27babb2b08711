"""
Input handling for the face detection pipeline.

Responsibility:
    Walk a directory tree, pick out image files by extension, and decode
    them one at a time. Provides a uniform iterator interface yielding
    (path, image) tuples.

Non-goals:
    - No detection, drawing, or output writing.
    - No video or webcam sources.
    - No retry on unreadable files.

Robustness:
    - Validates the root directory at initialization time.
    - Logs and skips files that fail to decode (never crashes the run).
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# Image extensions recognized by this handler (compared lower-cased)
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff"}


def is_image_file(path: Path) -> bool:
    """Return True if the path has a recognized image extension."""
    return path.suffix.lower() in IMAGE_EXTENSIONS


def find_images(root: Union[str, Path]) -> List[Path]:
    """Recursively list regular image files under root, sorted by path."""
    return sorted(
        p for p in Path(root).rglob("*")
        if p.is_file() and is_image_file(p)
    )


def resize_to_max_height(image: np.ndarray, max_height: int) -> np.ndarray:
    """Downscale an image to max_height, preserving aspect ratio.

    Images already at or below max_height are returned unchanged.
    """
    h, w = image.shape[:2]
    if h <= max_height:
        return image

    scale = max_height / h
    new_w = max(1, int(w * scale))
    return cv2.resize(image, (new_w, max_height), interpolation=cv2.INTER_AREA)


def read_image(path: Union[str, Path]) -> Optional[np.ndarray]:
    """Decode an image file, returning None if OpenCV cannot read it."""
    image = cv2.imread(str(path))
    if image is None or image.size == 0:
        logger.warning("Could not open or decode image: %s", path)
        return None
    return image


class InputHandler:
    """Iterator over decoded images found beneath a directory.

    Usage:
        handler = InputHandler(directory="photos/")
        for path, image in handler:
            # process image

    Files are visited in sorted path order. Unreadable files are logged
    and skipped; the iterator never raises on a single bad file.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        max_height: Optional[int] = None,
    ) -> None:
        """Initialize the input handler and validate the directory.

        Args:
            directory: Root directory scanned recursively.
            max_height: Optional height to downscale taller images to.
                        None means no resizing.

        Raises:
            FileNotFoundError: If the directory does not exist.
            NotADirectoryError: If the path exists but is not a directory.
        """
        root = Path(directory)

        if not root.exists():
            raise FileNotFoundError(
                f"Input directory not found: '{root}'. "
                f"Provide an existing directory of images."
            )
        if not root.is_dir():
            raise NotADirectoryError(
                f"The provided path is not a valid directory: '{root}'."
            )

        self._root = root
        self._max_height = max_height
        self._image_paths = find_images(root)
        self._unreadable: List[Path] = []

        if not self._image_paths:
            logger.warning(
                "No image files found under: %s (extensions: %s)",
                root, sorted(IMAGE_EXTENSIONS),
            )
        else:
            logger.info("Found %d images under: %s", len(self._image_paths), root)

    def __len__(self) -> int:
        return len(self._image_paths)

    def __iter__(self) -> Iterator[Tuple[Path, np.ndarray]]:
        """Yield (path, image) for every decodable image file.

        Images are BGR numpy arrays as returned by cv2.imread, downscaled
        when max_height is configured.
        """
        for path in self._image_paths:
            logger.info("Processing image: %s", path)
            image = read_image(path)
            if image is None:
                self._unreadable.append(path)
                continue

            if self._max_height is not None:
                image = resize_to_max_height(image, self._max_height)
            yield path, image

    @property
    def root(self) -> Path:
        """Return the directory being scanned."""
        return self._root

    @property
    def unreadable(self) -> List[Path]:
        """Files skipped so far because they failed to decode."""
        return list(self._unreadable)
