"""
Output handling for the face detection pipeline.

Responsibility:
    Present each image's final face rectangles: either write an annotated
    copy into the save directory or show it in a window and wait for a
    key press. Optionally record every file's outcome (processed,
    skipped, unreadable) into a JSON/CSV run report.

Non-goals:
    - No detection logic.
    - No input acquisition.
    - No switching between save and display in the middle of a run.
"""

import logging
from pathlib import Path
from typing import List, Optional, Set

import cv2
import numpy as np

from facesweep.config import AppConfig
from facesweep.rectangle import Rectangle
from facesweep.report import PROCESSED, SKIPPED, UNREADABLE, ImageRecord, write_report
from facesweep.visualizer import draw_rectangles, show_image

logger = logging.getLogger(__name__)

# Keys that stop the run in display mode: 'q' and ESC
_QUIT_KEYS = {ord("q"), 27}


class OutputHandler:
    """Routes face rectangles to the configured presenter.

    Exactly one presentation mode is active for the whole run:
        - 'save': write annotated images into output.save_dir.
        - 'display': show annotated images one at a time, blocking
          until a key is pressed.

    Images without faces are logged and not presented. When
    output.report_path is set, every file is recorded with its outcome
    (process_image, record_skipped, record_unreadable) and the report
    is written by finalize().

    Usage:
        handler = OutputHandler(config)
        handler.process_image(path, image, faces)
        ...
        handler.finalize()  # Write the report, close windows
    """

    def __init__(self, config: AppConfig) -> None:
        """Initialize the output handler.

        Args:
            config: Application configuration (save dir, report, vis params).
        """
        self._config = config
        self._save_dir: Optional[Path] = (
            Path(config.output.save_dir) if config.output.save_dir is not None else None
        )
        self._mode = "save" if self._save_dir is not None else "display"
        self._report_path = config.output.report_path

        self._records: List[ImageRecord] = []
        self._written: Set[str] = set()
        self._window_opened = False

        logger.info("OutputHandler initialized: mode=%s, save_dir=%s, report=%s",
                    self._mode, self._save_dir, self._report_path)

    @property
    def mode(self) -> str:
        """Active presentation mode: 'save' or 'display'."""
        return self._mode

    def process_image(
        self,
        path: Path,
        image: np.ndarray,
        faces: List[Rectangle],
    ) -> bool:
        """Present a single image's detections.

        Args:
            path: Source file the image was decoded from.
            image: Decoded image (not modified).
            faces: Final rectangles for this image.

        Returns:
            True to continue processing, False to signal the caller
            should stop (user pressed 'q' or ESC in display mode).
        """
        h, w = image.shape[:2]
        self._record(ImageRecord(str(path), PROCESSED, w, h, tuple(faces)))

        if not faces:
            logger.info("No faces detected.")
            return True

        logger.info("Faces detected: %d", len(faces))
        for face in faces:
            logger.info(
                "Face at: x=%d, y=%d, width=%d, height=%d",
                face.x, face.y, face.width, face.height,
            )

        annotated = draw_rectangles(image, faces, self._config.visualization)

        if self._mode == "save":
            self._handle_save(path, annotated)
            return True

        return self._handle_display(annotated)

    def record_skipped(self, path: Path, image: Optional[np.ndarray], reason: str) -> None:
        """Note an image a pipeline stage rejected."""
        width = height = None
        if image is not None and getattr(image, "ndim", 0) >= 2:
            height, width = image.shape[:2]
        self._record(ImageRecord(str(path), SKIPPED, width, height, reason=reason))

    def record_unreadable(self, path: Path) -> None:
        """Note a file that could not be decoded."""
        self._record(ImageRecord(str(path), UNREADABLE, reason="decode failed"))

    def _record(self, record: ImageRecord) -> None:
        if self._report_path is not None:
            self._records.append(record)

    def _handle_save(self, path: Path, annotated: np.ndarray) -> None:
        """Write the annotated image under the save directory, same filename."""
        output_file = self._save_dir / path.name

        if output_file.name in self._written:
            logger.warning("Overwriting earlier output with the same name: %s", output_file)

        try:
            self._save_dir.mkdir(parents=True, exist_ok=True)
            ok = cv2.imwrite(str(output_file), annotated)
        except (OSError, cv2.error) as e:
            logger.error("Failed to save the image to: %s (%s)", output_file, e)
            return

        if not ok:
            logger.error("Failed to save the image to: %s", output_file)
            return

        self._written.add(output_file.name)
        logger.info("Saved processed image to: %s", output_file)

    def _handle_display(self, annotated: np.ndarray) -> bool:
        """Show the annotated image. Returns False on quit key."""
        logger.info("Press any key to continue to the next image ('q' or ESC to stop)...")
        self._window_opened = True
        key = show_image(annotated, self._config.visualization)

        if key in _QUIT_KEYS:
            logger.info("Quit signal received (key press).")
            return False

        return True

    def finalize(self) -> None:
        """Write buffered report output and close any display window.

        Must be called after all images have been processed.
        """
        if self._report_path is not None:
            try:
                write_report(self._records, self._report_path)
            except OSError as e:
                logger.error("Failed to write report to %s: %s", self._report_path, e)

        if self._window_opened:
            cv2.destroyAllWindows()
            self._window_opened = False

        self._records.clear()
        logger.info("OutputHandler finalized.")
