"""
Run report for a directory sweep.

Every file the walker found ends up as one ImageRecord with the outcome
the run loop reached for it:

    processed   decoded, filtered, searched; faces may be empty
    skipped     decoded but rejected by a pipeline stage (reason given)
    unreadable  could not be decoded

The report is written once, at the end of the run, as JSON or CSV
depending on the file suffix.
"""

import csv
import json
import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from facesweep.rectangle import Rectangle

logger = logging.getLogger(__name__)

PROCESSED = "processed"
SKIPPED = "skipped"
UNREADABLE = "unreadable"

_CSV_FIELDS = [
    "path", "status", "reason", "image_width", "image_height",
    "face", "x", "y", "width", "height",
]


@dataclass(frozen=True)
class ImageRecord:
    """Outcome of one file in the sweep."""

    path: str
    status: str
    width: Optional[int] = None
    height: Optional[int] = None
    faces: Tuple[Rectangle, ...] = ()
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "status": self.status,
            "reason": self.reason,
            "image_width": self.width,
            "image_height": self.height,
            "faces": [f.to_dict() for f in self.faces],
        }


def summarize(records: Iterable[ImageRecord]) -> dict:
    """Count records per status, plus the total number of faces."""
    records = list(records)
    counts = Counter(r.status for r in records)
    return {
        PROCESSED: counts[PROCESSED],
        SKIPPED: counts[SKIPPED],
        UNREADABLE: counts[UNREADABLE],
        "faces": sum(len(r.faces) for r in records),
    }


def _csv_rows(record: ImageRecord) -> List[dict]:
    base = {
        "path": record.path,
        "status": record.status,
        "reason": record.reason or "",
        "image_width": "" if record.width is None else record.width,
        "image_height": "" if record.height is None else record.height,
    }
    if not record.faces:
        return [base]
    return [
        {**base, "face": index, **face.to_dict()}
        for index, face in enumerate(record.faces)
    ]


def write_report(records: Sequence[ImageRecord], output_path: str) -> None:
    """Write records sorted by path to a .json or .csv file.

    JSON holds a summary block and one entry per image. CSV holds one row
    per face, or a single row with empty face columns for images without
    faces.

    Raises:
        ValueError: If the suffix is neither .json nor .csv.
        OSError: If the output path is not writable.
    """
    path = Path(output_path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".csv"):
        raise ValueError(f"Unsupported report format: '{suffix}'. Use .json or .csv.")

    ordered = sorted(records, key=lambda r: r.path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix == ".json":
        payload = {
            "summary": summarize(ordered),
            "images": [r.to_dict() for r in ordered],
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
    else:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=_CSV_FIELDS)
            writer.writeheader()
            for record in ordered:
                writer.writerows(_csv_rows(record))

    logger.info("Report saved: %s (%d files)", path, len(ordered))
