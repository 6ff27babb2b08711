"""
Postprocessing for the face detection pipeline.

Responsibility:
    Collapse overlapping candidate rectangles into one rectangle per face
    with a greedy, first-seen-wins suppression pass.

Overlap measure:
    intersection_area / min(area_a, area_b)

    A candidate is dropped when this exceeds the threshold against any
    rectangle already kept. Candidates are never re-ranked by size, so the
    earliest of two overlapping rectangles always survives.

Non-goals:
    - No drawing, saving, or display logic.
    - No score-based ranking (the cascade reports no scores).
"""

import logging
from typing import List, Sequence

from facesweep.rectangle import Rectangle

logger = logging.getLogger(__name__)

DEFAULT_OVERLAP_THRESHOLD = 0.3


def suppress(
    candidates: Sequence[Rectangle],
    threshold: float = DEFAULT_OVERLAP_THRESHOLD,
) -> List[Rectangle]:
    """Drop candidates that duplicate an earlier, already-kept rectangle.

    Args:
        candidates: Rectangles in detection order.
        threshold: Maximum tolerated overlap ratio in [0.0, 1.0].

    Returns:
        The retained rectangles, in their original relative order. No two
        of them overlap by more than the threshold.

    Raises:
        ValueError: If threshold is outside [0.0, 1.0].
    """
    if not (0.0 <= threshold <= 1.0):
        raise ValueError(f"threshold must be in [0.0, 1.0], got {threshold}.")

    # O(n^2) against the kept set; n is a handful of faces per image
    kept: List[Rectangle] = []
    for candidate in candidates:
        if any(candidate.overlap_ratio(existing) > threshold for existing in kept):
            continue
        kept.append(candidate)

    if len(kept) != len(candidates):
        logger.debug(
            "Suppressed %d of %d candidates", len(candidates) - len(kept), len(candidates)
        )

    return kept
