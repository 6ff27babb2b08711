"""
Rectangle data transfer object.

This module defines the Rectangle dataclass, the region type produced
by the face detector capability, filtered by the overlap suppressor and
returned by DetectionPipeline.run(). It carries the small amount of
geometry the suppressor needs (area and pairwise overlap) and nothing
else.

Non-goals:
    - No rendering logic.
    - No file I/O.
    - No scaling or coordinate transforms between image sizes.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rectangle:
    """An axis-aligned face region in image pixel coordinates.

    Attributes:
        x: Left edge (absolute pixels).
        y: Top edge (absolute pixels).
        width: Width in pixels, strictly positive.
        height: Height in pixels, strictly positive.
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Rectangle width and height must be positive, "
                f"got width={self.width}, height={self.height}."
            )

    @property
    def x2(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.height

    @property
    def area(self) -> int:
        """Rectangle area in pixels."""
        return self.width * self.height

    def intersection_area(self, other: "Rectangle") -> int:
        """Area shared with another rectangle, 0 when they are disjoint."""
        overlap_w = min(self.x2, other.x2) - max(self.x, other.x)
        overlap_h = min(self.y2, other.y2) - max(self.y, other.y)
        if overlap_w <= 0 or overlap_h <= 0:
            return 0
        return overlap_w * overlap_h

    def overlap_ratio(self, other: "Rectangle") -> float:
        """Intersection area divided by the smaller of the two areas.

        Unlike IoU this reaches 1.0 whenever one rectangle lies entirely
        inside the other, so a small box nested in a large one counts as a
        duplicate.
        """
        return self.intersection_area(other) / min(self.area, other.area)

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
