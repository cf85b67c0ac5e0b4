from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

__all__ = [
    "NORM_SCALE",
    "Detection",
    "RedactionRegion",
]

# Detector coordinates are proportions of height/width scaled by 1000.
NORM_SCALE = 1000.0


@dataclass(frozen=True, slots=True)
class Detection:
    """Одна детекция номера: bbox в нормализованных координатах 0..1000 + метка."""

    ymin: float
    xmin: float
    ymax: float
    xmax: float
    label: str = ""

    @classmethod
    def from_box_2d(cls, box_2d: Sequence[float], label: str = "") -> "Detection":
        ymin, xmin, ymax, xmax = box_2d
        return cls(ymin=float(ymin), xmin=float(xmin), ymax=float(ymax), xmax=float(xmax), label=str(label))

    @property
    def box_2d(self) -> tuple[float, float, float, float]:
        return (self.ymin, self.xmin, self.ymax, self.xmax)


@dataclass(frozen=True, slots=True)
class RedactionRegion:
    """Прямоугольник в пикселях (x, y, width, height), производный от `Detection`."""

    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        return self.x + self.width

    @property
    def y2(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def clamp(self, w: int, h: int) -> "RedactionRegion":
        """Ограничивает прямоугольник границами изображения; ширина/высота не бывают отрицательными."""
        x1 = max(0, min(w, self.x))
        y1 = max(0, min(h, self.y))
        x2 = max(x1, min(w, self.x + max(0, self.width)))
        y2 = max(y1, min(h, self.y + max(0, self.height)))
        return RedactionRegion(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    def contains_point(self, x: float, y: float) -> bool:
        return self.x <= x < self.x2 and self.y <= y < self.y2

    def slices(self) -> tuple[slice, slice]:
        """(rows, cols) for numpy indexing: `img[region.slices()]`."""
        return slice(self.y, self.y2), slice(self.x, self.x2)
