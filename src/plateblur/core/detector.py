from __future__ import annotations

from abc import ABC, abstractmethod
from numbers import Real
from typing import Any

from plateblur.core.errors import DetectionFailure
from plateblur.core.types import Detection

__all__ = [
    "Detector",
    "parse_detections",
    "sniff_image_mime",
]


class Detector(ABC):
    """Адаптер детектора: байты изображения -> список нормализованных детекций."""

    @abstractmethod
    def detect_plates(self, image_bytes: bytes) -> list[Detection]:
        raise NotImplementedError


def _is_number(v: object) -> bool:
    # bool is an int subclass; reject it explicitly
    return isinstance(v, Real) and not isinstance(v, bool)


def parse_detections(payload: Any) -> list[Detection]:
    """
    Проверяет JSON-ответ модели: массив объектов с `box_2d` (4 числа) и строковой `label`.

    Любое несоответствие схеме -> `DetectionFailure`.
    """
    if not isinstance(payload, list):
        raise DetectionFailure(f"expected a JSON array, got {type(payload).__name__}")

    out: list[Detection] = []
    for i, obj in enumerate(payload):
        if not isinstance(obj, dict):
            raise DetectionFailure(f"item {i}: expected an object")
        box = obj.get("box_2d")
        label = obj.get("label")
        if not isinstance(box, (list, tuple)) or len(box) != 4 or not all(_is_number(v) for v in box):
            raise DetectionFailure(f"item {i}: 'box_2d' must be 4 numbers")
        if not isinstance(label, str):
            raise DetectionFailure(f"item {i}: 'label' must be a string")
        out.append(Detection.from_box_2d(box, label))
    return out


_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def sniff_image_mime(data: bytes, default: str = "image/jpeg") -> str:
    """Определяет MIME по сигнатуре файла (для inline-передачи в модель)."""
    head = bytes(data[:16])
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    for sig, mime in _SIGNATURES:
        if head.startswith(sig):
            return mime
    return default
