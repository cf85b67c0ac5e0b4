from __future__ import annotations

import cv2
import numpy as np
import pytest

from plateblur.core.detector import Detector
from plateblur.core.types import Detection


def noise_image(w: int = 100, h: int = 100, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def png_bytes(img: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return bytes(buf.tobytes())


class FakeDetector(Detector):
    """Returns canned detections (or raises) and records every call."""

    def __init__(self, result: list[Detection] | None = None, exc: Exception | None = None, on_call=None) -> None:
        self.result = list(result or [])
        self.exc = exc
        self.on_call = on_call
        self.calls: list[bytes] = []

    def detect_plates(self, image_bytes: bytes) -> list[Detection]:
        self.calls.append(image_bytes)
        if self.on_call is not None:
            self.on_call(image_bytes)
        if self.exc is not None:
            raise self.exc
        return list(self.result)


@pytest.fixture
def plate() -> Detection:
    return Detection.from_box_2d([100, 100, 300, 300], "plate")


@pytest.fixture
def image_png() -> bytes:
    return png_bytes(noise_image())
