"""
Обезличивание областей номеров на растровом изображении.

Для каждой детекции (в порядке входа, без сортировки):
1) нормализованный bbox 0..1000 -> прямоугольник в пикселях;
2) расширение на `pad_frac` с каждой стороны + ограничение границами кадра;
3) пикселизация: даунскейл до ~5% (nearest) во временный буфер и апскейл обратно (nearest);
4) гауссово размытие (sigma ~12px) и затемнение x0.9 поверх той же области.

Пиксели вне (расширенных) прямоугольников не изменяются. Повторное применение к уже
обработанной области может дополнительно деградировать её, идемпотентность не гарантируется.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from typing import Iterable, Iterator

import cv2
import numpy as np

from plateblur.core.config import RedactionConfig
from plateblur.core.errors import RedactionFailure
from plateblur.core.types import NORM_SCALE, Detection, RedactionRegion

__all__ = [
    "region_from_detection",
    "scratch_surface",
    "pixelate_region",
    "soften_region",
    "redact_array",
    "decode_image",
    "encode_jpeg",
    "redact",
]

logger = logging.getLogger(__name__)

_EPS = 1e-6


def region_from_detection(det: Detection, width: int, height: int, pad_frac: float = 0.25) -> RedactionRegion:
    """
    Переводит детекцию в расширенный пиксельный прямоугольник внутри `[0,width) x [0,height)`.

    Инвертированные координаты детектора дают нулевую ширину/высоту (область пропускается).
    """
    x = det.xmin * width / NORM_SCALE
    y = det.ymin * height / NORM_SCALE
    w = max(0.0, (det.xmax - det.xmin) * width / NORM_SCALE)
    h = max(0.0, (det.ymax - det.ymin) * height / NORM_SCALE)

    pad_x = w * pad_frac
    pad_y = h * pad_frac
    x1 = max(0.0, x - pad_x)
    y1 = max(0.0, y - pad_y)
    x2 = min(float(width), x + w + pad_x)
    y2 = min(float(height), y + h + pad_y)
    if x2 <= x1 or y2 <= y1:
        return RedactionRegion(x=0, y=0, width=0, height=0)

    # cover partially touched pixels, ignore float noise at exact boundaries
    px1 = int(math.floor(x1 + _EPS))
    py1 = int(math.floor(y1 + _EPS))
    px2 = int(math.ceil(x2 - _EPS))
    py2 = int(math.ceil(y2 - _EPS))
    return RedactionRegion(x=px1, y=py1, width=px2 - px1, height=py2 - py1).clamp(width, height)


@contextmanager
def scratch_surface(width: int, height: int, channels: tuple[int, ...] = (), dtype=np.uint8) -> Iterator[np.ndarray]:
    """Свежий обнулённый буфер (минимум 1x1) для одного прохода ресемплинга."""
    yield np.zeros((max(1, int(height)), max(1, int(width)), *channels), dtype=dtype)


def pixelate_region(canvas: np.ndarray, region: RedactionRegion, cfg: RedactionConfig) -> None:
    """Down/up-sampling with nearest neighbour; writes only inside `region`."""
    if region.is_empty:
        return
    rows, cols = region.slices()
    roi = canvas[rows, cols]
    tw = max(1, int(region.width * cfg.pixel_scale))
    th = max(1, int(region.height * cfg.pixel_scale))
    with scratch_surface(tw, th, roi.shape[2:], roi.dtype) as thumb:
        thumb = cv2.resize(roi, (tw, th), dst=thumb, interpolation=cv2.INTER_NEAREST)
        canvas[rows, cols] = cv2.resize(thumb, (region.width, region.height), interpolation=cv2.INTER_NEAREST)


def soften_region(canvas: np.ndarray, region: RedactionRegion, cfg: RedactionConfig) -> None:
    """Gaussian blur + brightness over `region` (clip: writes only inside it)."""
    if region.is_empty:
        return
    rows, cols = region.slices()
    roi = canvas[rows, cols]
    if cfg.blur_sigma_px > 0:
        roi = cv2.GaussianBlur(
            roi,
            (0, 0),
            sigmaX=float(cfg.blur_sigma_px),
            sigmaY=float(cfg.blur_sigma_px),
            borderType=cv2.BORDER_REPLICATE,
        )
    if cfg.brightness != 1.0:
        roi = np.clip(roi.astype(np.float32) * float(cfg.brightness), 0, 255).astype(canvas.dtype)
    canvas[rows, cols] = roi


def redact_array(bgr: np.ndarray, detections: Iterable[Detection], cfg: RedactionConfig | None = None) -> np.ndarray:
    """Возвращает новую матрицу с обезличенными областями; вход не изменяется."""
    cfg = cfg or RedactionConfig()
    canvas = bgr.copy()
    h, w = canvas.shape[:2]
    for det in detections:
        region = region_from_detection(det, w, h, cfg.pad_frac)
        if region.is_empty:
            logger.debug("Skipping degenerate detection %s", det.box_2d)
            continue
        pixelate_region(canvas, region, cfg)
        soften_region(canvas, region, cfg)
    return canvas


def decode_image(data: bytes) -> np.ndarray:
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_COLOR) if arr.size else None
    if img is None:
        raise RedactionFailure("image could not be decoded")
    return img


def encode_jpeg(bgr: np.ndarray, quality: int = 90) -> bytes:
    ok, buf = cv2.imencode(".jpg", bgr, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise RedactionFailure("JPEG encoding failed")
    return bytes(buf.tobytes())


def redact(image_bytes: bytes, detections: Iterable[Detection], cfg: RedactionConfig | None = None) -> bytes:
    """Decode -> redact -> JPEG (lossy re-encode is part of the obfuscation)."""
    cfg = cfg or RedactionConfig()
    img = decode_image(image_bytes)
    try:
        out = redact_array(img, detections, cfg)
    except cv2.error as e:
        raise RedactionFailure(str(e)) from e
    return encode_jpeg(out, cfg.jpeg_quality)
