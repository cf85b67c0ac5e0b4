from __future__ import annotations

import io
import logging
import mimetypes
import os
from typing import Iterable

from PIL import Image, ImageOps, UnidentifiedImageError

from plateblur.core.items import QueueItem

__all__ = [
    "is_image_file",
    "normalize_orientation",
    "load_image_file",
    "load_image_files",
]

logger = logging.getLogger(__name__)

# EXIF tag 0x0112
_ORIENTATION_TAG = 274


def is_image_file(path: str) -> bool:
    mime, _ = mimetypes.guess_type(path)
    return bool(mime and mime.startswith("image/"))


def normalize_orientation(data: bytes) -> bytes:
    """
    Применяет EXIF-ориентацию и перекодирует в тот же формат.

    Нужно, чтобы детектор и движок видели одинаково повёрнутые пиксели (иначе bbox не совпадут).
    Без EXIF-поворота байты возвращаются как есть.
    """
    with Image.open(io.BytesIO(data)) as im:
        im.verify()
    with Image.open(io.BytesIO(data)) as im:
        orientation = im.getexif().get(_ORIENTATION_TAG, 1)
        if orientation in (None, 1):
            return data
        fmt = im.format or "JPEG"
        fixed = ImageOps.exif_transpose(im)
        if fmt == "JPEG" and fixed.mode not in ("RGB", "L"):
            fixed = fixed.convert("RGB")
        out = io.BytesIO()
        save_kwargs = {"quality": 95} if fmt == "JPEG" else {}
        fixed.save(out, format=fmt, **save_kwargs)
        return out.getvalue()


def load_image_file(path: str) -> QueueItem | None:
    """Новый PENDING-элемент из файла; не-изображения и битые файлы -> None."""
    if not is_image_file(path):
        logger.debug("Skipping non-image file: %s", path)
        return None
    try:
        with open(path, "rb") as f:
            data = f.read()
        data = normalize_orientation(data)
    except (OSError, UnidentifiedImageError, SyntaxError, ValueError) as e:
        logger.debug("Skipping unreadable image %s: %s", path, e)
        return None
    return QueueItem.new(os.path.basename(path), data)


def load_image_files(paths: Iterable[str]) -> list[QueueItem]:
    out: list[QueueItem] = []
    for p in paths:
        item = load_image_file(p)
        if item is not None:
            out.append(item)
    return out
