from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = [
    "DEFAULT_PROMPT",
    "RedactionConfig",
    "DetectorConfig",
    "ExportConfig",
]

DEFAULT_PROMPT = (
    "Detect all license plates in this image. Return ONLY a JSON array of objects with "
    "'box_2d' [ymin, xmin, ymax, xmax] (0-1000) and 'label'."
)


@dataclass(slots=True)
class RedactionConfig:
    """Параметры обезличивания области номера (пикселизация + размытие)."""

    pad_frac: float = 0.25  # padding on each side, fraction of the raw box size
    pixel_scale: float = 0.05  # thumbnail linear size relative to the region
    blur_sigma_px: float = 12.0
    brightness: float = 0.9
    jpeg_quality: int = 90

    def clamp(self) -> "RedactionConfig":
        """Нормализует значения в допустимые диапазоны."""
        self.pad_frac = max(0.0, min(1.0, float(self.pad_frac)))
        self.pixel_scale = max(0.001, min(1.0, float(self.pixel_scale)))
        self.blur_sigma_px = max(0.0, float(self.blur_sigma_px))
        self.brightness = max(0.0, min(1.0, float(self.brightness)))
        self.jpeg_quality = max(1, min(100, int(self.jpeg_quality)))
        return self


@dataclass(slots=True)
class DetectorConfig:
    """Параметры удалённой модели (Gemini REST API)."""

    api_key: str = ""
    model_name: str = "gemini-3-flash-preview"
    endpoint_base: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_s: float = 60.0
    prompt: str = DEFAULT_PROMPT

    @classmethod
    def from_env(cls) -> "DetectorConfig":
        """
        Environment variables:
        - GEMINI_API_KEY (fallback: API_KEY)
        - GEMINI_MODEL
        - GEMINI_ENDPOINT_BASE
        - GEMINI_TIMEOUT_S
        """
        d = cls()
        api_key = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
        model = (os.getenv("GEMINI_MODEL") or "").strip() or d.model_name
        endpoint = (os.getenv("GEMINI_ENDPOINT_BASE") or "").strip() or d.endpoint_base
        try:
            timeout_s = float(os.getenv("GEMINI_TIMEOUT_S") or d.timeout_s)
        except ValueError:
            timeout_s = d.timeout_s
        return cls(api_key=api_key, model_name=model, endpoint_base=endpoint.rstrip("/"), timeout_s=timeout_s)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model_name and self.endpoint_base)


@dataclass(slots=True)
class ExportConfig:
    """Параметры сохранения результатов."""

    out_dir: str = ""
    prefix: str = "blurred_"
    stagger_s: float = 0.3  # pause between files in "save all"
