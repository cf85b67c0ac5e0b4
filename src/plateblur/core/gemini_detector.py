from __future__ import annotations

import base64
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

import requests

from plateblur.core.config import DetectorConfig
from plateblur.core.detector import Detector, parse_detections, sniff_image_mime
from plateblur.core.errors import DetectionFailure
from plateblur.core.types import Detection

__all__ = [
    "RESPONSE_SCHEMA",
    "GeminiPlateDetector",
]

logger = logging.getLogger(__name__)

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "box_2d": {"type": "ARRAY", "items": {"type": "NUMBER"}},
            "label": {"type": "STRING"},
        },
        "required": ["box_2d", "label"],
    },
}

_API_KEY_RE = re.compile(r"(key=)([^&\s]+)", re.IGNORECASE)


def _redact_api_key(message: str, api_key: str = "") -> str:
    """Убирает API-ключ из текста ошибки (он может попасть в URL/исключение)."""
    out = _API_KEY_RE.sub(r"\1REDACTED", message or "")
    if api_key:
        out = out.replace(api_key, "REDACTED")
    return out


def _response_text(payload: dict[str, Any]) -> str:
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = (candidates[0] or {}).get("content") or {}
    parts = content.get("parts") or []
    return "".join(str(p.get("text", "")) for p in parts if isinstance(p, dict))


@dataclass(slots=True)
class GeminiPlateDetector(Detector):
    cfg: DetectorConfig
    session: requests.Session = field(default_factory=requests.Session)

    def _url(self) -> str:
        return f"{self.cfg.endpoint_base.rstrip('/')}/models/{self.cfg.model_name}:generateContent"

    def _request_body(self, image_bytes: bytes) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": sniff_image_mime(image_bytes),
                                "data": base64.b64encode(image_bytes).decode("ascii"),
                            }
                        },
                        {"text": self.cfg.prompt},
                    ]
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    def detect_plates(self, image_bytes: bytes) -> list[Detection]:
        if not self.cfg.is_configured:
            raise DetectionFailure("detector is not configured (set GEMINI_API_KEY)")

        try:
            resp = self.session.post(
                self._url(),
                headers={"x-goog-api-key": self.cfg.api_key},
                json=self._request_body(image_bytes),
                timeout=(5, float(self.cfg.timeout_s)),
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            msg = _redact_api_key(str(e), self.cfg.api_key)
            logger.warning("Plate detection request failed: %s", msg)
            raise DetectionFailure(msg) from None

        text = _response_text(payload) if isinstance(payload, dict) else ""
        if not text.strip():
            return []
        try:
            data = json.loads(text)
        except ValueError as e:
            raise DetectionFailure(f"model returned non-JSON text: {e}") from e

        detections = parse_detections(data)
        logger.debug("Detector returned %d plate(s)", len(detections))
        return detections
