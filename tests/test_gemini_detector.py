import base64
import json
from unittest.mock import MagicMock

import pytest
import requests

from plateblur.core.config import DetectorConfig
from plateblur.core.errors import DetectionFailure
from plateblur.core.gemini_detector import RESPONSE_SCHEMA, GeminiPlateDetector, _redact_api_key


def _response(text: str | None = None, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    if payload is None:
        payload = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    resp.json.return_value = payload
    return resp


def _detector(session: MagicMock, api_key: str = "SECRET") -> GeminiPlateDetector:
    cfg = DetectorConfig(api_key=api_key, model_name="test-model", endpoint_base="https://example.test/v1beta")
    return GeminiPlateDetector(cfg=cfg, session=session)


def test_success_builds_request_and_parses(image_png):
    session = MagicMock()
    session.post.return_value = _response(json.dumps([{"box_2d": [10, 20, 30, 40], "label": "plate"}]))

    dets = _detector(session).detect_plates(image_png)

    assert [d.box_2d for d in dets] == [(10.0, 20.0, 30.0, 40.0)]
    args, kwargs = session.post.call_args
    assert args[0] == "https://example.test/v1beta/models/test-model:generateContent"
    assert kwargs["headers"] == {"x-goog-api-key": "SECRET"}
    parts = kwargs["json"]["contents"][0]["parts"]
    assert parts[0]["inline_data"]["mime_type"] == "image/png"
    assert base64.b64decode(parts[0]["inline_data"]["data"]) == image_png
    assert "license plates" in parts[1]["text"]
    gen = kwargs["json"]["generationConfig"]
    assert gen["responseMimeType"] == "application/json"
    assert gen["responseSchema"] == RESPONSE_SCHEMA


def test_text_split_across_parts():
    session = MagicMock()
    payload = {"candidates": [{"content": {"parts": [{"text": '[{"box_2d": [1,2,3,4],'}, {"text": ' "label": "a"}]'}]}}]}
    session.post.return_value = _response(payload=payload)
    dets = _detector(session).detect_plates(b"\xff\xd8\xff")
    assert len(dets) == 1 and dets[0].label == "a"


@pytest.mark.parametrize("payload", [{"candidates": []}, {}, {"candidates": [{"content": {"parts": [{"text": "  "}]}}]}])
def test_empty_response_means_no_plates(payload):
    session = MagicMock()
    session.post.return_value = _response(payload=payload)
    assert _detector(session).detect_plates(b"x") == []


def test_non_json_text_fails():
    session = MagicMock()
    session.post.return_value = _response("sorry, I cannot help")
    with pytest.raises(DetectionFailure):
        _detector(session).detect_plates(b"x")


def test_schema_violation_fails():
    session = MagicMock()
    session.post.return_value = _response(json.dumps({"box_2d": [1, 2, 3, 4]}))
    with pytest.raises(DetectionFailure):
        _detector(session).detect_plates(b"x")


def test_network_error_hides_api_key():
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("failed for https://host/path?key=SECRET&x=1")
    with pytest.raises(DetectionFailure) as ei:
        _detector(session).detect_plates(b"x")
    assert "SECRET" not in str(ei.value)
    assert ei.value.__cause__ is None


def test_http_error_is_detection_failure():
    session = MagicMock()
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.HTTPError("429 Too Many Requests")
    session.post.return_value = resp
    with pytest.raises(DetectionFailure):
        _detector(session).detect_plates(b"x")


def test_not_configured_skips_network():
    session = MagicMock()
    with pytest.raises(DetectionFailure):
        _detector(session, api_key="").detect_plates(b"x")
    session.post.assert_not_called()


def test_redact_api_key():
    assert _redact_api_key("url?key=abc123&z=1") == "url?key=REDACTED&z=1"
    assert _redact_api_key("token abc123 leaked", "abc123") == "token REDACTED leaked"


def test_config_from_env(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", " k1 ")
    monkeypatch.setenv("GEMINI_MODEL", "m")
    monkeypatch.setenv("GEMINI_ENDPOINT_BASE", "https://e.test/")
    monkeypatch.setenv("GEMINI_TIMEOUT_S", "oops")
    cfg = DetectorConfig.from_env()
    assert cfg.api_key == "k1"
    assert cfg.model_name == "m"
    assert cfg.endpoint_base == "https://e.test"
    assert cfg.timeout_s == 60.0
    assert cfg.is_configured
