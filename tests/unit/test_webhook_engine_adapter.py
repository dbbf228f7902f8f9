import base64
import json

from unittest.mock import patch

import httpx
import pytest

from textvision.recognition.exceptions import (
    RecognitionNetworkError,
    RecognitionResponseError,
)
from textvision.recognition.webhook_engine_adapter import WebhookEngineAdapter

URL = "https://hooks.example.com/ocr"


def _adapter(handler) -> WebhookEngineAdapter:  # type: ignore[no-untyped-def]
    return WebhookEngineAdapter(
        url=URL,
        api_key="secret",
        timeout_seconds=5,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _json_handler(body: object, status_code: int = 200):  # type: ignore[no-untyped-def]
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)

    return handler


class TestWebhookEngineAdapter:
    def test_sends_base64_payload(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"success": True, "extractedText": "hi"})

        _adapter(handler).recognize(b"\x89PNG", mime_type="image/png", filename="p1")
        request = captured[0]
        assert str(request.url) == URL
        assert request.method == "POST"
        payload = json.loads(request.content)
        assert payload == {
            "image": base64.b64encode(b"\x89PNG").decode("ascii"),
            "apiKey": "secret",
            "fileType": "image/png",
        }

    def test_returns_extracted_text_and_confidence(self) -> None:
        adapter = _adapter(
            _json_handler({"success": True, "extractedText": "Hello", "confidence": 88})
        )
        response = adapter.recognize(b"x", mime_type="image/png", filename="p1")
        assert response.text == "Hello"
        assert response.confidence == 88

    def test_accepts_text_field(self) -> None:
        adapter = _adapter(_json_handler({"success": True, "text": "Fallback field"}))
        response = adapter.recognize(b"x", mime_type="image/png", filename="p1")
        assert response.text == "Fallback field"
        assert response.confidence is None

    def test_missing_text_is_empty(self) -> None:
        adapter = _adapter(_json_handler({"success": True}))
        assert adapter.recognize(b"x", mime_type="image/png", filename="p1").text == ""

    def test_non_numeric_confidence_is_ignored(self) -> None:
        adapter = _adapter(
            _json_handler({"success": True, "text": "t", "confidence": "high"})
        )
        assert adapter.recognize(b"x", mime_type="image/png", filename="p1").confidence is None

    def test_unsuccessful_response_raises(self) -> None:
        adapter = _adapter(_json_handler({"success": False, "error": "quota exceeded"}))
        with pytest.raises(RecognitionResponseError, match="quota exceeded"):
            adapter.recognize(b"x", mime_type="image/png", filename="p1")

    def test_empty_body_raises(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, text=""))
        with pytest.raises(RecognitionResponseError, match="empty response"):
            adapter.recognize(b"x", mime_type="image/png", filename="p1")

    def test_invalid_json_raises(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(RecognitionResponseError, match="Invalid JSON"):
            adapter.recognize(b"x", mime_type="image/png", filename="p1")

    def test_non_object_json_raises(self) -> None:
        adapter = _adapter(_json_handler(["a", "b"]))
        with pytest.raises(RecognitionResponseError, match="JSON object"):
            adapter.recognize(b"x", mime_type="image/png", filename="p1")

    def test_http_error_status_raises_network_error(self) -> None:
        adapter = _adapter(lambda request: httpx.Response(502, text="Bad gateway"))
        with pytest.raises(RecognitionNetworkError, match="HTTP 502: Bad gateway"):
            adapter.recognize(b"x", mime_type="image/png", filename="p1")

    def test_connect_error_raises_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RecognitionNetworkError, match="Failed to connect"):
            _adapter(handler).recognize(b"x", mime_type="image/png", filename="p1")

    def test_timeout_raises_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(RecognitionNetworkError, match="timed out"):
            _adapter(handler).recognize(b"x", mime_type="image/png", filename="p1")

    def test_requires_url(self) -> None:
        with pytest.raises(ValueError, match="recognition_webhook_url"):
            WebhookEngineAdapter(url="", api_key="k", timeout_seconds=5)

    def test_owned_client_is_closed_after_each_call(self) -> None:
        adapter = WebhookEngineAdapter(url=URL, api_key="secret", timeout_seconds=5)
        with patch.object(httpx, "Client") as client_cls:
            session = client_cls.return_value.__enter__.return_value
            session.post.return_value = httpx.Response(
                200, json={"success": True, "extractedText": "hi"}
            )
            response = adapter.recognize(b"x", mime_type="image/png", filename="p1")
        assert response.text == "hi"
        client_cls.assert_called_once_with(timeout=5)
        client_cls.return_value.__exit__.assert_called_once()
