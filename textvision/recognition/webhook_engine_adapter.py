import base64
import json

import httpx

from textvision.recognition.client_base import BaseRecognitionEngine, EngineResponse
from textvision.recognition.exceptions import RecognitionNetworkError, RecognitionResponseError

_ERROR_BODY_PREVIEW = 200


class WebhookEngineAdapter(BaseRecognitionEngine):
    """Recognition engine reached through a JSON webhook (e.g. an n8n workflow).

    Request body: ``{"image": <base64>, "apiKey": <key>, "fileType": <mime>}``.
    Expected response: ``{"success": true, "extractedText": "...", "confidence": 97}``
    where ``text`` is accepted in place of ``extractedText`` and ``confidence``
    is optional.
    """

    def __init__(
        self,
        *,
        url: str,
        api_key: str,
        timeout_seconds: int,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not url:
            raise ValueError("recognition_webhook_url is required for the webhook provider")
        self._url = url
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client

    def recognize(self, content: bytes, *, mime_type: str, filename: str) -> EngineResponse:
        payload = {
            "image": base64.b64encode(content).decode("ascii"),
            "apiKey": self._api_key,
            "fileType": mime_type,
        }
        try:
            response = self._post(payload)
        except httpx.TimeoutException as exc:
            raise RecognitionNetworkError(
                f"Webhook request for '{filename}' timed out: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RecognitionNetworkError(
                f"Failed to connect to webhook for '{filename}': {exc}"
            ) from exc

        if response.status_code >= 400:
            raise RecognitionNetworkError(
                f"HTTP {response.status_code}: "
                f"{response.text[:_ERROR_BODY_PREVIEW] or 'Unknown error'}"
            )
        return self._parse(response.text)

    def _post(self, payload: dict[str, str]) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._http_client is not None:
            return self._http_client.post(self._url, json=payload, headers=headers)
        with httpx.Client(timeout=self._timeout_seconds) as client:
            return client.post(self._url, json=payload, headers=headers)

    @staticmethod
    def _parse(body: str) -> EngineResponse:
        if not body.strip():
            raise RecognitionResponseError(
                "Webhook returned an empty response; check that the workflow responds with JSON"
            )
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise RecognitionResponseError(
                f"Invalid JSON response from webhook: {exc}. "
                f"Response: {body[:_ERROR_BODY_PREVIEW]}"
            ) from exc
        if not isinstance(data, dict):
            raise RecognitionResponseError("Webhook response must be a JSON object")
        if data.get("success") is False:
            raise RecognitionResponseError(
                str(data.get("error") or data.get("message") or "OCR processing failed")
            )

        text = data.get("extractedText") or data.get("text") or ""
        if not isinstance(text, str):
            raise RecognitionResponseError("Webhook 'extractedText' must be a string")
        confidence = data.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = None
        return EngineResponse(text=text, confidence=confidence)
