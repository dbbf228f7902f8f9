import base64

import httpx
import openai

from textvision.recognition.client_base import BaseRecognitionEngine, EngineResponse
from textvision.recognition.exceptions import RecognitionNetworkError, RecognitionResponseError

PDF_MIME_TYPE = "application/pdf"

DEFAULT_SYSTEM_PROMPT = (
    "You are an OCR engine. Transcribe all text visible in the supplied document "
    "exactly as written, in reading order, preserving line breaks and the original "
    "language and script. Do not translate, summarise or comment. If the document "
    "contains no text, answer with an empty message."
)


class OpenAIEngineAdapter(BaseRecognitionEngine):
    """Recognition engine built on an OpenAI-compatible vision chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )
        self._model = model
        self._system_prompt = system_prompt

    def recognize(self, content: bytes, *, mime_type: str, filename: str) -> EngineResponse:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=0.0,
                messages=[
                    {"role": "system", "content": self._system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": "Extract the text from this document."},
                            self._document_part(content, mime_type, filename),
                        ],
                    },
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise RecognitionNetworkError(f"Recognition engine network error: {exc}") from exc
        except openai.APIError as exc:
            raise RecognitionNetworkError(f"Recognition engine API error: {exc}") from exc

        if not response.choices:
            raise RecognitionResponseError("Recognition engine returned no choices")
        return EngineResponse(text=response.choices[0].message.content or "")

    @staticmethod
    def _document_part(content: bytes, mime_type: str, filename: str) -> dict[str, object]:
        data_url = f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"
        if mime_type == PDF_MIME_TYPE:
            return {"type": "file", "file": {"filename": filename, "file_data": data_url}}
        return {"type": "image_url", "image_url": {"url": data_url}}
