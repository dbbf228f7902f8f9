"""Example recognition engine adapter.

Use this module as a reference when implementing new engine adapters.
Implement BaseRecognitionEngine and register the provider in RecognitionEngineFactory.
"""

from typing import ClassVar

from textvision.recognition.client_base import BaseRecognitionEngine, EngineResponse


class ExampleEngineAdapter(BaseRecognitionEngine):
    """Returns a fixed sentence for every call. No network calls."""

    DEFAULT_TEXT: ClassVar[str] = "The quick brown fox jumps over the lazy dog."

    def __init__(self, text: str | None = None) -> None:
        self._text = self.DEFAULT_TEXT if text is None else text

    def recognize(self, content: bytes, *, mime_type: str, filename: str) -> EngineResponse:
        _ = content, mime_type, filename
        return EngineResponse(text=self._text)
