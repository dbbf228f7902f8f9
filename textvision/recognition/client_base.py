from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EngineResponse:
    """Raw engine answer. confidence is None when the engine does not report one."""

    text: str
    confidence: float | None = None


class BaseRecognitionEngine(ABC):
    """Contract for provider-specific recognition engines."""

    @abstractmethod
    def recognize(self, content: bytes, *, mime_type: str, filename: str) -> EngineResponse:
        """Recognize text in an image or a whole PDF.

        Raises:
            RecognitionNetworkError: transport failure (connect, timeout, HTTP status).
            RecognitionResponseError: the engine answered with an unusable payload.
        """
