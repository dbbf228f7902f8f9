"""Sequential, retrying front-end to a recognition engine.

Only transport failures (``RecognitionNetworkError``) are retried, with
exponential backoff: ``backoff_seconds * 2**(n - 1)`` after the n-th failed attempt.
Unusable responses are reported immediately.

Batches run one page at a time. A page whose recognition fails still
produces a ``PageRecognitionResult`` (empty text, confidence 0, ``error``
set) so the caller always gets one entry per input image.
"""

import time
from collections.abc import Callable, Iterable, Sized

from textvision.documents.models import (
    PageImage,
    PageRecognitionResult,
    RecognitionOutput,
    UploadedDocument,
)
from textvision.language.text import count_words
from textvision.logging.logger import Log
from textvision.pipeline.events import ProgressCallback, Recognizing
from textvision.recognition.client_base import BaseRecognitionEngine, EngineResponse
from textvision.recognition.exceptions import RecognitionError, RecognitionNetworkError

ESTIMATED_CONFIDENCE = 95.0


class RecognitionClient:
    """Runs engine calls for whole documents, single pages and page batches."""

    def __init__(
        self,
        engine: BaseRecognitionEngine,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self._engine = engine
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep

    def recognize_whole_document(self, document: UploadedDocument) -> RecognitionOutput:
        """Send the full upload (multi-page PDF or image) in one call.

        Raises:
            RecognitionError: after retries are exhausted or on an unusable response.
        """
        return self._recognize(
            document.content,
            mime_type=document.media_type.lower(),
            filename=document.filename,
        )

    def recognize_page(self, image: PageImage) -> RecognitionOutput:
        """Recognize one rasterized page.

        Raises:
            RecognitionError: after retries are exhausted or on an unusable response.
        """
        return self._recognize(
            image.content,
            mime_type=image.mime_type,
            filename=f"page-{image.page_number}",
        )

    def recognize_many(
        self,
        images: Iterable[PageImage],
        on_progress: ProgressCallback | None = None,
        total: int | None = None,
    ) -> list[PageRecognitionResult]:
        """Recognize pages one after another; a failing page never aborts the batch.

        ``images`` may be a lazy iterator; ``total`` is then used for progress
        reporting (defaults to ``len(images)`` when available).
        """
        if total is None and isinstance(images, Sized):
            total = len(images)
        results: list[PageRecognitionResult] = []
        for index, image in enumerate(images, start=1):
            result = self._recognize_page_safely(image)
            results.append(result)
            if on_progress is not None:
                on_progress(
                    Recognizing(
                        current=index,
                        total=total if total is not None else index,
                        page_number=image.page_number,
                        succeeded=not result.failed,
                    )
                )
        return results

    def _recognize_page_safely(self, image: PageImage) -> PageRecognitionResult:
        try:
            output = self.recognize_page(image)
        except RecognitionError as exc:
            Log.error(f"Recognition failed for page {image.page_number}: {exc}")
            return PageRecognitionResult(
                page_number=image.page_number,
                text="",
                confidence=0.0,
                word_count=0,
                error=str(exc),
            )
        return PageRecognitionResult(
            page_number=image.page_number,
            text=output.text,
            confidence=output.confidence,
            word_count=count_words(output.text),
        )

    def _recognize(self, content: bytes, *, mime_type: str, filename: str) -> RecognitionOutput:
        response = self._call_with_retries(content, mime_type=mime_type, filename=filename)
        text = response.text.strip()
        return RecognitionOutput(text=text, confidence=self._confidence(text, response))

    def _call_with_retries(self, content: bytes, *, mime_type: str, filename: str) -> EngineResponse:
        attempt = 1
        while True:
            try:
                return self._engine.recognize(content, mime_type=mime_type, filename=filename)
            except RecognitionNetworkError as exc:
                if attempt >= self._max_attempts:
                    raise
                wait_time = self._backoff_seconds * 2 ** (attempt - 1)
                Log.warning(
                    f"Recognition of '{filename}' failed "
                    f"(attempt {attempt}/{self._max_attempts}): {exc}. "
                    f"Retrying in {wait_time}s..."
                )
                self._sleep(wait_time)
                attempt += 1

    @staticmethod
    def _confidence(text: str, response: EngineResponse) -> float:
        if not text:
            return 0.0
        if response.confidence is None:
            return ESTIMATED_CONFIDENCE
        return max(0.0, min(100.0, float(response.confidence)))
