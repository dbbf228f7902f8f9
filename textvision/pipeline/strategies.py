from collections.abc import Iterator

from textvision.documents.models import (
    ClassificationResult,
    DocumentResult,
    PageImage,
    PageRecognitionResult,
    Strategy,
    UploadedDocument,
)
from textvision.language.processor import LanguagePostProcessor
from textvision.language.text import count_words
from textvision.logging.logger import Log
from textvision.pdf.base import BasePdfBackend
from textvision.pdf.classifier import DocumentClassifier, processing_tips
from textvision.pdf.exceptions import (
    DocumentUnreadableError,
    RenderError,
    RendererUnavailableError,
)
from textvision.pdf.rasterizer import Rasterizer
from textvision.pipeline.aggregator import PAGE_SEPARATOR, aggregate
from textvision.pipeline.context import BaseStrategy, PipelineState, StrategyContext
from textvision.pipeline.events import Converting
from textvision.pipeline.exceptions import StrategyDeclinedError, StrategyUnavailableError
from textvision.recognition.client import RecognitionClient
from textvision.recognition.exceptions import RecognitionError

DEFAULT_MIN_CHARS = 10

_REMEDIATION = """To extract text from this file, please try one of these alternatives:

1. Convert the PDF to images:
   - Export each page to PNG or JPG
   - Upload the images individually for OCR processing

2. Use a text-based PDF:
   - If the PDF contains selectable text, copy and paste the text directly
   - Re-export the document so that its text is selectable

3. Try again:
   - Upload the file again in a few minutes
   - Try a smaller file or fewer pages"""


class WholeDocumentStrategy(BaseStrategy):
    """Sends the upload to the engine in one call, skipping classification and rendering."""

    name = Strategy.WHOLE_DOCUMENT.value

    def __init__(
        self,
        client: RecognitionClient,
        post_processor: LanguagePostProcessor,
        min_chars: int = DEFAULT_MIN_CHARS,
    ) -> None:
        self._client = client
        self._post_processor = post_processor
        # Whole-document text must be longer than this to be accepted.
        self._min_chars = min_chars

    def attempt(self, context: StrategyContext) -> DocumentResult:
        context.transition(PipelineState.OCR_PROCESSING)
        try:
            output = self._client.recognize_whole_document(context.document)
        except RecognitionError as exc:
            raise StrategyUnavailableError(f"Whole-document recognition failed: {exc}") from exc

        if len(output.text) <= self._min_chars:
            raise StrategyDeclinedError(
                f"Whole-document recognition returned {len(output.text)} characters "
                f"(need more than {self._min_chars})"
            )

        context.transition(PipelineState.AGGREGATING)
        page = self._post_processor.process(
            PageRecognitionResult(
                page_number=1,
                text=output.text,
                confidence=output.confidence,
                word_count=count_words(output.text),
            )
        )
        return aggregate(
            Strategy.WHOLE_DOCUMENT,
            ClassificationResult.not_performed(total_pages=1),
            [page],
            script_detection=self._post_processor.detect(page.text),
        )


class PerPageStrategy(BaseStrategy):
    """Classify, rasterize up to max_pages and recognize each page in turn."""

    name = Strategy.PER_PAGE.value

    def __init__(
        self,
        classifier: DocumentClassifier,
        rasterizer: Rasterizer,
        client: RecognitionClient,
        post_processor: LanguagePostProcessor,
    ) -> None:
        self._classifier = classifier
        self._rasterizer = rasterizer
        self._client = client
        self._post_processor = post_processor

    def attempt(self, context: StrategyContext) -> DocumentResult:
        document, max_pages = context.document, context.options.max_pages

        context.transition(PipelineState.ANALYZING)
        classification = self._classifier.classify(document)
        for tip in processing_tips(classification):
            Log.debug(f"'{document.filename}': {tip}")

        context.transition(PipelineState.CONVERTING)
        try:
            total = self._rasterizer.page_total(document, max_pages)
            if total == 0:
                raise StrategyUnavailableError("Document has no pages to recognize")
            context.report(Converting(total_pages=total))
            images = self._rasterizer.iter_pages(document, max_pages)
            context.transition(PipelineState.OCR_PROCESSING)
            render_failures: list[PageRecognitionResult] = []
            raw_pages = self._client.recognize_many(
                self._keep_rendering(document, images, total, render_failures),
                on_progress=context.report,
                total=total,
            )
        except RendererUnavailableError as exc:
            raise StrategyUnavailableError(f"Renderer unavailable: {exc}") from exc
        except DocumentUnreadableError as exc:
            raise StrategyUnavailableError(f"Document unreadable: {exc}") from exc

        context.transition(PipelineState.AGGREGATING)
        pages = [self._post_processor.process(page) for page in raw_pages] + render_failures
        failed = sum(1 for page in pages if page.failed)
        if failed:
            Log.warning(f"'{document.filename}': {failed}/{len(pages)} pages failed recognition")
        return aggregate(
            Strategy.PER_PAGE,
            classification,
            pages,
            script_detection=self._post_processor.detect(
                PAGE_SEPARATOR.join(page.text for page in pages)
            ),
        )

    def _keep_rendering(
        self,
        document: UploadedDocument,
        images: Iterator[PageImage],
        total: int,
        failures: list[PageRecognitionResult],
    ) -> Iterator[PageImage]:
        """Yield page bitmaps, turning render errors after the first page into error entries.

        A failure before any page rendered propagates so the strategy becomes
        unavailable. Later failures are recorded in ``failures`` and the
        remaining pages are rendered one at a time.
        """
        last_rendered = 0
        try:
            for image in images:
                last_rendered = image.page_number
                yield image
            return
        except RenderError as exc:
            if last_rendered == 0:
                raise
            failures.append(_render_failure(document, last_rendered + 1, exc))

        for page_number in range(last_rendered + 2, total + 1):
            try:
                image = self._rasterizer.rasterize(document, page_number)
            except RenderError as exc:
                failures.append(_render_failure(document, page_number, exc))
                continue
            yield image


def _render_failure(
    document: UploadedDocument, page_number: int, exc: RenderError
) -> PageRecognitionResult:
    Log.error(f"'{document.filename}': could not render page {page_number}: {exc}")
    return PageRecognitionResult(
        page_number=page_number,
        text="",
        confidence=0.0,
        word_count=0,
        error=str(exc),
    )


class _DiagnosticStrategy(BaseStrategy):
    """Returns a single explanatory page instead of recognized text.

    Confidence and word count are 0: nothing was recognized.
    """

    degraded = True
    strategy: Strategy

    def _result(self, message: str, classification: ClassificationResult) -> DocumentResult:
        page = PageRecognitionResult(page_number=1, text=message, confidence=0.0, word_count=0)
        return aggregate(self.strategy, classification, [page])


class EnhancedStubStrategy(_DiagnosticStrategy):
    """Reports what a secondary PDF backend can still read about the file."""

    name = Strategy.ENHANCED.value
    strategy = Strategy.ENHANCED

    def __init__(self, backend: BasePdfBackend) -> None:
        self._backend = backend

    def attempt(self, context: StrategyContext) -> DocumentResult:
        document = context.document
        try:
            pages = 1 if document.is_image else self._backend.page_count(document.content)
        except RenderError as exc:
            raise StrategyUnavailableError(f"Fallback backend cannot read document: {exc}") from exc
        if pages == 0:
            raise StrategyUnavailableError("Fallback backend found no pages")

        message = (
            "Text recognition could not be completed for this file.\n\n"
            "File information:\n"
            f"{_file_details(document)}\n"
            f"- Pages: {pages}\n\n"
            "The file was opened, but its pages could not be rendered for OCR, "
            "so no text was recognized (confidence 0). The details above come "
            "from the file metadata only.\n\n"
            f"{_REMEDIATION}"
        )
        classification = ClassificationResult(
            is_scanned=True,
            has_selectable_text=False,
            confidence=0.0,
            total_pages=pages,
            pages_with_text=0,
        )
        return self._result(message, classification)


class SimpleStubStrategy(_DiagnosticStrategy):
    """Reports the upload's name, size and type."""

    name = Strategy.SIMPLE.value
    strategy = Strategy.SIMPLE

    def attempt(self, context: StrategyContext) -> DocumentResult:
        document = context.document
        if document.size_bytes == 0:
            raise StrategyUnavailableError("Uploaded file is empty; no metadata to report")

        message = (
            "Text recognition could not be completed for this file.\n\n"
            "File information:\n"
            f"{_file_details(document)}\n\n"
            "The file could not be opened for rendering, so no text was "
            "recognized (confidence 0).\n\n"
            f"{_REMEDIATION}"
        )
        return self._result(message, ClassificationResult.not_performed(total_pages=0))


class TerminalFallbackStrategy(_DiagnosticStrategy):
    """Last resort. Uses no collaborator, so it cannot fail."""

    name = Strategy.FALLBACK.value
    strategy = Strategy.FALLBACK

    def attempt(self, context: StrategyContext) -> DocumentResult:
        message = f"Processing encountered a technical issue.\n\n{_REMEDIATION}"
        return self._result(message, ClassificationResult.unreadable())


def _file_details(document: UploadedDocument) -> str:
    size_mb = document.size_bytes / 1024 / 1024
    return (
        f"- Name: {document.filename}\n"
        f"- Size: {size_mb:.2f} MB\n"
        f"- Type: {document.media_type}"
    )
