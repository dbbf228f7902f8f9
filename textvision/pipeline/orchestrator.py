from collections.abc import Sequence
from dataclasses import replace

from textvision.config.settings import Settings
from textvision.documents.exceptions import DocumentValidationError
from textvision.documents.models import DocumentResult, ProcessingOptions, UploadedDocument
from textvision.language.processor import LanguagePostProcessor
from textvision.language.scripts import get_script
from textvision.logging.logger import Log
from textvision.pdf.classifier import DocumentClassifier
from textvision.pdf.factory import PdfBackendFactory
from textvision.pdf.rasterizer import Rasterizer
from textvision.pipeline.context import BaseStrategy, PipelineState, StrategyContext
from textvision.pipeline.events import Analyzing, Complete, Degraded, ProgressReporter
from textvision.pipeline.exceptions import StrategyError
from textvision.pipeline.strategies import (
    EnhancedStubStrategy,
    PerPageStrategy,
    SimpleStubStrategy,
    TerminalFallbackStrategy,
    WholeDocumentStrategy,
)
from textvision.recognition.factory import RecognitionEngineFactory

EMPTY_RESULT_NOTICE = (
    "No text was recognized; the document may be blank or scanned at too low "
    "a resolution"
)


class OcrOrchestrator:
    """Runs an ordered list of strategies until one produces a result.

    Strategy order: whole-document -> per-page -> enhanced stub -> simple
    stub -> terminal fallback. Only ``StrategyError`` moves the run on to the
    next strategy; any other exception is a bug and propagates.
    """

    def __init__(self, strategies: Sequence[BaseStrategy]) -> None:
        if not strategies:
            raise ValueError("At least one strategy is required")
        self._strategies = tuple(strategies)

    def process(
        self,
        document: UploadedDocument,
        options: ProcessingOptions | None = None,
    ) -> DocumentResult:
        """Extract text from a PDF or image upload.

        Raises:
            TypeError: ``document`` is not an UploadedDocument.
            DocumentValidationError: unsupported media type.
            RuntimeError: every strategy failed (no terminal fallback configured).
        """
        if not isinstance(document, UploadedDocument):
            raise TypeError(
                f"Expected UploadedDocument, got {type(document).__name__}"
            )
        if not document.is_supported:
            raise DocumentValidationError(
                f"Unsupported media type '{document.media_type}' for '{document.filename}'"
            )

        options = options or ProcessingOptions()
        context = StrategyContext(
            document=document,
            options=options,
            report=ProgressReporter(options.progress_callback),
        )
        Log.info(
            f"Processing '{document.filename}' ({document.media_type}, "
            f"{document.size_bytes} bytes, max_pages={options.max_pages})"
        )
        context.transition(PipelineState.ANALYZING)
        context.report(Analyzing())

        last_error: StrategyError | None = None
        for strategy in self._strategies:
            if strategy.degraded:
                context.transition(PipelineState.DEGRADED_STRATEGY)
                context.report(Degraded(reason=str(last_error) if last_error else ""))
                Log.warning(f"'{document.filename}': switching to {strategy.name} strategy")
            try:
                result = strategy.attempt(context)
            except StrategyError as exc:
                Log.warning(f"'{document.filename}': {strategy.name} strategy failed: {exc}")
                last_error = exc
                continue
            return self._complete(context, strategy, result)

        context.transition(PipelineState.FAILED)
        Log.error(
            f"'{document.filename}': all {len(self._strategies)} strategies failed; "
            f"states={list(context.state_trail)}"
        )
        raise RuntimeError(
            f"No strategy produced a result for '{document.filename}'"
        ) from last_error

    @staticmethod
    def _complete(
        context: StrategyContext,
        strategy: BaseStrategy,
        result: DocumentResult,
    ) -> DocumentResult:
        context.transition(PipelineState.COMPLETE)
        notice = None if strategy.degraded else _empty_result_notice(result)
        result = replace(result, state_trail=context.state_trail, notice=notice)
        if notice:
            Log.warning(f"'{context.document.filename}': {notice}")
            context.report(Complete(strategy=result.strategy.value, message=notice))
        else:
            context.report(Complete(strategy=result.strategy.value))
        Log.info(
            f"Completed '{context.document.filename}' with {strategy.name} strategy: "
            f"{len(result.pages)} pages, {result.total_words} words, "
            f"confidence={result.total_confidence:.1f}"
        )
        return result


def _empty_result_notice(result: DocumentResult) -> str | None:
    """Explanation for a run that recognized no words without any page failing."""
    if result.total_words or any(page.failed for page in result.pages):
        return None
    return EMPTY_RESULT_NOTICE


def build_orchestrator(settings: Settings) -> OcrOrchestrator:
    """Build an OcrOrchestrator with all required adapters."""
    backend = PdfBackendFactory.create(settings.pdf_engine)
    fallback_backend = PdfBackendFactory.create(settings.pdf_fallback_engine)
    client = RecognitionEngineFactory.create_client(settings)
    post_processor = LanguagePostProcessor(
        script=get_script(settings.target_script),
        threshold=settings.script_threshold_percent,
    )
    rasterizer = Rasterizer(
        backend,
        scale=settings.render_scale,
        quality=settings.render_quality,
        image_format=settings.render_image_format,
    )
    return OcrOrchestrator(
        strategies=[
            WholeDocumentStrategy(
                client, post_processor, min_chars=settings.whole_document_min_chars
            ),
            PerPageStrategy(DocumentClassifier(backend), rasterizer, client, post_processor),
            EnhancedStubStrategy(fallback_backend),
            SimpleStubStrategy(),
            TerminalFallbackStrategy(),
        ]
    )
