"""End-to-end runs of the OCR pipeline with real PDF backends and a scripted engine."""

from unittest.mock import patch

import pytest

from textvision.documents.models import (
    PDF_MEDIA_TYPE,
    ProcessingOptions,
    Strategy,
    UploadedDocument,
)
from textvision.language.processor import LanguagePostProcessor
from textvision.pdf.classifier import DocumentClassifier
from textvision.pdf.exceptions import RendererUnavailableError
from textvision.pdf.pdfplumber_adapter import PdfPlumberBackend
from textvision.pdf.pymupdf_adapter import PyMuPdfBackend
from textvision.pdf.rasterizer import Rasterizer
from textvision.pipeline.events import Complete, Converting, Degraded, Recognizing
from textvision.pipeline.orchestrator import EMPTY_RESULT_NOTICE, OcrOrchestrator
from textvision.pipeline.strategies import (
    EnhancedStubStrategy,
    PerPageStrategy,
    SimpleStubStrategy,
    TerminalFallbackStrategy,
    WholeDocumentStrategy,
)
from textvision.recognition.client import RecognitionClient
from textvision.recognition.client_base import BaseRecognitionEngine, EngineResponse
from textvision.recognition.exceptions import RecognitionNetworkError


class ScriptedEngine(BaseRecognitionEngine):
    """Returns ``document_text`` for whole uploads and ``page_text`` for rasterized pages."""

    def __init__(
        self,
        document_text: str = "",
        page_text: str = "Recognized text of {filename}",
        fail_pages: bool = False,
    ) -> None:
        self.document_text = document_text
        self.page_text = page_text
        self.fail_pages = fail_pages
        self.calls: list[tuple[str, str]] = []

    def recognize(self, content: bytes, *, mime_type: str, filename: str) -> EngineResponse:
        self.calls.append((mime_type, filename))
        if not filename.startswith("page-"):
            return EngineResponse(text=self.document_text)
        if self.fail_pages:
            raise RecognitionNetworkError("engine unreachable")
        return EngineResponse(text=self.page_text.format(filename=filename))


def _orchestrator(engine: BaseRecognitionEngine) -> OcrOrchestrator:
    backend = PyMuPdfBackend()
    client = RecognitionClient(engine, max_attempts=2, backoff_seconds=0, sleep=lambda _: None)
    post_processor = LanguagePostProcessor()
    return OcrOrchestrator(
        [
            WholeDocumentStrategy(client, post_processor),
            PerPageStrategy(
                DocumentClassifier(backend), Rasterizer(backend, scale=1.0), client, post_processor
            ),
            EnhancedStubStrategy(PdfPlumberBackend()),
            SimpleStubStrategy(),
            TerminalFallbackStrategy(),
        ]
    )


def _pdf(content: bytes, filename: str = "doc.pdf") -> UploadedDocument:
    return UploadedDocument(content=content, media_type=PDF_MEDIA_TYPE, filename=filename)


class TestWholeDocumentPath:
    def test_long_whole_document_text_is_used(self, sample_pdf_bytes: bytes) -> None:
        engine = ScriptedEngine(document_text="Hello PDF World, recognized in one call")
        result = _orchestrator(engine).process(_pdf(sample_pdf_bytes))
        assert result.strategy is Strategy.WHOLE_DOCUMENT
        assert result.total_text == "Hello PDF World, recognized in one call"
        assert result.notice is None
        assert result.total_confidence == result.pages[0].confidence == 95.0
        assert engine.calls == [(PDF_MEDIA_TYPE, "doc.pdf")]


class TestPerPagePath:
    def test_short_whole_document_text_falls_back_to_pages(
        self, multi_page_pdf_bytes: bytes
    ) -> None:
        engine = ScriptedEngine(document_text="too short")
        events: list[object] = []
        result = _orchestrator(engine).process(
            _pdf(multi_page_pdf_bytes), ProcessingOptions(progress_callback=events.append)
        )
        assert result.strategy is Strategy.PER_PAGE
        assert [page.page_number for page in result.pages] == [1, 2]
        assert result.total_text == (
            "Recognized text of page-1\n\nRecognized text of page-2"
        )
        assert result.classification.total_pages == 2
        assert result.classification.has_selectable_text
        assert Converting(total_pages=2) in events
        recognizing = [e for e in events if isinstance(e, Recognizing)]
        assert [e.current for e in recognizing] == [1, 2]
        assert events[-1] == Complete(strategy="per_page")
        assert result.state_trail == (
            "analyzing",
            "ocr_processing",
            "analyzing",
            "converting",
            "ocr_processing",
            "aggregating",
            "complete",
        )

    def test_page_limit_is_applied(self, twelve_page_pdf_bytes: bytes) -> None:
        result = _orchestrator(ScriptedEngine()).process(
            _pdf(twelve_page_pdf_bytes), ProcessingOptions(max_pages=10)
        )
        assert len(result.pages) == 10
        assert result.classification.total_pages == 12

    def test_small_page_limit(self, ten_page_pdf_bytes: bytes) -> None:
        engine = ScriptedEngine()
        result = _orchestrator(engine).process(
            _pdf(ten_page_pdf_bytes), ProcessingOptions(max_pages=3)
        )
        assert [page.page_number for page in result.pages] == [1, 2, 3]
        assert [name for _, name in engine.calls[1:]] == ["page-1", "page-2", "page-3"]

    def test_render_failure_mid_document_keeps_other_pages(
        self, three_page_pdf_bytes: bytes
    ) -> None:
        render = PyMuPdfBackend._render

        def render_all_but_second(doc, page_number, *args):  # type: ignore[no-untyped-def]
            if page_number == 2:
                raise RendererUnavailableError("pymupdf could not render page 2")
            return render(doc, page_number, *args)

        engine = ScriptedEngine()
        with patch.object(PyMuPdfBackend, "_render", side_effect=render_all_but_second):
            result = _orchestrator(engine).process(_pdf(three_page_pdf_bytes))
        assert result.strategy is Strategy.PER_PAGE
        assert [page.page_number for page in result.pages] == [1, 2, 3]
        assert result.pages[0].text == "Recognized text of page-1"
        assert result.pages[1].error == "pymupdf could not render page 2"
        assert result.pages[2].text == "Recognized text of page-3"
        assert [name for _, name in engine.calls[1:]] == ["page-1", "page-3"]

    def test_engine_failures_are_recorded_per_page(self, multi_page_pdf_bytes: bytes) -> None:
        engine = ScriptedEngine(fail_pages=True)
        result = _orchestrator(engine).process(_pdf(multi_page_pdf_bytes))
        assert result.strategy is Strategy.PER_PAGE
        assert len(result.pages) == 2
        assert all(page.failed for page in result.pages)
        assert result.total_confidence == 0.0
        # Whole document plus two attempts for each page.
        assert len(engine.calls) == 5

    def test_devanagari_text_is_repaired(self, sample_pdf_bytes: bytes) -> None:
        engine = ScriptedEngine(page_text="अाज  काे")
        result = _orchestrator(engine).process(_pdf(sample_pdf_bytes))
        assert result.total_text == "आज को"
        assert result.script_detection is not None
        assert result.script_detection.is_target_script

    def test_image_upload(self, image_document: UploadedDocument) -> None:
        engine = ScriptedEngine()
        result = _orchestrator(engine).process(image_document)
        assert result.strategy is Strategy.PER_PAGE
        assert result.classification.confidence == 100.0
        assert result.pages[0].text == "Recognized text of page-1"


class TestDegradedPaths:
    def test_renderer_unavailable_uses_enhanced_stub(self, multi_page_pdf_bytes: bytes) -> None:
        events: list[object] = []
        with patch.object(
            PyMuPdfBackend, "_render", side_effect=RendererUnavailableError("no canvas")
        ):
            result = _orchestrator(ScriptedEngine()).process(
                _pdf(multi_page_pdf_bytes), ProcessingOptions(progress_callback=events.append)
            )
        assert result.strategy is Strategy.ENHANCED
        assert result.total_confidence == 0.0
        assert result.classification.total_pages == 2
        assert "- Pages: 2" in result.total_text
        assert any(isinstance(e, Degraded) for e in events)
        assert "degraded_strategy" in result.state_trail

    def test_corrupt_pdf_uses_simple_stub(self) -> None:
        result = _orchestrator(ScriptedEngine()).process(_pdf(b"not a pdf"))
        assert result.strategy is Strategy.SIMPLE
        assert "doc.pdf" in result.total_text
        assert result.total_confidence == 0.0

    def test_empty_pdf_reaches_terminal_fallback(self) -> None:
        result = _orchestrator(ScriptedEngine()).process(_pdf(b""))
        assert result.strategy is Strategy.FALLBACK
        assert len(result.pages) == 1
        assert result.state_trail[-1] == "complete"


@pytest.mark.parametrize("engine_text", ["", "   "])
def test_blank_scan_is_not_an_error(empty_pdf_bytes: bytes, engine_text: str) -> None:
    result = _orchestrator(ScriptedEngine(page_text=engine_text)).process(_pdf(empty_pdf_bytes))
    assert result.strategy is Strategy.PER_PAGE
    assert result.pages[0].text == ""
    assert not result.pages[0].failed
    assert result.total_confidence == 0.0
    assert result.classification.is_scanned
    assert result.notice == EMPTY_RESULT_NOTICE


def test_blank_two_page_document_explains_empty_result(blank_two_page_pdf_bytes: bytes) -> None:
    events: list[object] = []
    result = _orchestrator(ScriptedEngine(page_text="")).process(
        _pdf(blank_two_page_pdf_bytes), ProcessingOptions(progress_callback=events.append)
    )
    assert result.strategy is Strategy.PER_PAGE
    assert len(result.pages) == 2
    assert result.total_words == 0
    assert result.total_confidence == 0.0
    assert all(page.error is None for page in result.pages)
    assert result.notice == EMPTY_RESULT_NOTICE
    assert events[-1] == Complete(strategy="per_page", message=EMPTY_RESULT_NOTICE)
