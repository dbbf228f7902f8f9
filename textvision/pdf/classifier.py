"""Decides whether a PDF carries selectable text or is a scan.

Only the first few pages are sampled. A page counts as text-bearing when its
embedded text, stripped, is longer than ``MIN_PAGE_TEXT_CHARS``. The sampled
text length is normalised by 100 characters per sampled page:

    text_ratio = sampled_text_length / (sampled_pages * 100)

and the document is text-bearing when at least one page has text and the
ratio exceeds ``MIN_TEXT_RATIO``.
"""

from textvision.documents.models import ClassificationResult, UploadedDocument
from textvision.logging.logger import Log
from textvision.pdf.base import BasePdfBackend
from textvision.pdf.exceptions import RenderError

SAMPLE_PAGES = 3
MIN_PAGE_TEXT_CHARS = 10
MIN_TEXT_RATIO = 0.1
MAX_TEXT_CONFIDENCE = 95.0
SCANNED_CONFIDENCE = 85.0
LARGE_DOCUMENT_PAGES = 10


class DocumentClassifier:
    """Samples a document's first pages and labels it scanned or text-bearing."""

    def __init__(self, backend: BasePdfBackend, sample_pages: int = SAMPLE_PAGES) -> None:
        self._backend = backend
        self._sample_pages = sample_pages

    def classify(self, document: UploadedDocument) -> ClassificationResult:
        """Classify the document. Never raises for unreadable bytes."""
        if document.is_image:
            return ClassificationResult(
                is_scanned=True,
                has_selectable_text=False,
                confidence=100.0,
                total_pages=1,
                pages_with_text=0,
            )
        try:
            total_pages = self._backend.page_count(document.content)
            sampled = self._backend.extract_page_texts(document.content, self._sample_pages)
        except RenderError as exc:
            Log.warning(f"Classification of '{document.filename}' failed: {exc}")
            return ClassificationResult.unreadable()

        result = self._score(sampled, total_pages)
        Log.info(
            f"Classified '{document.filename}': scanned={result.is_scanned} "
            f"confidence={result.confidence:.1f} pages={total_pages} "
            f"pages_with_text={result.pages_with_text}"
        )
        return result

    @staticmethod
    def _score(sampled: list[str], total_pages: int) -> ClassificationResult:
        if not sampled:
            return ClassificationResult(
                is_scanned=True,
                has_selectable_text=False,
                confidence=SCANNED_CONFIDENCE,
                total_pages=total_pages,
                pages_with_text=0,
            )

        pages_with_text = 0
        text_length = 0
        for text in sampled:
            if len(text.strip()) > MIN_PAGE_TEXT_CHARS:
                pages_with_text += 1
                text_length += len(text)

        text_ratio = text_length / (len(sampled) * 100)
        has_text = pages_with_text > 0 and text_ratio > MIN_TEXT_RATIO
        confidence = min(MAX_TEXT_CONFIDENCE, text_ratio * 100) if has_text else SCANNED_CONFIDENCE
        return ClassificationResult(
            is_scanned=not has_text,
            has_selectable_text=has_text,
            confidence=confidence,
            total_pages=total_pages,
            pages_with_text=pages_with_text,
        )


def processing_tips(classification: ClassificationResult) -> list[str]:
    """User-facing hints derived from a classification."""
    tips: list[str] = []
    if classification.is_scanned:
        tips.append("This appears to be a scanned document - OCR processing will be used")
        tips.append("For best results, ensure the original document has clear, readable text")
        tips.append("Higher resolution scans typically produce better OCR results")
    else:
        tips.append("This PDF contains selectable text - standard extraction will be used")
        tips.append("Text-based PDFs typically process faster and more accurately")

    if classification.total_pages > LARGE_DOCUMENT_PAGES:
        tips.append("Large PDFs may take longer to process")
        tips.append("Consider splitting very large documents into smaller sections")
    return tips
