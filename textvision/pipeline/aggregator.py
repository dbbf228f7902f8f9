from collections.abc import Iterable

from textvision.documents.models import (
    ClassificationResult,
    DocumentResult,
    PageRecognitionResult,
    ScriptDetection,
    Strategy,
)

PAGE_SEPARATOR = "\n\n"


def aggregate(
    strategy: Strategy,
    classification: ClassificationResult,
    pages: Iterable[PageRecognitionResult],
    script_detection: ScriptDetection | None = None,
    state_trail: tuple[str, ...] = (),
) -> DocumentResult:
    """Merge per-page results into one DocumentResult.

    Pages are ordered by page number; text is joined with a blank line,
    confidence is the mean over all pages (0 when there are none) and words
    are summed.
    """
    ordered = tuple(sorted(pages, key=lambda page: page.page_number))
    total_confidence = (
        sum(page.confidence for page in ordered) / len(ordered) if ordered else 0.0
    )
    return DocumentResult(
        strategy=strategy,
        classification=classification,
        pages=ordered,
        total_text=PAGE_SEPARATOR.join(page.text for page in ordered),
        total_confidence=total_confidence,
        total_words=sum(page.word_count for page in ordered),
        script_detection=script_detection,
        state_trail=state_trail,
    )
