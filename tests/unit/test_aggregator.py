import pytest

from textvision.documents.models import ClassificationResult, PageRecognitionResult, Strategy
from textvision.pipeline.aggregator import aggregate

CLASSIFICATION = ClassificationResult(True, False, 85.0, 3, 0)


class TestAggregate:
    def test_orders_pages_and_joins_text(self) -> None:
        pages = [
            PageRecognitionResult(2, "second page", 80.0, 2),
            PageRecognitionResult(1, "first page", 90.0, 2),
        ]
        result = aggregate(Strategy.PER_PAGE, CLASSIFICATION, pages)
        assert [page.page_number for page in result.pages] == [1, 2]
        assert result.total_text == "first page\n\nsecond page"

    def test_confidence_is_mean_over_all_pages(self) -> None:
        pages = [
            PageRecognitionResult(1, "ok", 90.0, 1),
            PageRecognitionResult(2, "", 0.0, 0, error="failed"),
            PageRecognitionResult(3, "ok", 60.0, 1),
        ]
        result = aggregate(Strategy.PER_PAGE, CLASSIFICATION, pages)
        assert result.total_confidence == pytest.approx(50.0)
        assert result.total_words == 2

    def test_single_page_keeps_confidence(self) -> None:
        page = PageRecognitionResult(1, "whole document text", 95.0, 3)
        result = aggregate(Strategy.WHOLE_DOCUMENT, CLASSIFICATION, [page])
        assert result.total_confidence == page.confidence
        assert result.total_text == page.text

    def test_no_pages(self) -> None:
        result = aggregate(Strategy.PER_PAGE, CLASSIFICATION, [])
        assert result.pages == ()
        assert result.total_text == ""
        assert result.total_confidence == 0.0
        assert result.total_words == 0
