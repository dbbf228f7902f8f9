import io

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from textvision.documents.models import PDF_MEDIA_TYPE, UploadedDocument


def _pdf_with_pages(pages: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for text in pages:
        if text:
            c.drawString(72, 720, text)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _pdf_with_pages(["Hello PDF World"])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    return _pdf_with_pages(["Page one content", "Page two content"])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    return _pdf_with_pages([""])


@pytest.fixture()
def twelve_page_pdf_bytes() -> bytes:
    """Generate a twelve-page PDF, two pages over the default page limit."""
    return _pdf_with_pages([f"Content of page number {n}" for n in range(1, 13)])


@pytest.fixture()
def ten_page_pdf_bytes() -> bytes:
    """Generate a ten-page PDF with numbered text on each page."""
    return _pdf_with_pages([f"Content of page number {n}" for n in range(1, 11)])


@pytest.fixture()
def three_page_pdf_bytes() -> bytes:
    """Generate a three-page PDF with known text on each page."""
    return _pdf_with_pages(["Page one content", "Page two content", "Page three content"])


@pytest.fixture()
def blank_two_page_pdf_bytes() -> bytes:
    """Generate a valid two-page PDF with no text on either page."""
    return _pdf_with_pages(["", ""])


@pytest.fixture()
def png_bytes() -> bytes:
    """Generate a small white PNG image."""
    buf = io.BytesIO()
    Image.new("RGB", (40, 30), "white").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def pdf_document(sample_pdf_bytes: bytes) -> UploadedDocument:
    return UploadedDocument(
        content=sample_pdf_bytes, media_type=PDF_MEDIA_TYPE, filename="sample.pdf"
    )


@pytest.fixture()
def image_document(png_bytes: bytes) -> UploadedDocument:
    return UploadedDocument(content=png_bytes, media_type="image/png", filename="scan.png")
