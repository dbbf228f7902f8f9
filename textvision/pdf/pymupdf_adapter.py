from collections.abc import Iterator
from contextlib import contextmanager

import pymupdf

from textvision.documents.models import PageImage
from textvision.pdf.base import BasePdfBackend, jpeg_quality, mime_type_for
from textvision.pdf.exceptions import DocumentUnreadableError, RendererUnavailableError


class PyMuPdfBackend(BasePdfBackend):
    """Reads and renders PDF pages using PyMuPDF."""

    def page_count(self, pdf_bytes: bytes) -> int:
        with self._open(pdf_bytes) as doc:
            return int(doc.page_count)

    def extract_page_texts(self, pdf_bytes: bytes, max_pages: int) -> list[str]:
        with self._open(pdf_bytes) as doc:
            try:
                return [doc[i].get_text() for i in range(min(doc.page_count, max_pages))]
            except Exception as exc:
                raise DocumentUnreadableError(
                    f"pymupdf text extraction failed: {exc}"
                ) from exc

    def iter_page_images(
        self,
        pdf_bytes: bytes,
        *,
        max_pages: int,
        scale: float,
        quality: float,
        image_format: str,
    ) -> Iterator[PageImage]:
        with self._open(pdf_bytes) as doc:
            for page_number in range(1, min(doc.page_count, max_pages) + 1):
                yield self._render(doc, page_number, scale, quality, image_format)

    def render_page(
        self,
        pdf_bytes: bytes,
        page_number: int,
        *,
        scale: float,
        quality: float,
        image_format: str,
    ) -> PageImage:
        with self._open(pdf_bytes) as doc:
            if not 1 <= page_number <= doc.page_count:
                raise DocumentUnreadableError(
                    f"Page {page_number} out of range (document has {doc.page_count} pages)"
                )
            return self._render(doc, page_number, scale, quality, image_format)

    @contextmanager
    def _open(self, pdf_bytes: bytes) -> Iterator["pymupdf.Document"]:
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise DocumentUnreadableError(f"pymupdf could not open document: {exc}") from exc
        try:
            yield doc
        finally:
            doc.close()

    @staticmethod
    def _render(
        doc: "pymupdf.Document",
        page_number: int,
        scale: float,
        quality: float,
        image_format: str,
    ) -> PageImage:
        mime_type = mime_type_for(image_format)
        try:
            page = doc.load_page(page_number - 1)
        except Exception as exc:
            raise DocumentUnreadableError(
                f"pymupdf could not load page {page_number}: {exc}"
            ) from exc
        try:
            pixmap = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
            if mime_type == "image/jpeg":
                content = pixmap.tobytes("jpeg", jpg_quality=jpeg_quality(quality))
            else:
                content = pixmap.tobytes("png")
        except Exception as exc:
            raise RendererUnavailableError(
                f"pymupdf could not render page {page_number}: {exc}"
            ) from exc
        return PageImage(
            page_number=page_number,
            content=content,
            width=pixmap.width,
            height=pixmap.height,
            mime_type=mime_type,
        )
