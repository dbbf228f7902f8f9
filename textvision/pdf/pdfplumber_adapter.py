import io
from collections.abc import Iterator
from contextlib import contextmanager

import pdfplumber

from textvision.documents.models import PageImage
from textvision.pdf.base import BasePdfBackend, jpeg_quality, mime_type_for
from textvision.pdf.exceptions import DocumentUnreadableError, RendererUnavailableError

_POINTS_PER_INCH = 72


class PdfPlumberBackend(BasePdfBackend):
    """Reads PDF text with pdfplumber and renders pages through its Pillow-backed imaging."""

    def page_count(self, pdf_bytes: bytes) -> int:
        with self._open(pdf_bytes) as pdf:
            return len(pdf.pages)

    def extract_page_texts(self, pdf_bytes: bytes, max_pages: int) -> list[str]:
        with self._open(pdf_bytes) as pdf:
            try:
                return [page.extract_text() or "" for page in pdf.pages[:max_pages]]
            except Exception as exc:
                raise DocumentUnreadableError(
                    f"pdfplumber text extraction failed: {exc}"
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
        with self._open(pdf_bytes) as pdf:
            for index, page in enumerate(pdf.pages[:max_pages]):
                yield self._render(page, index + 1, scale, quality, image_format)

    def render_page(
        self,
        pdf_bytes: bytes,
        page_number: int,
        *,
        scale: float,
        quality: float,
        image_format: str,
    ) -> PageImage:
        with self._open(pdf_bytes) as pdf:
            if not 1 <= page_number <= len(pdf.pages):
                raise DocumentUnreadableError(
                    f"Page {page_number} out of range (document has {len(pdf.pages)} pages)"
                )
            return self._render(pdf.pages[page_number - 1], page_number, scale, quality, image_format)

    @contextmanager
    def _open(self, pdf_bytes: bytes) -> Iterator["pdfplumber.PDF"]:
        try:
            pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
            # Page objects are parsed lazily; touching them surfaces broken xref tables here.
            _ = pdf.pages
        except Exception as exc:
            raise DocumentUnreadableError(f"pdfplumber could not open document: {exc}") from exc
        try:
            yield pdf
        finally:
            pdf.close()

    @staticmethod
    def _render(
        page: object,
        page_number: int,
        scale: float,
        quality: float,
        image_format: str,
    ) -> PageImage:
        mime_type = mime_type_for(image_format)
        try:
            rendered = page.to_image(resolution=round(_POINTS_PER_INCH * scale))  # type: ignore[attr-defined]
            bitmap = rendered.original.convert("RGB")
            buf = io.BytesIO()
            if mime_type == "image/jpeg":
                bitmap.save(buf, format="JPEG", quality=jpeg_quality(quality))
            else:
                bitmap.save(buf, format="PNG")
        except Exception as exc:
            raise RendererUnavailableError(
                f"pdfplumber could not render page {page_number}: {exc}"
            ) from exc
        return PageImage(
            page_number=page_number,
            content=buf.getvalue(),
            width=bitmap.width,
            height=bitmap.height,
            mime_type=mime_type,
        )
