import io
from collections.abc import Iterator

from PIL import Image

from textvision.documents.models import PageImage, UploadedDocument
from textvision.logging.logger import Log
from textvision.pdf.base import BasePdfBackend
from textvision.pdf.exceptions import DocumentUnreadableError

DEFAULT_SCALE = 2.0
DEFAULT_QUALITY = 0.95
DEFAULT_MAX_PAGES = 10


class Rasterizer:
    """Turns uploaded documents into page bitmaps for image-based recognition.

    PDF pages are rendered through the configured backend at ``scale`` (2x by
    default, which keeps small print legible to the engine). Image uploads
    pass through unchanged as a single page.
    """

    def __init__(
        self,
        backend: BasePdfBackend,
        scale: float = DEFAULT_SCALE,
        quality: float = DEFAULT_QUALITY,
        image_format: str = "png",
    ) -> None:
        self._backend = backend
        self._scale = scale
        self._quality = quality
        self._image_format = image_format

    def rasterize(
        self,
        document: UploadedDocument,
        page_number: int,
        scale: float | None = None,
        quality: float | None = None,
    ) -> PageImage:
        """Render one 1-based page.

        Raises:
            DocumentUnreadableError: bytes cannot be opened or page is out of range.
            RendererUnavailableError: renderer failed to produce a bitmap.
        """
        if document.is_image:
            if page_number != 1:
                raise DocumentUnreadableError(
                    f"Page {page_number} out of range (image uploads have 1 page)"
                )
            return self._image_page(document)
        return self._backend.render_page(
            document.content,
            page_number,
            scale=self._scale if scale is None else scale,
            quality=self._quality if quality is None else quality,
            image_format=self._image_format,
        )

    def iter_pages(
        self,
        document: UploadedDocument,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> Iterator[PageImage]:
        """Lazily yield pages 1..max_pages; each bitmap can be dropped before the next renders."""
        _check_max_pages(max_pages)
        if document.is_image:
            yield self._image_page(document)
            return
        for image in self._backend.iter_page_images(
            document.content,
            max_pages=max_pages,
            scale=self._scale,
            quality=self._quality,
            image_format=self._image_format,
        ):
            Log.debug(
                f"Rendered page {image.page_number} of '{document.filename}' "
                f"({image.width}x{image.height}, {len(image.content)} bytes)"
            )
            yield image

    def rasterize_all(
        self,
        document: UploadedDocument,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> list[PageImage]:
        return list(self.iter_pages(document, max_pages))

    def page_total(self, document: UploadedDocument, max_pages: int = DEFAULT_MAX_PAGES) -> int:
        """Number of pages ``iter_pages`` will produce."""
        _check_max_pages(max_pages)
        if document.is_image:
            return 1
        return min(self._backend.page_count(document.content), max_pages)

    @staticmethod
    def _image_page(document: UploadedDocument) -> PageImage:
        try:
            with Image.open(io.BytesIO(document.content)) as image:
                width, height = image.size
        except Exception as exc:
            raise DocumentUnreadableError(
                f"Could not read image '{document.filename}': {exc}"
            ) from exc
        return PageImage(
            page_number=1,
            content=document.content,
            width=width,
            height=height,
            mime_type=document.media_type.lower(),
        )


def _check_max_pages(max_pages: int) -> None:
    if max_pages < 1:
        raise ValueError(f"max_pages must be at least 1, got {max_pages}")
