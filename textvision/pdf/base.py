from abc import ABC, abstractmethod
from collections.abc import Iterator

from textvision.documents.models import PageImage

IMAGE_MIME_TYPES = {"png": "image/png", "jpeg": "image/jpeg", "jpg": "image/jpeg"}


class BasePdfBackend(ABC):
    """Contract for all PDF rendering/text adapters.

    Every method opens the document from raw bytes. Failures are reported as:
        DocumentUnreadableError: the bytes are not a readable PDF, or the
            requested page does not exist.
        RendererUnavailableError: the document opened but the renderer
            could not produce a bitmap.
    """

    @abstractmethod
    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages in the document."""

    @abstractmethod
    def extract_page_texts(self, pdf_bytes: bytes, max_pages: int) -> list[str]:
        """Return the embedded text of the first ``max_pages`` pages, one entry per page."""

    @abstractmethod
    def iter_page_images(
        self,
        pdf_bytes: bytes,
        *,
        max_pages: int,
        scale: float,
        quality: float,
        image_format: str,
    ) -> Iterator[PageImage]:
        """Lazily render pages 1..max_pages, keeping one bitmap alive at a time."""

    @abstractmethod
    def render_page(
        self,
        pdf_bytes: bytes,
        page_number: int,
        *,
        scale: float,
        quality: float,
        image_format: str,
    ) -> PageImage:
        """Render a single 1-based page."""


def mime_type_for(image_format: str) -> str:
    try:
        return IMAGE_MIME_TYPES[image_format.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported image format '{image_format}'. Choose from: {sorted(IMAGE_MIME_TYPES)}"
        ) from None


def jpeg_quality(quality: float) -> int:
    """Map a 0-1 quality factor to the 1-100 JPEG quality scale."""
    return max(1, min(100, round(quality * 100)))
