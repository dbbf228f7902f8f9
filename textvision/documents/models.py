import enum
import mimetypes
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class UploadedDocument:
    """Raw upload handed to the pipeline by the caller."""

    SUPPORTED_IMAGE_TYPES: ClassVar[frozenset[str]] = frozenset(
        {
            "image/png",
            "image/jpeg",
            "image/jpg",
            "image/webp",
            "image/gif",
            "image/bmp",
            "image/tiff",
        }
    )

    content: bytes
    media_type: str
    filename: str

    @classmethod
    def from_path(cls, path: Path, media_type: str | None = None) -> "UploadedDocument":
        """Read a file from disk, guessing its media type from the extension."""
        if media_type is None:
            guessed, _ = mimetypes.guess_type(path.name)
            media_type = guessed or "application/octet-stream"
        return cls(content=path.read_bytes(), media_type=media_type, filename=path.name)

    @property
    def is_pdf(self) -> bool:
        return self.media_type.lower() == PDF_MEDIA_TYPE

    @property
    def is_image(self) -> bool:
        return self.media_type.lower() in self.SUPPORTED_IMAGE_TYPES

    @property
    def is_supported(self) -> bool:
        return self.is_pdf or self.is_image

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class PageImage:
    """One rasterized page. page_number is 1-based."""

    page_number: int
    content: bytes
    width: int
    height: int
    mime_type: str = "image/png"


@dataclass(frozen=True)
class ClassificationResult:
    """Text-bearing vs scanned verdict for a document."""

    is_scanned: bool
    has_selectable_text: bool
    confidence: float
    total_pages: int
    pages_with_text: int

    @classmethod
    def unreadable(cls) -> "ClassificationResult":
        """Result used when the document cannot be opened at all."""
        return cls(
            is_scanned=True,
            has_selectable_text=False,
            confidence=0.0,
            total_pages=0,
            pages_with_text=0,
        )

    @classmethod
    def not_performed(cls, total_pages: int = 1, pages_with_text: int = 0) -> "ClassificationResult":
        """Placeholder for strategies that never open the document."""
        return cls(
            is_scanned=True,
            has_selectable_text=False,
            confidence=0.0,
            total_pages=total_pages,
            pages_with_text=pages_with_text,
        )


@dataclass(frozen=True)
class RecognitionOutput:
    """Text and 0-100 confidence returned by one recognition call."""

    text: str
    confidence: float


@dataclass(frozen=True)
class PageRecognitionResult:
    """Recognition outcome for a single page."""

    page_number: int
    text: str
    confidence: float
    word_count: int
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class ScriptDetection:
    """Share of a target script's characters in a text."""

    script: str
    is_target_script: bool
    percentage: float
    script_chars: int
    total_chars: int


class Strategy(str, enum.Enum):
    WHOLE_DOCUMENT = "whole_document"
    PER_PAGE = "per_page"
    ENHANCED = "enhanced"
    SIMPLE = "simple"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class DocumentResult:
    """The single value returned to the caller."""

    strategy: Strategy
    classification: ClassificationResult
    pages: tuple[PageRecognitionResult, ...]
    total_text: str
    total_confidence: float
    total_words: int
    script_detection: ScriptDetection | None = None
    state_trail: tuple[str, ...] = ()
    notice: str | None = None


@dataclass(frozen=True)
class ProcessingOptions:
    """Per-invocation knobs supplied by the caller."""

    max_pages: int = 10
    progress_callback: Callable[[Any], None] | None = field(default=None, compare=False)
