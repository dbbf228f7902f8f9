from dataclasses import dataclass, field

from textvision.documents.models import UploadedDocument

DEFAULT_MAX_BYTES = 50 * 1024 * 1024
DEFAULT_WARN_BYTES = 20 * 1024 * 1024


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of pre-flight checks on an upload."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_document(
    document: UploadedDocument,
    max_bytes: int = DEFAULT_MAX_BYTES,
    warn_bytes: int = DEFAULT_WARN_BYTES,
) -> ValidationReport:
    """Check size and media type of an upload before processing.

    Returns:
        ValidationReport with blocking errors and non-blocking warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not document.is_supported:
        errors.append(
            f"Unsupported media type '{document.media_type}'. "
            "Please upload a PDF or an image file."
        )
    if document.size_bytes == 0:
        errors.append("The uploaded file is empty.")
    elif document.size_bytes > max_bytes:
        errors.append(
            f"File size too large ({_megabytes(document.size_bytes)} MB). "
            f"Please select a file smaller than {_megabytes(max_bytes)} MB."
        )
    elif document.size_bytes > warn_bytes:
        warnings.append("Large file detected - processing may take longer")

    return ValidationReport(errors=errors, warnings=warnings)


def _megabytes(size: int) -> str:
    return f"{size / 1024 / 1024:.2f}"
