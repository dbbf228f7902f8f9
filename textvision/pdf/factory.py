from textvision.pdf.base import BasePdfBackend
from textvision.pdf.pdfplumber_adapter import PdfPlumberBackend
from textvision.pdf.pymupdf_adapter import PyMuPdfBackend


class PdfBackendFactory:
    """Creates the PDF backend named in settings."""

    ADAPTERS: dict[str, type[BasePdfBackend]] = {
        "pdfplumber": PdfPlumberBackend,
        "pymupdf": PyMuPdfBackend,
    }

    @classmethod
    def create(cls, engine: str) -> BasePdfBackend:
        engine = engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
