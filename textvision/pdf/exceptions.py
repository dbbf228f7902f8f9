class RenderError(Exception):
    """Base exception for document opening and rendering errors."""


class RendererUnavailableError(RenderError):
    """Raised when the rendering machinery cannot initialise or produce a bitmap."""


class DocumentUnreadableError(RenderError):
    """Raised when the bytes cannot be parsed as the declared document type."""
