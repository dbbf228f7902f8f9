class DocumentValidationError(ValueError):
    """Raised when the pipeline is handed something it cannot treat as a document."""
