class RecognitionError(Exception):
    """Raised when a recognition engine call fails."""


class RecognitionNetworkError(RecognitionError):
    """Raised when the engine call fails due to network/HTTP/timeout issues."""


class RecognitionResponseError(RecognitionError):
    """Raised when the engine answers but the payload is unusable."""
