from textvision.recognition.client import RecognitionClient
from textvision.recognition.client_base import BaseRecognitionEngine, EngineResponse
from textvision.recognition.factory import RecognitionEngineFactory

__all__ = [
    "BaseRecognitionEngine",
    "EngineResponse",
    "RecognitionClient",
    "RecognitionEngineFactory",
]
