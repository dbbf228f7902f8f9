from typing import ClassVar

from textvision.config.settings import Settings
from textvision.recognition.client import RecognitionClient
from textvision.recognition.client_base import BaseRecognitionEngine
from textvision.recognition.example_engine_adapter import ExampleEngineAdapter
from textvision.recognition.openai_engine_adapter import OpenAIEngineAdapter
from textvision.recognition.webhook_engine_adapter import WebhookEngineAdapter


class RecognitionEngineFactory:
    """Creates the configured recognition engine and client."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create_client(cls, settings: Settings) -> RecognitionClient:
        """Create a retrying RecognitionClient around the configured engine."""
        return RecognitionClient(
            engine=cls.create(settings),
            max_attempts=settings.recognition_max_attempts,
            backoff_seconds=settings.recognition_backoff_seconds,
        )

    @classmethod
    def create(cls, settings: Settings) -> BaseRecognitionEngine:
        provider = settings.recognition_provider.lower()
        if provider == "example":
            return ExampleEngineAdapter()
        if provider == "webhook":
            return WebhookEngineAdapter(
                url=settings.recognition_webhook_url,
                api_key=settings.recognition_webhook_api_key,
                timeout_seconds=settings.recognition_webhook_timeout_seconds,
            )
        base_url = cls._resolve_base_url(provider, settings)
        return OpenAIEngineAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            model=cls._resolve_model_name(provider, settings),
            timeout_seconds=cls._resolve_timeout_seconds(provider, settings),
            base_url=base_url,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.recognition_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "recognition_openai_compatible_base_url is required for "
                    "recognition_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "webhook",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown recognition provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.recognition_openai_api_key,
            "openai_compatible": settings.recognition_openai_compatible_api_key,
            "openrouter": settings.recognition_openrouter_api_key,
            "groq": settings.recognition_groq_api_key,
            "together": settings.recognition_together_api_key,
            "ollama": settings.recognition_ollama_api_key,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.recognition_openai_model_name,
            "openai_compatible": settings.recognition_openai_compatible_model_name,
            "openrouter": settings.recognition_openrouter_model_name,
            "groq": settings.recognition_groq_model_name,
            "together": settings.recognition_together_model_name,
            "ollama": settings.recognition_ollama_model_name,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_timeout_seconds(cls, provider: str, settings: Settings) -> int:
        key_map = {
            "openai": settings.recognition_openai_timeout_seconds,
            "openai_compatible": settings.recognition_openai_compatible_timeout_seconds,
            "openrouter": settings.recognition_openrouter_timeout_seconds,
            "groq": settings.recognition_groq_timeout_seconds,
            "together": settings.recognition_together_timeout_seconds,
            "ollama": settings.recognition_ollama_timeout_seconds,
        }
        return key_map.get(provider, 60) or 60
