from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    pdf_engine: str = "pymupdf"
    pdf_fallback_engine: str = "pdfplumber"
    render_scale: float = 2.0
    render_quality: float = 0.95
    render_image_format: str = "png"

    max_pages: int = 10
    whole_document_min_chars: int = 10
    max_document_bytes: int = 50 * 1024 * 1024
    large_document_warning_bytes: int = 20 * 1024 * 1024

    target_script: str = "devanagari"
    script_threshold_percent: float = 10.0

    recognition_provider: str = "webhook"
    recognition_max_attempts: int = 3
    recognition_backoff_seconds: float = 1.0

    recognition_webhook_url: str = ""
    recognition_webhook_api_key: str = ""
    recognition_webhook_timeout_seconds: int = 60

    recognition_openai_api_key: str = ""
    recognition_openai_model_name: str = "gpt-4o-mini"
    recognition_openai_timeout_seconds: int = 60

    recognition_openai_compatible_base_url: str = ""
    recognition_openai_compatible_api_key: str = ""
    recognition_openai_compatible_model_name: str = ""
    recognition_openai_compatible_timeout_seconds: int = 60

    recognition_openrouter_api_key: str = ""
    recognition_openrouter_model_name: str = "amazon/nova-2-lite-v1"
    recognition_openrouter_timeout_seconds: int = 60

    recognition_groq_api_key: str = ""
    recognition_groq_model_name: str = ""
    recognition_groq_timeout_seconds: int = 60

    recognition_together_api_key: str = ""
    recognition_together_model_name: str = ""
    recognition_together_timeout_seconds: int = 60

    recognition_ollama_api_key: str = "ollama"
    recognition_ollama_model_name: str = ""
    recognition_ollama_timeout_seconds: int = 120
