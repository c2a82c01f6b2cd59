from pydantic import BaseModel
import os


def _csv_env(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    # HTTP
    host: str = os.getenv("NOVA_HOST", "127.0.0.1")
    port: int = int(os.getenv("NOVA_PORT", "8000"))
    cors_origins: list[str] = _csv_env("NOVA_CORS_ORIGINS", "*")

    # Credentials (request-supplied keys take precedence for direct + search)
    gateway_api_key: str | None = os.getenv("GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY")
    direct_provider_api_key: str | None = os.getenv("OPENROUTER_API_KEY")
    search_api_key: str | None = os.getenv("TAVILY_API_KEY")

    # Upstream endpoints
    gateway_url: str = os.getenv("NOVA_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
    direct_provider_url: str = os.getenv("NOVA_DIRECT_PROVIDER_URL", "https://openrouter.ai/api/v1/chat/completions")
    search_url: str = os.getenv("NOVA_SEARCH_URL", "https://api.tavily.com/search")
    app_url: str = os.getenv("NOVA_APP_URL", "https://nova-ai.lovable.app")
    app_title: str = os.getenv("NOVA_APP_TITLE", "NOVA AI")

    # Model catalog extensions (merged with the built-in lists)
    extra_gateway_models: list[str] = _csv_env("NOVA_GATEWAY_MODELS")
    extra_direct_models: list[str] = _csv_env("NOVA_DIRECT_MODELS")

    # Request shaping
    max_output_tokens: int = int(os.getenv("NOVA_MAX_OUTPUT_TOKENS", "4096"))
    attachment_text_limit: int = 50_000
    search_max_results: int = 3
    http_timeout_seconds: float = float(os.getenv("NOVA_HTTP_TIMEOUT", "60"))

    log_level: str = os.getenv("NOVA_LOG_LEVEL", "INFO")

settings = Settings()
