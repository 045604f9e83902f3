from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for admin-only writes (embeddings, api logs)
    storage_bucket: str = "badge-images"

    # Replicate (CLIP image embeddings)
    replicate_api_token: Optional[str] = None
    replicate_api_url: str = "https://api.replicate.com/v1"
    replicate_clip_version: str = "75b33f253f7714a281ad3e9b28f63e3232d583716ef6718f2e46641077ea040a"
    replicate_poll_interval: float = 1.0
    replicate_max_poll_attempts: int = 30

    # Matching
    match_threshold: float = 0.85
    match_top_n: int = 3
    embedding_batch_size: int = 3

    # Search providers
    perplexity_api_key: Optional[str] = None
    perplexity_model: str = "llama-3.1-sonar-small-128k-online"
    serpapi_key: Optional[str] = None
    serpapi_url: str = "https://serpapi.com/search"
    openai_api_key: Optional[str] = None
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    openai_vision_model: str = "gpt-4o"

    # Notifications
    discord_webhook_url: Optional[str] = None
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    email_from_address: str = "noreply@mybadgelife.com"

    # App
    app_name: str = "mybadgelife-backend"
    app_base_url: str = "https://mybadgelife.com"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    http_timeout: float = 30.0
    badge_cache_ttl: int = 300

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
