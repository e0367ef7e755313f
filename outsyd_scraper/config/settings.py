"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Supabase (service role - the pipeline writes events and reads user roles)
    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: str | None = Field(default=None, alias="SUPABASE_SERVICE_ROLE_KEY")

    # Firecrawl (page -> markdown)
    firecrawl_url: str = Field(default="https://api.firecrawl.dev", alias="FIRECRAWL_URL")
    firecrawl_api_key: str | None = Field(default=None, alias="FIRECRAWL_API_KEY")
    firecrawl_timeout: float = Field(default=60.0, alias="FIRECRAWL_TIMEOUT")

    # LLM extraction
    # gateway: OpenAI-compatible AI gateway (default, Gemini Flash)
    # groq:    Groq cloud, same tool-call interface
    llm_provider: Literal["gateway", "groq"] = Field(default="gateway", alias="LLM_PROVIDER")
    ai_gateway_url: str = Field(default="https://ai.gateway.lovable.dev/v1", alias="AI_GATEWAY_URL")
    ai_gateway_api_key: str | None = Field(default=None, alias="AI_GATEWAY_API_KEY")
    groq_api_key: str | None = Field(default=None, alias="GROQ_API_KEY")
    llm_model: str = Field(default="google/gemini-2.5-flash", alias="LLM_MODEL")

    # Access control for the scrape endpoint
    scrape_cron_secret: str | None = Field(default=None, alias="SCRAPE_CRON_SECRET")
    admin_role: str = Field(default="admin", alias="ADMIN_ROLE")

    # Pipeline
    content_max_chars: int = Field(default=15000, alias="CONTENT_MAX_CHARS")
    fallback_image_url: str = Field(
        default="https://images.unsplash.com/photo-1540039155733-5bb30b53aa14?w=800",
        alias="FALLBACK_IMAGE_URL",
    )
    event_creator: str = Field(default="Outsyde Bot", alias="EVENT_CREATOR")
    dry_run: bool = Field(default=False, alias="DRY_RUN")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(default="console", alias="LOG_FORMAT")
    log_file: str | None = Field(default=None, alias="LOG_FILE")

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @property
    def llm_api_key(self) -> str | None:
        """API key for the configured LLM provider."""
        if self.llm_provider == "groq":
            return self.groq_api_key
        return self.ai_gateway_api_key

    def missing_credentials(self) -> list[str]:
        """List env names of credentials the pipeline needs but lacks."""
        missing = []
        if not self.firecrawl_api_key:
            missing.append("FIRECRAWL_API_KEY")
        if not self.llm_api_key:
            missing.append("GROQ_API_KEY" if self.llm_provider == "groq" else "AI_GATEWAY_API_KEY")
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_service_role_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
