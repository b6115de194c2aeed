"""Configuration management using pydantic-settings."""
import logging
from enum import Enum
from typing import Optional

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMBackendType(str, Enum):
    """Supported LLM backends."""
    OPENAI = "openai"
    MOCK = "mock"


class EngineSettings(BaseSettings):
    """Classification and scoring engine configuration.

    All settings prefixed with ENGINE_ (e.g., ENGINE_CATALOG_PATH=/etc/categories.json)
    """

    catalog_path: Optional[str] = Field(
        default=None,
        description="Path to the category catalog JSON (packaged catalog when unset)"
    )
    word_boundary_matching: bool = Field(
        default=True,
        description="Count keyword hits only on word boundaries (raw substrings when false)"
    )
    min_sustainable_score: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Final score >= this counts as sustainable"
    )
    fallback_category: Optional[str] = Field(
        default="general",
        description="Category used when classification is unresolved or low confidence"
    )
    category_hint_threshold: float = Field(
        default=80.0,
        ge=0,
        le=100,
        description="Minimum fuzzy score for a caller category hint to be accepted"
    )
    cache_ttl_seconds: int = Field(
        default=86400,
        ge=1,
        description="TTL of cached analysis payloads (default: 24 hours)"
    )
    max_alternatives: int = Field(
        default=8,
        ge=0,
        le=50,
        description="Maximum alternative listings returned"
    )
    translate_product_names: bool = Field(
        default=True,
        description="Translate non-English product names with the LLM before classification"
    )
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class LLMSettings(BaseSettings):
    """LLM configuration for the fact extractor.

    All settings prefixed with LLM_ (e.g., LLM_MODEL=llama-3.3-70b-versatile)

    Supported backends:
    - openai: Any OpenAI-compatible chat completions API (Groq by default)
    - mock: Mock client for testing
    """

    backend: LLMBackendType = Field(
        default=LLMBackendType.OPENAI,
        description="LLM backend to use (openai, mock)"
    )
    model: str = Field(
        default="llama-3.3-70b-versatile",
        description="Model used for fact extraction"
    )
    base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="OpenAI-compatible API base URL"
    )
    api_key: Optional[str] = Field(
        default=None,
        description="API key for the LLM provider"
    )
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum retry attempts"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Model temperature (lower = more deterministic)"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class SearchSettings(BaseSettings):
    """Web search configuration (Tavily).

    All settings prefixed with SEARCH_ (e.g., SEARCH_API_KEY=tvly-...)
    """

    base_url: str = Field(
        default="https://api.tavily.com",
        description="Search API base URL"
    )
    api_key: Optional[str] = Field(default=None, description="Search API key")
    max_results: int = Field(default=10, ge=1, le=50)
    search_depth: str = Field(default="advanced", description="basic or advanced")
    timeout: float = Field(default=15.0, ge=1.0, le=120.0)
    max_retries: int = Field(default=3, ge=1, le=10)

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class RedisSettings(BaseSettings):
    """Redis connection for the analysis result cache.

    All settings prefixed with REDIS_ (e.g., REDIS_HOST=redis)
    """

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    password: Optional[str] = None
    db: int = Field(default=0, ge=0, le=15)

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def url(self) -> str:
        """Construct Redis URL from components."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


# Global settings instances
engine_settings = EngineSettings()
llm_settings = LLMSettings()
search_settings = SearchSettings()
redis_settings = RedisSettings()


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog for JSON logging."""
    logging.basicConfig(format="%(message)s", level=log_level.upper())
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Initialize logging on module import (after settings are loaded)
configure_logging(engine_settings.log_level)
