"""Configuration settings for the enrichment engine."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Pattern-learning collaborator (remote). No URL means no remote lookup.
    pattern_learning_url: Optional[str] = None
    pattern_learning_api_key: Optional[str] = None
    pattern_learning_timeout: float = 1.5

    # Type classification thresholds
    learning_acceptance_threshold: float = 0.6
    learning_similarity_threshold: float = 0.3
    keyword_match_confidence: float = 0.85
    category_match_confidence: float = 0.75
    default_type_confidence: float = 0.3

    # Fact confidence
    provider_confidence: float = 0.8
    fallback_fact_confidence: float = 0.5
    to_verify_threshold: float = 0.6

    # Redis Configuration (cache of pattern-learning suggestions)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    redis_socket_timeout: float = 0.5
    learning_cache_enabled: bool = False

    # Cache TTL (1 hour in seconds)
    learning_cache_ttl_seconds: int = 3600

    # Environment
    environment: str = "development"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
