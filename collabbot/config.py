"""Configuration management using pydantic-settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3978, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # Storage Configuration
    database_path: str = Field(default="./data/collab.db", description="DuckDB database file path")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    # Language Model Configuration
    llm_api_key: Optional[str] = Field(default=None, description="Language model API key")
    llm_endpoint: Optional[str] = Field(default=None, description="Language model endpoint (Azure or OpenAI-compatible)")
    llm_api_version: Optional[str] = Field(default="2025-04-01-preview", description="Azure OpenAI API version")
    llm_model: str = Field(default="gpt-4o", description="Model used by capabilities")
    manager_model: str = Field(default="gpt-4o-mini", description="Model used by the capability router")
    max_function_rounds: int = Field(default=5, description="Maximum function-calling rounds per prompt")

    # Search Configuration
    search_type: str = Field(default="keyword", description="Search provider: keyword or semantic")
    semantic_search_endpoint: Optional[str] = Field(default=None, description="Semantic search service endpoint")
    semantic_search_api_key: Optional[str] = Field(default=None, description="Semantic search API key")
    semantic_search_index: str = Field(default="messages", description="Semantic search index name")
    semantic_search_api_version: str = Field(default="2023-11-01", description="Semantic search API version")
    semantic_search_timeout: float = Field(default=10.0, description="Semantic search request timeout in seconds")

    # Behaviour Configuration
    default_time_zone: str = Field(default="UTC", description="Time zone used when a request carries none")
    recent_message_limit: int = Field(default=20, description="Upper bound for recent message reads")
    max_citations: int = Field(default=5, description="Maximum citations attached to a response")
    deep_link_base: str = Field(
        default="https://teams.microsoft.com/l/message",
        description="Base URL for message deep links"
    )

    def get_model_name(self, kind: str) -> str:
        """Get the model name for the router ("manager") or a capability."""
        if kind == "manager":
            return self.manager_model
        return self.llm_model

    def get_semantic_search_config(self) -> Optional[dict]:
        """Get semantic search configuration, or None when it is incomplete."""
        if not self.semantic_search_endpoint or not self.semantic_search_api_key:
            return None
        return {
            "endpoint": self.semantic_search_endpoint.rstrip("/"),
            "api_key": self.semantic_search_api_key,
            "index_name": self.semantic_search_index,
            "api_version": self.semantic_search_api_version,
            "timeout": self.semantic_search_timeout,
        }


# Global settings instance
settings = Settings()
