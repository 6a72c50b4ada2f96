"""Configuration management for Bible Companion."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant who answers in English with biblical faithfulness. "
    "When helpful, cite relevant Bible references and keep answers concise and clear."
)


class Settings(BaseSettings):
    """Application settings, loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BIBLE_",
    )

    # Paths
    data_dir: Path = Field(default=Path("data"))
    corpus_path: Optional[Path] = Field(default=None, description="Defaults to data_dir/nkjv.json")
    storage_dir: Optional[Path] = Field(default=None, description="Defaults to data_dir/storage")

    # Chat assistant (OpenRouter-compatible)
    openrouter_api_key: str = Field(default="")
    openrouter_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions")
    chat_model: str = Field(default="openai/gpt-4o-mini")
    chat_temperature: float = Field(default=0.3)
    chat_timeout: float = Field(default=60.0, description="Request timeout in seconds")
    chat_system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)
    chat_referer: str = Field(default="https://example.com")
    chat_title: str = Field(default="Bible Chat")

    log_level: str = Field(default="WARNING")

    @model_validator(mode="after")
    def _derive_paths(self) -> "Settings":
        if self.corpus_path is None:
            self.corpus_path = self.data_dir / "nkjv.json"
        if self.storage_dir is None:
            self.storage_dir = self.data_dir / "storage"
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
