"""Configuration management for Script Bible."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SB_",
    )

    # Ollama (local LLM)
    ollama_base_url: str = Field(default="http://localhost:11434")
    ollama_model: str = Field(default="qwen2.5:14b")

    # Hugging Face Inference API
    hf_api_key: str = Field(default="")
    hf_model: str = Field(default="meta-llama/Llama-3.1-70B-Instruct")
    llm_provider: str = Field(default="ollama", description="ollama or huggingface")

    # Paths
    data_dir: Path = Field(default=Path("data"))

    # Local extraction heuristics
    max_intro_name_length: int = Field(default=10, description="Intro names must be shorter than this")
    max_dialogue_name_length: int = Field(default=8, description="Dialogue speaker names must be shorter than this")
    main_role_count: int = Field(default=2, description="Earliest distinct characters assigned the main role")
    relationship_policy: str = Field(default="first_pair", description="first_pair or scene_cooccurrence")

    # Source anchoring and view sync
    anchor_prefix_length: int = Field(default=20, description="Prefix probe length for quote anchoring")
    sync_settle_delay: float = Field(default=0.05, description="Seconds a scroll guard stays set")

    @property
    def exports_dir(self) -> Path:
        return self.data_dir / "exports"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
