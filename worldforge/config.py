"""
Worldforge Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # LLM Provider Configuration
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "openai")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-5-nano")
    # Optional per-capability overrides; fall back to LLM_MODEL when unset
    SECTOR_LLM_MODEL: str | None = os.getenv("SECTOR_LLM_MODEL")
    SUMMARY_LLM_MODEL: str | None = os.getenv("SUMMARY_LLM_MODEL")

    # API Keys
    ANTHROPIC_API_KEY: str | None = os.getenv("ANTHROPIC_API_KEY")
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")

    # Local LLM (Ollama) endpoint, used when LLM_PROVIDER=ollama
    OLLAMA_BASE_URL: str | None = os.getenv("OLLAMA_BASE_URL")

    # LLM call limits
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "120"))
    LLM_MAX_ATTEMPTS: int = int(os.getenv("LLM_MAX_ATTEMPTS", "3"))

    # Storage Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "postgresql://localhost/worldforge")
    WORLDS_DIR: Path = Path(os.getenv("WORLDS_DIR", "worlds"))

    # Map Generation
    # Cells span -GENERATION_RADIUS..GENERATION_RADIUS on both axes (27x27 at 13)
    GENERATION_RADIUS: int = int(os.getenv("GENERATION_RADIUS", "13"))
    GRID_DISTANCE: int = int(os.getenv("GRID_DISTANCE", "24"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if required values are missing."""
        if cls.GENERATION_RADIUS < 1:
            raise ValueError("GENERATION_RADIUS must be at least 1")

        if cls.LLM_PROVIDER == "ollama":
            return

        if cls.LLM_PROVIDER == "anthropic" and not cls.ANTHROPIC_API_KEY:
            raise ValueError(
                "ANTHROPIC_API_KEY is required when using the 'anthropic' provider"
            )

        if cls.LLM_PROVIDER == "openai" and not cls.OPENAI_API_KEY:
            raise ValueError(
                "OPENAI_API_KEY is required when using the 'openai' provider. "
                "For local LLMs, set LLM_PROVIDER=ollama instead."
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Worldforge Configuration:",
            f"  LLM Provider: {cls.LLM_PROVIDER}",
            f"  LLM Model: {cls.LLM_MODEL}",
            f"  Sector Model: {cls.SECTOR_LLM_MODEL or cls.LLM_MODEL}",
            f"  Summary Model: {cls.SUMMARY_LLM_MODEL or cls.LLM_MODEL}",
            f"  Database: {cls.DATABASE_URL}",
            f"  Worlds Dir: {cls.WORLDS_DIR}",
            f"  Generation Radius: {cls.GENERATION_RADIUS}",
            f"  Grid Distance: {cls.GRID_DISTANCE}",
        ]
        return "\n".join(lines)
