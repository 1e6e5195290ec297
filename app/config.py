"""
Configuration settings for the PLAAFP Assistant backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration (key-value store for saved documents)
    DATABASE_URL: str = "sqlite+aiosqlite:///./plaafp.db"

    # Ollama Configuration
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_LLM_MODEL: str = "qwen2.5:3b"
    OLLAMA_VISION_MODEL: str = "llava:7b"
    OLLAMA_TIMEOUT: int = 120  # seconds per suggestion / extraction call
    LLM_MAX_CONCURRENT: int = 2

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Screenshot extraction
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10 MB
    SUPPORTED_IMAGE_TYPES: List[str] = ["image/png", "image/jpeg", "image/webp", "image/gif"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
