"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Bind address for the run entry point")
    port: int = Field(default=8000, gt=0, description="Bind port for the run entry point")

    # === CORS ===
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # === Uploads ===
    max_upload_mb: int = Field(default=20, gt=0, description="Max track file size")

    # === Playback ===
    default_playback_speed_kmh: float = Field(
        default=100.0,
        gt=0,
        description="Simulated travel speed for new players"
    )
    playback_tick_seconds: float = Field(
        default=1 / 60,
        gt=0,
        description="Delay between playback ticks (one display refresh)"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept 'debug', 'Info', ... as well as upper case."""
        return v.upper()

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
