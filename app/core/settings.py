from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    app_name: str = Field(default="Signal Relay")
    app_version: str = Field(default="1.0.0")
    app_description: str = Field(
        default="Two-party WebSocket signaling relay for peer-to-peer file transfer"
    )
    api_key: Optional[str] = Field(default=None)

    # Server Host and Port
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    reload: bool = Field(default=False)

    # CORS Configuration
    cors_origins: List[str] = Field(default=["*"])
    cors_methods: List[str] = Field(default=["*"])
    cors_headers: List[str] = Field(default=["*"])
    cors_credentials: bool = Field(default=True)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Room Configuration
    room_ttl_seconds: float = Field(default=3600.0, gt=0)
    sweep_interval_seconds: float = Field(default=300.0, gt=0)
    room_id_bytes: int = Field(default=9, ge=6)
    require_existing_room: bool = Field(default=False)

    # Relay Configuration
    relay_binary: bool = Field(default=True)
    outbound_queue_size: int = Field(default=256, gt=0)

    # Static client assets
    static_dir: str = Field(default="public")

    # Development/Production Mode
    debug: bool = Field(default=False)
    environment: str = Field(default="development")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance"""
    return settings

