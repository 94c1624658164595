"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Node catalog
    FLOW_PATH: str = "src/data/atm_flow.json"
    DEFAULT_LANGUAGE: str = "ja"
    CATALOG_POLL_SECONDS: float = 5.0  # 0 disables polling

    # Intent matching
    MATCH_HIGH_THRESHOLD: float = 0.8
    MATCH_MEDIUM_THRESHOLD: float = 0.5
    ENABLE_FUZZY_MATCHING: bool = True
    ENABLE_SIMILARITY_MATCHING: bool = True

    # Dialog engine
    DWELL_SECONDS: float = 2.0
    THINKING_DELAY_SECONDS: float = 0.5
    AMOUNT_CEILING: int = 200_000
    STAFF_ASSISTANCE_NODE_ID: str = "staff_assistance_amount"
    TRANSACTION_ANCHOR_NODE_ID: str = "transaction_type"
    END_NODE_ID: str = "end"

    # Session expiry
    SESSION_IDLE_SECONDS: float = 600.0  # 0 disables expiry
    SESSION_SWEEP_SECONDS: float = 30.0

    # Voice I/O
    TTS_PROVIDER: str = "mock"
    AUDIO_ASSET_DIR: str = "src/data/audio"
    STT_PROVIDER: str = "mock"

    # AI Provider settings (catalog translation)
    AI_PROVIDER: str = "mock"
    AI_API_KEY: Optional[str] = None
    AI_MODEL: Optional[str] = None


settings = Settings()
