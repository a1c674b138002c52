"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'trade_tracker.db'}"
    encryption_key: str = ""  # Fernet key; generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:8080"]

    # Local storage keys
    storage_key: str = "tradeTracker_trades"
    gist_token_key: str = "tradeTracker_gistToken"
    gist_id_key: str = "tradeTracker_gistId"

    # GitHub Gist sync
    gist_api_url: str = "https://api.github.com"
    gist_filename: str = "trades.json"
    gist_sync_delay_seconds: float = 2.0  # debounce after the last change
    gist_timeout_seconds: float = 10.0

    model_config = {"env_prefix": "TT_", "env_file": ".env"}


settings = Settings()
