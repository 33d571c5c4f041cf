import os
from functools import lru_cache
from pathlib import Path


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        secret_key: str,
        token_max_age_hours: int,
        reconcile_hour: int,
        reconcile_minute: int,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.secret_key = secret_key
        self.token_max_age_hours = token_max_age_hours
        self.reconcile_hour = reconcile_hour
        self.reconcile_minute = reconcile_minute


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("LIFEBOARD_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "lifeboard.db"
    database_url = os.getenv("LIFEBOARD_DATABASE_URL", f"sqlite:///{default_db}")
    timezone = os.getenv("LIFEBOARD_TIMEZONE", "America/Sao_Paulo")
    secret_key = os.getenv(
        "LIFEBOARD_SECRET_KEY",
        "5d0c1f7e9a3b44c2b8e6a1d9f0c3e7b2a4d6f8e0c2b4a6d8f0e2c4b6a8d0f2e4",
    )
    token_max_age_hours = int(os.getenv("LIFEBOARD_TOKEN_MAX_AGE_HOURS", "12"))
    reconcile_hour = int(os.getenv("LIFEBOARD_RECONCILE_HOUR", "3"))
    reconcile_minute = int(os.getenv("LIFEBOARD_RECONCILE_MINUTE", "15"))
    return Settings(
        database_url=database_url,
        timezone=timezone,
        secret_key=secret_key,
        token_max_age_hours=token_max_age_hours,
        reconcile_hour=reconcile_hour,
        reconcile_minute=reconcile_minute,
    )
