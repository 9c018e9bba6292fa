import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel


_ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")
load_dotenv(dotenv_path=_ENV_PATH, override=False)


def _get_env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _get_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


class Settings(BaseModel):
    SEED_PATH: str
    CURRENCY: str
    RESERVE_ALERT_THRESHOLD: float
    INCLUDE_FUTURE_TRANSACTIONS: bool  # count future-dated rows in the current reserve
    RECENT_TRANSACTIONS_LIMIT: int
    LOG_LEVEL: str
    USER_ID: str = "demo"  # whose notifications and tickets the app shows


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        SEED_PATH=_get_env("SEED_PATH", "data/seed.json"),
        CURRENCY=_get_env("CURRENCY", "USD"),
        RESERVE_ALERT_THRESHOLD=_get_env("RESERVE_ALERT_THRESHOLD", "1000"),
        INCLUDE_FUTURE_TRANSACTIONS=_get_bool("INCLUDE_FUTURE_TRANSACTIONS", False),
        RECENT_TRANSACTIONS_LIMIT=_get_env("RECENT_TRANSACTIONS_LIMIT", "5"),
        LOG_LEVEL=_get_env("LOG_LEVEL", "INFO"),
        USER_ID=_get_env("USER_ID", "demo"),
    )
