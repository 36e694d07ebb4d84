import os
from pathlib import Path

# Basic settings helper to read environment configuration.

DEFAULT_DETAIL_CACHE_PATH = Path(__file__).resolve().parent / "data" / "place_details.sqlite"


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.ADDRESS_LOOKUP_USE_REAL_API: bool = _as_bool(os.getenv("ADDRESS_LOOKUP_USE_REAL_API"), True)
        self.GOOGLE_PLACES_API_KEY: str | None = (os.getenv("GOOGLE_PLACES_API_KEY") or "").strip() or None
        self.PLACES_REGION: str = (os.getenv("PLACES_REGION") or "us").strip().lower()
        self.PLACES_HTTP_TIMEOUT: float = _as_float(os.getenv("PLACES_HTTP_TIMEOUT"), 5.0)
        self.PLACES_MIN_INTERVAL: float = _as_float(os.getenv("PLACES_MIN_INTERVAL"), 0.0)
        self.PLACES_DETAIL_CACHE_ENABLED: bool = _as_bool(os.getenv("PLACES_DETAIL_CACHE_ENABLED"), False)
        self.PLACES_DETAIL_CACHE_PATH: str = os.getenv("PLACES_DETAIL_CACHE_PATH") or str(DEFAULT_DETAIL_CACHE_PATH)

    @property
    def remote_lookup_enabled(self) -> bool:
        """Remote lookups need both the feature flag and a credential."""
        return self.ADDRESS_LOOKUP_USE_REAL_API and bool(self.GOOGLE_PLACES_API_KEY)


settings = Settings()
