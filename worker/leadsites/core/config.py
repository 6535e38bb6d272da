"""Application configuration helpers."""

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_TEMPLATES_DIR = PACKAGE_ROOT / "templates"
DEFAULT_ACTIVATE_BASE_URL = "https://cornershopdigital.com"


class ConfigError(RuntimeError):
    """Raised when the JSON config file cannot be read."""


@dataclass(frozen=True)
class Settings:
    google_places_api_key: str
    default_category: str = "plumber"
    default_location: str = ""
    data_dir: Path = Path("data")
    sites_dir: Path = Path("sites")
    templates_dir: Path = DEFAULT_TEMPLATES_DIR
    activate_base_url: str = DEFAULT_ACTIVATE_BASE_URL
    request_delay_seconds: float = 0.2
    probe_timeout_seconds: float = 5.0
    max_pages: int = 1


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read the optional JSON config file; a missing file yields an empty mapping."""
    if not path.is_file():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return payload


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the config file and environment variables."""
    load_dotenv()

    file_values = load_config_file(Path(os.getenv("LEADSITES_CONFIG", "config.json")))

    google_places_api_key = os.getenv("GOOGLE_PLACES_API_KEY") or file_values.get("google_places_api_key") or ""
    default_category = os.getenv("DEFAULT_CATEGORY") or file_values.get("default_category") or "plumber"
    default_location = os.getenv("DEFAULT_LOCATION") or file_values.get("default_location") or ""
    data_dir = Path(os.getenv("LEADSITES_DATA_DIR", "data"))
    sites_dir = Path(os.getenv("LEADSITES_SITES_DIR", "sites"))
    templates_dir_raw = os.getenv("LEADSITES_TEMPLATES_DIR")
    templates_dir = Path(templates_dir_raw) if templates_dir_raw else DEFAULT_TEMPLATES_DIR
    activate_base_url = os.getenv("ACTIVATE_BASE_URL", DEFAULT_ACTIVATE_BASE_URL).rstrip("/")
    request_delay_seconds = float(os.getenv("REQUEST_DELAY_SECONDS", "0.2"))
    probe_timeout_seconds = float(os.getenv("PROBE_TIMEOUT_SECONDS", "5"))
    max_pages = int(os.getenv("PLACES_MAX_PAGES", "1"))

    if not google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY is not configured; Google Places requests will fail.")
    if not default_location:
        logger.debug("No default location configured; the scraper CLI will require one.")

    return Settings(
        google_places_api_key=google_places_api_key,
        default_category=default_category,
        default_location=default_location,
        data_dir=data_dir,
        sites_dir=sites_dir,
        templates_dir=templates_dir,
        activate_base_url=activate_base_url,
        request_delay_seconds=request_delay_seconds,
        probe_timeout_seconds=probe_timeout_seconds,
        max_pages=max_pages,
    )
