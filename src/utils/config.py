"""Runtime settings read from the environment, with `.env` support."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_STORAGE_PATH = "data/client.sqlite"


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    storage_path: str = DEFAULT_STORAGE_PATH
    debug: bool = False


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def load_settings() -> Settings:
    """
    Load `.env` from the project root (if any) and build the settings.
    Variables already exported in the shell win over the file.
    """
    load_dotenv(_project_root() / ".env", override=False)

    api_url = os.getenv("SHOP_API_URL", "").strip() or DEFAULT_API_URL
    storage_path = os.getenv("SHOP_STORAGE_PATH", "").strip() or DEFAULT_STORAGE_PATH
    debug = bool(os.getenv("DEBUG"))

    return Settings(api_url=api_url.rstrip("/"), storage_path=storage_path, debug=debug)
