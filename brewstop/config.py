from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_SEED_DIR = Path(__file__).resolve().parent / "data" / "seed"


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "brewstop-secret-change-in-production")
    # Reference point used when the client cannot supply a location (NYC).
    default_latitude: float = float(os.getenv("BREWSTOP_DEFAULT_LAT", "40.7128"))
    default_longitude: float = float(os.getenv("BREWSTOP_DEFAULT_LON", "-74.0060"))
    seed_dir: Path = Path(os.getenv("BREWSTOP_SEED_DIR", str(_SEED_DIR)))
    favorites_key: str = os.getenv("BREWSTOP_FAVORITES_KEY", "brewstop-favorites")


DEFAULT_APP_CONFIG = AppConfig()
