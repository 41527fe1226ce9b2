from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = os.getenv("BREWSTOP_API_URL", "http://localhost:8000")
    timeout: float = 10.0


DEFAULT_CLIENT_CONFIG = ClientConfig()
