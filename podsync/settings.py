from __future__ import annotations

import os


VERSION = "0.1.0"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


REQUEST_TIMEOUT = float(os.getenv("PODSYNC_REQUEST_TIMEOUT", "30"))
FOLLOW_REDIRECTS = _env_flag("PODSYNC_FOLLOW_REDIRECTS", "true")
USER_AGENT = os.getenv("PODSYNC_USER_AGENT", f"podsync/{VERSION}")
