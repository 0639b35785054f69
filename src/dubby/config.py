"""
Runtime settings loaded from the environment / .env file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger("dubby")

MIB = 1024 * 1024
INLINE_LIMIT_BYTES = 20 * MIB
API_KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


@dataclass
class Settings:
    """Configuration for the dubbing pipeline and the browser front-end."""

    api_key: str | None = None
    model: str = "gemini-2.5-flash"
    # Inline base64 payloads above this size exhaust memory / request limits
    inline_limit_bytes: int = INLINE_LIMIT_BYTES
    poll_interval_s: float = 2.0
    max_poll_attempts: int = 150
    intro_delay_s: float = 1.2
    min_watch_s: float = 3.0
    settle_delay_s: float = 1.0
    server_name: str = "127.0.0.1"
    server_port: int = 7860


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}; using {default}")
        return default


def load_settings(env_path: str | Path | None = None) -> Settings:
    """Load settings, reading a .env file first if one is present."""
    if env_path is None:
        project_root = Path(__file__).parent.parent.parent
        env_path = project_root / ".env"
    if Path(env_path).exists():
        load_dotenv(env_path)
    else:
        load_dotenv()

    api_key = next((os.getenv(v) for v in API_KEY_VARS if os.getenv(v)), None)
    defaults = Settings()

    return Settings(
        api_key=api_key,
        model=os.getenv("DUBBY_MODEL") or defaults.model,
        inline_limit_bytes=int(_env_float("DUBBY_INLINE_LIMIT_MB", defaults.inline_limit_bytes / MIB) * MIB),
        poll_interval_s=_env_float("DUBBY_POLL_INTERVAL", defaults.poll_interval_s),
        max_poll_attempts=int(_env_float("DUBBY_MAX_POLL_ATTEMPTS", defaults.max_poll_attempts)),
        server_name=os.getenv("DUBBY_HOST") or defaults.server_name,
        server_port=int(_env_float("DUBBY_PORT", defaults.server_port)),
    )
