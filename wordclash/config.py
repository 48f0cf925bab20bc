# wordclash/config.py
import os
from dataclasses import dataclass

from .content.balance import DEFAULTS
from .log import debug_enabled, get_logger

logger = get_logger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-latest"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r, using %s", name, raw, default)
        return default


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    api_key: str = ""
    model: str = DEFAULT_MODEL
    card_timeout_ms: int = DEFAULTS["card_timeout_ms"]
    debug: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key.strip())

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.environ.get("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            model=os.environ.get("WORDCLASH_MODEL", DEFAULT_MODEL),
            card_timeout_ms=_env_int("WORDCLASH_CARD_TIMEOUT_MS", DEFAULTS["card_timeout_ms"]),
            debug=debug_enabled(),
        )
