from functools import lru_cache
from pathlib import Path
import logging
import os


logger = logging.getLogger(__name__)

SUPPORTED_TIMESTAMP_UNITS = frozenset({"ms"})


class Settings:
    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", "content-identity-core")
        self.app_version = os.getenv("APP_VERSION", "0.1.0")
        self.env = os.getenv("ENV", "dev").lower()
        if self.env not in {"dev", "test", "staging", "prod"}:
            raise RuntimeError("ENV must be one of: dev, test, staging, prod")
        self.log_level = os.getenv("LOG_LEVEL", "DEBUG" if self.env in {"dev", "test"} else "INFO").upper().strip()

        # Hashed payloads carry the timestamp verbatim, so producer and
        # verifier must agree on the unit.
        self.content_timestamp_unit = os.getenv("CONTENT_TIMESTAMP_UNIT", "ms").strip().lower()

        self.chain_admin_secret_key = os.getenv("CHAIN_ADMIN_SECRET_KEY", "").strip()
        self.chain_admin_secret_key_path = os.getenv("CHAIN_ADMIN_SECRET_KEY_PATH", "").strip()
        self.validate()

    def validate(self) -> None:
        if self.content_timestamp_unit not in SUPPORTED_TIMESTAMP_UNITS:
            raise RuntimeError("CONTENT_TIMESTAMP_UNIT must be 'ms'")
        if self.env == "prod":
            if self.log_level == "DEBUG":
                raise RuntimeError("LOG_LEVEL=DEBUG is not allowed in prod")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()


def get_admin_private_key(settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    if settings.chain_admin_secret_key:
        return settings.chain_admin_secret_key
    if settings.chain_admin_secret_key_path:
        return Path(settings.chain_admin_secret_key_path).read_text(encoding="utf-8").strip()
    raise RuntimeError("Admin private key not found")
