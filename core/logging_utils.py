import logging
from typing import Any

from core.config import get_settings


logger = logging.getLogger("content_identity")
ALLOWED_LOG_FIELDS = {
    "operation",
    "event_type",
    "metric",
    "value",
    "reason",
    "error_class",
    "failure_class",
    "algorithm",
    "prefix",
    "alias",
    "address",
    "timestamp",
    "verified",
    "count",
    "env",
    "check",
    "result",
}


def configure_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _safe_value(value: Any) -> str:
    text = str(value)
    lowered = text.lower()
    forbidden_markers = ("secret", "private_key", "private key", "privatekey", "mnemonic", "seed", "password")
    if any(marker in lowered for marker in forbidden_markers):
        return "[REDACTED]"
    return text


def log_structured(event: str, **fields: Any) -> None:
    parts = [f"event={event}"]
    for key, value in fields.items():
        if key not in ALLOWED_LOG_FIELDS:
            continue
        if value is None:
            continue
        parts.append(f"{key}={_safe_value(value)}")
    logger.info(" ".join(parts))
