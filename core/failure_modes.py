from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import logging

from pydantic import ValidationError

from core.logging_utils import log_structured
from core.observability import (
    METRIC_HASH_GENERATION_FAILED,
    METRIC_INVALID_PRIVATE_KEY,
    increment_metric,
    unexpected_exception_metric,
)


logger = logging.getLogger(__name__)


class InvalidPrivateKeyError(ValueError):
    """Key material that cannot be used as a secp256k1 private key."""


class HashGenerationError(RuntimeError):
    """Content could not be serialized or digested."""


class FailureClass(StrEnum):
    KEY_INVALID = "key.invalid"
    HASH_GENERATION_FAILED = "hash.generation_failed"
    SERIALIZATION_FAILED = "serialization.failed"
    UNEXPECTED_EXCEPTION = "unexpected.exception"


@dataclass(frozen=True)
class FailurePolicy:
    failure_class: FailureClass
    metric: str | None


def classify_failure(exc: Exception) -> FailureClass:
    if isinstance(exc, InvalidPrivateKeyError):
        return FailureClass.KEY_INVALID
    if isinstance(exc, HashGenerationError):
        return FailureClass.HASH_GENERATION_FAILED
    if isinstance(exc, (ValidationError, UnicodeError, TypeError)):
        return FailureClass.SERIALIZATION_FAILED
    return FailureClass.UNEXPECTED_EXCEPTION


def failure_policy(exc: Exception) -> FailurePolicy:
    failure_class = classify_failure(exc)
    if failure_class == FailureClass.KEY_INVALID:
        return FailurePolicy(failure_class=failure_class, metric=METRIC_INVALID_PRIVATE_KEY)
    if failure_class in {FailureClass.HASH_GENERATION_FAILED, FailureClass.SERIALIZATION_FAILED}:
        return FailurePolicy(failure_class=failure_class, metric=METRIC_HASH_GENERATION_FAILED)
    return FailurePolicy(failure_class=failure_class, metric=None)


def record_operation_failure(*, operation: str, exc: Exception) -> FailureClass:
    """Best-effort failure telemetry; never replaces the original error."""
    policy = failure_policy(exc)
    error_class = exc.__class__.__name__
    try:
        if policy.metric is None:
            unexpected_exception_metric(error_class)
        else:
            increment_metric(policy.metric, reason=policy.failure_class.value)
        log_structured(
            "operation.failed",
            operation=operation,
            failure_class=policy.failure_class.value,
            error_class=error_class,
        )
    except Exception:
        logger.debug("failure telemetry dropped for %s", operation, exc_info=True)
    return policy.failure_class
