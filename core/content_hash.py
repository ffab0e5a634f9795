from __future__ import annotations

import hmac
import re
import time
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from core.canonical import canonical_content_bytes
from core.crypto_primitives import CryptoPrimitives
from core.failure_modes import HashGenerationError, record_operation_failure
from core.logging_utils import log_structured
from core.observability import METRIC_HASH_MISMATCH, increment_metric
from schemas.content import ContentHashResult, HashableContent, NormalizedContent, VerificationResult

HASH_ALGORITHM = "sha256"
HASH_PREFIX = f"{HASH_ALGORITHM}:"
_HEX_DIGEST_RE = re.compile(r"^[a-f0-9]{64}$", re.IGNORECASE)

ContentInput = HashableContent | Mapping[str, Any]

# Space separators, line terminators, tab/VT/FF and U+FEFF. Narrower than the default
# str.strip() set, which also removes U+001C..U+001F and U+0085.
TRIM_CHARACTERS = (
    "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def coerce_content(content: ContentInput) -> HashableContent:
    if isinstance(content, HashableContent):
        return content
    return HashableContent.model_validate(content)


def normalize(content: HashableContent) -> NormalizedContent:
    return NormalizedContent(
        title=content.title.strip(TRIM_CHARACTERS),
        description=content.description.strip(TRIM_CHARACTERS),
        url=(content.url or "").strip(TRIM_CHARACTERS),
        timestamp=content.timestamp,
    )


def extract_hash(hash_string: str) -> str:
    return hash_string[len(HASH_PREFIX):] if hash_string.startswith(HASH_PREFIX) else hash_string


def format_hash(hash_string: str) -> str:
    return hash_string if hash_string.startswith(HASH_PREFIX) else f"{HASH_PREFIX}{hash_string}"


def is_valid_hash_format(hash_string: str) -> bool:
    return bool(_HEX_DIGEST_RE.match(extract_hash(hash_string)))


def generate_timestamp() -> int:
    return time.time_ns() // 1_000_000


class ContentFingerprinter:
    """SHA-256 fingerprints over the canonical form of a submission.

    Hashes are reproducible by any implementation that trims the same fields and
    serializes ``{"title","description","url","timestamp"}`` in that order.
    """

    algorithm = HASH_ALGORITHM

    def __init__(self, crypto: CryptoPrimitives | None = None) -> None:
        self.crypto = crypto or CryptoPrimitives()

    def normalize(self, content: ContentInput) -> NormalizedContent:
        return normalize(coerce_content(content))

    def generate_hash(self, content: ContentInput) -> ContentHashResult:
        try:
            validated = coerce_content(content)
            payload = canonical_content_bytes(normalize(validated))
            digest_hex = self.crypto.hex_encode(self.crypto.hash256(payload))
        except Exception as exc:
            record_operation_failure(operation="content_hash.generate", exc=exc)
            raise HashGenerationError(f"Failed to generate content hash: {exc}") from exc
        return ContentHashResult(hash=digest_hex, timestamp=validated.timestamp, algorithm=self.algorithm)

    def format_for_display(self, content: ContentInput) -> str:
        return format_hash(self.generate_hash(content).hash)

    def verify(self, content: ContentInput, expected_hash: str) -> bool:
        if not isinstance(expected_hash, str) or not expected_hash.isascii():
            increment_metric(METRIC_HASH_MISMATCH, reason="malformed_expected_hash")
            return False
        try:
            computed = self.format_for_display(content)
            verified = hmac.compare_digest(computed, format_hash(expected_hash))
        except HashGenerationError:
            return False
        except Exception as exc:
            record_operation_failure(operation="content_hash.verify", exc=exc)
            return False
        if not verified:
            increment_metric(METRIC_HASH_MISMATCH)
        return verified

    def hash_modified_content(self, original: ContentInput, new_description: str) -> str:
        try:
            base = coerce_content(original)
        except ValidationError as exc:
            record_operation_failure(operation="content_hash.generate", exc=exc)
            raise HashGenerationError(f"Failed to generate content hash: {exc}") from exc
        modified = base.model_copy(update={"description": new_description})
        return self.format_for_display(modified)

    def _verify_item(self, item: Any) -> VerificationResult:
        if not isinstance(item, Mapping):
            return VerificationResult(id=None, verified=False)
        item_id = item.get("id")
        if isinstance(item_id, bool) or not isinstance(item_id, (int, str)):
            item_id = None
        expected_hash = item.get("expected_hash")
        content = item.get("content")
        try:
            current_hash: str | None = self.format_for_display(content)
        except HashGenerationError:
            current_hash = None
        return VerificationResult(
            id=item_id,
            verified=current_hash is not None and self.verify(content, expected_hash),
            current_hash=current_hash,
            expected_hash=expected_hash if isinstance(expected_hash, str) else None,
        )

    def bulk_verify_content(self, items: Iterable[Any]) -> list[VerificationResult]:
        results = [self._verify_item(item) for item in items]
        log_structured(
            "content_hash.bulk_verified",
            count=len(results),
            result=sum(1 for result in results if result.verified),
        )
        return results


_DEFAULT_FINGERPRINTER = ContentFingerprinter()


def generate_hash(content: ContentInput) -> ContentHashResult:
    return _DEFAULT_FINGERPRINTER.generate_hash(content)


def format_for_display(content: ContentInput) -> str:
    return _DEFAULT_FINGERPRINTER.format_for_display(content)


def verify(content: ContentInput, expected_hash: str) -> bool:
    return _DEFAULT_FINGERPRINTER.verify(content, expected_hash)


def hash_modified_content(original: ContentInput, new_description: str) -> str:
    return _DEFAULT_FINGERPRINTER.hash_modified_content(original, new_description)


def bulk_verify_content(items: Iterable[Any]) -> list[VerificationResult]:
    return _DEFAULT_FINGERPRINTER.bulk_verify_content(items)


def create_hashable_content(
    title: str,
    description: str,
    url: str | None = None,
    timestamp: int | None = None,
) -> HashableContent:
    return HashableContent(
        title=title,
        description=description,
        url=url,
        timestamp=timestamp if timestamp is not None else generate_timestamp(),
    )


def hash_submission_content(
    title: str,
    description: str,
    url: str | None = None,
    timestamp: int | None = None,
) -> ContentHashResult:
    return generate_hash(create_hashable_content(title, description, url, timestamp))
