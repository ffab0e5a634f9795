import unittest
from unittest.mock import patch

from core.content_hash import generate_hash, verify
from core.failure_modes import (
    FailureClass,
    HashGenerationError,
    InvalidPrivateKeyError,
    classify_failure,
    record_operation_failure,
)
from core.identity import derive_identity, generate_random_identity
from core.logging_utils import log_structured
from core.observability import (
    COUNTERS,
    METRIC_HASH_GENERATION_FAILED,
    METRIC_UNEXPECTED_EXCEPTION,
)


class ObservabilityMonitoringTests(unittest.TestCase):
    def setUp(self) -> None:
        COUNTERS.reset()

    def test_log_structured_redacts_secrets_and_drops_unknown_fields(self) -> None:
        with self.assertLogs("content_identity", level="INFO") as capture:
            log_structured(
                "security.test",
                operation="identity.derive",
                reason="private_key=super-secret-material",
                ignored_field="should_not_log",
            )
        joined = "\n".join(capture.output)
        self.assertIn("event=security.test", joined)
        self.assertIn("operation=identity.derive", joined)
        self.assertIn("reason=[REDACTED]", joined)
        self.assertNotIn("super-secret-material", joined)
        self.assertNotIn("should_not_log", joined)

    def test_identity_logs_never_contain_private_key(self) -> None:
        with self.assertLogs("content_identity", level="INFO") as capture:
            identity = generate_random_identity()
        joined = "\n".join(capture.output)
        self.assertIn(identity.address, joined)
        self.assertNotIn(identity.private_key, joined)

    def test_invalid_key_failure_is_logged_without_key_material(self) -> None:
        bad_key = "ff" * 33
        with self.assertLogs("content_identity", level="INFO") as capture:
            with self.assertRaises(InvalidPrivateKeyError):
                derive_identity(bad_key)
        joined = "\n".join(capture.output)
        self.assertIn("failure_class=key.invalid", joined)
        self.assertNotIn(bad_key, joined)

    def test_hash_failure_is_classified_and_counted(self) -> None:
        with self.assertLogs("content_identity", level="INFO") as capture:
            with self.assertRaises(HashGenerationError):
                generate_hash({"title": "only"})
        self.assertEqual(COUNTERS.value(METRIC_HASH_GENERATION_FAILED), 1)
        self.assertIn("failure_class=serialization.failed", "\n".join(capture.output))

    def test_classify_failure(self) -> None:
        self.assertEqual(classify_failure(InvalidPrivateKeyError("x")), FailureClass.KEY_INVALID)
        self.assertEqual(classify_failure(HashGenerationError("x")), FailureClass.HASH_GENERATION_FAILED)
        self.assertEqual(classify_failure(UnicodeEncodeError("utf-8", "x", 0, 1, "bad")), FailureClass.SERIALIZATION_FAILED)
        self.assertEqual(classify_failure(RuntimeError("x")), FailureClass.UNEXPECTED_EXCEPTION)

    def test_unexpected_failures_are_counted_by_class(self) -> None:
        record_operation_failure(operation="content_hash.verify", exc=KeyError("x"))
        self.assertEqual(COUNTERS.value(METRIC_UNEXPECTED_EXCEPTION), 1)
        self.assertEqual(COUNTERS.value(f"{METRIC_UNEXPECTED_EXCEPTION}.KeyError"), 1)

    def test_broken_telemetry_does_not_mask_verification_result(self) -> None:
        with patch("core.failure_modes.increment_metric", side_effect=RuntimeError("metrics down")):
            self.assertFalse(verify({"title": "only"}, "deadbeef"))

    def test_wallet_recovery_material_is_redacted(self) -> None:
        with self.assertLogs("content_identity", level="INFO") as capture:
            log_structured("security.test", reason="mnemonic=abandon abandon about")
            log_structured("security.test", reason="seed=0011aabb")
        joined = "\n".join(capture.output)
        self.assertEqual(joined.count("reason=[REDACTED]"), 2)
        self.assertNotIn("abandon", joined)
        self.assertNotIn("0011aabb", joined)

    def test_counters_reject_negative_increments(self) -> None:
        with self.assertRaises(ValueError):
            COUNTERS.increment("x", -1)


if __name__ == "__main__":
    unittest.main()
