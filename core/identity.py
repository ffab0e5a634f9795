from __future__ import annotations

from core.config import Settings, get_admin_private_key
from core.crypto_primitives import PRIVATE_KEY_BYTES, CryptoPrimitives, normalize_private_key
from core.failure_modes import InvalidPrivateKeyError, record_operation_failure
from core.logging_utils import log_structured
from core.observability import METRIC_IDENTITY_DERIVED, increment_metric
from schemas.identity import Identity, IdentityPrefix

NAME_MODE_MARKER = f"{IdentityPrefix.CLIENT.value}|"


def strip_name_marker(name: str) -> str:
    if not isinstance(name, str) or not name:
        raise ValueError("name must be a non-empty string")
    stripped = name.replace(NAME_MODE_MARKER, "", 1)
    if not stripped:
        raise ValueError("name must not be empty once the client| marker is removed")
    return stripped


class IdentityDeriver:
    """Derives ``eth|<address>`` or ``client|<name>`` identities from secp256k1 private keys."""

    def __init__(self, crypto: CryptoPrimitives | None = None) -> None:
        self.crypto = crypto or CryptoPrimitives()

    def derive_identity(self, private_key: str, name: str | None = None) -> Identity:
        try:
            normalized_key = normalize_private_key(private_key)
            public_key = self.crypto.derive_public_key(normalized_key)
        except InvalidPrivateKeyError as exc:
            record_operation_failure(operation="identity.derive", exc=exc)
            raise
        address = self.crypto.derive_address(public_key)

        if name is None:
            prefix = IdentityPrefix.ETH
            resolved_name = address
        else:
            prefix = IdentityPrefix.CLIENT
            resolved_name = strip_name_marker(name)

        identity = Identity(
            private_key=normalized_key,
            public_key=public_key,
            address=address,
            prefix=prefix,
            name=resolved_name,
        )
        increment_metric(METRIC_IDENTITY_DERIVED, quiet=True)
        log_structured("identity.derived", prefix=identity.prefix.value, address=identity.address)
        return identity

    def generate_random_identity(self, name: str | None = None) -> Identity:
        private_key = self.crypto.hex_encode(self.crypto.secure_random_bytes(PRIVATE_KEY_BYTES))
        return self.derive_identity(private_key, name)


_DEFAULT_DERIVER = IdentityDeriver()


def derive_identity(private_key: str, name: str | None = None) -> Identity:
    return _DEFAULT_DERIVER.derive_identity(private_key, name)


def generate_random_identity(name: str | None = None) -> Identity:
    return _DEFAULT_DERIVER.generate_random_identity(name)


def load_admin_identity(settings: Settings | None = None) -> Identity:
    """Operator identity used to countersign registrations for new users."""
    return derive_identity(get_admin_private_key(settings))
