from __future__ import annotations

import hashlib
import secrets
from typing import Callable

from Crypto.Hash import keccak
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from core.failure_modes import InvalidPrivateKeyError

PRIVATE_KEY_BYTES = 32
SECP256K1_ORDER = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)


def normalize_private_key(private_key: str) -> str:
    if not isinstance(private_key, str):
        raise InvalidPrivateKeyError("private_key must be a hex string")
    candidate = private_key.strip()
    if candidate[:2].lower() == "0x":
        candidate = candidate[2:]
    if len(candidate) != PRIVATE_KEY_BYTES * 2:
        raise InvalidPrivateKeyError("private_key must be 32 bytes encoded as 64 hex characters")
    try:
        raw = bytes.fromhex(candidate)
    except ValueError as exc:
        raise InvalidPrivateKeyError("private_key must be valid hex") from exc
    secret = int.from_bytes(raw, "big")
    if not 0 < secret < SECP256K1_ORDER:
        raise InvalidPrivateKeyError("private_key is outside the secp256k1 scalar range")
    return candidate.lower()


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def checksum_address(address_hex: str) -> str:
    """EIP-55 mixed-case checksum of a 20-byte address, returned without ``0x``."""
    lowered = address_hex.lower().removeprefix("0x")
    digest = keccak256(lowered.encode("ascii")).hex()
    return "".join(
        char.upper() if char.isalpha() and int(digest[idx], 16) >= 8 else char
        for idx, char in enumerate(lowered)
    )


class CryptoPrimitives:
    """Randomness, hashing and secp256k1 derivation used by the identity and content components.

    ``random_bytes`` may be replaced to make key generation reproducible in tests;
    the default is the operating system CSPRNG.
    """

    def __init__(self, random_bytes: Callable[[int], bytes] | None = None) -> None:
        self._random_bytes = random_bytes or secrets.token_bytes

    def secure_random_bytes(self, n: int) -> bytes:
        data = self._random_bytes(n)
        if len(data) != n:
            raise RuntimeError(f"random source returned {len(data)} bytes, expected {n}")
        return data

    def hash256(self, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()

    def hex_encode(self, data: bytes) -> str:
        return data.hex()

    def derive_public_key(self, private_key: str) -> str:
        secret = int(normalize_private_key(private_key), 16)
        try:
            key = ec.derive_private_key(secret, ec.SECP256K1())
        except ValueError as exc:
            raise InvalidPrivateKeyError("private_key rejected by secp256k1 backend") from exc
        return key.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        ).hex()

    def derive_address(self, public_key: str) -> str:
        try:
            point = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), bytes.fromhex(public_key))
        except ValueError as exc:
            raise ValueError("public_key must be a hex-encoded secp256k1 point") from exc
        uncompressed = point.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )
        return checksum_address(keccak256(uncompressed[1:])[-20:].hex())
