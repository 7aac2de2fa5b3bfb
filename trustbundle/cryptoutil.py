"""Comparison helpers for public keys."""

from __future__ import annotations

from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

__all__ = ["public_key_equal"]


def _ed25519_raw(key: ed25519.Ed25519PublicKey) -> bytes:
    return key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)


def public_key_equal(a: Any, b: Any) -> bool:
    """Return whether two public keys hold the same key material.

    Raises TypeError when ``a`` is not an RSA, ECDSA or Ed25519 public key.
    """
    if isinstance(a, rsa.RSAPublicKey):
        return isinstance(b, rsa.RSAPublicKey) and a.public_numbers() == b.public_numbers()
    if isinstance(a, ec.EllipticCurvePublicKey):
        if not isinstance(b, ec.EllipticCurvePublicKey):
            return False
        return a.curve.name == b.curve.name and a.public_numbers() == b.public_numbers()
    if isinstance(a, ed25519.Ed25519PublicKey):
        return isinstance(b, ed25519.Ed25519PublicKey) and _ed25519_raw(a) == _ed25519_raw(b)
    raise TypeError(f"unsupported public key type {type(a).__name__}")