"""Conversion between public keys and JSON Web Key (RFC 7517) objects."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Mapping

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from .cryptoutil import public_key_equal

__all__ = ["JWKError", "key_from_jwk", "key_to_jwk", "certificates_from_jwk"]

_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}
_CURVE_NAMES = {curve.name: name for name, curve in _CURVES.items()}


class JWKError(ValueError):
    """Raised when a JWK cannot be decoded or a key cannot be encoded."""


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(jwk: Mapping[str, Any], name: str) -> bytes:
    value = jwk.get(name)
    if not isinstance(value, str) or not value:
        raise JWKError(f"invalid JWK, missing or malformed {name!r} value")
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise JWKError(f"invalid JWK, {name!r} is not base64url: {exc}") from exc


def _int_bytes(value: int, length: int | None = None) -> bytes:
    if length is None:
        length = max(1, (value.bit_length() + 7) // 8)
    return value.to_bytes(length, "big")


def _ec_key(jwk: Mapping[str, Any]) -> ec.EllipticCurvePublicKey:
    crv = jwk.get("crv")
    curve_cls = _CURVES.get(crv) if isinstance(crv, str) else None
    if curve_cls is None:
        raise JWKError(f"unsupported elliptic curve {crv!r}")
    curve = curve_cls()
    size = (curve.key_size + 7) // 8
    x = _b64url_decode(jwk, "x")
    y = _b64url_decode(jwk, "y")
    if len(x) != size or len(y) != size:
        raise JWKError("invalid EC public key, wrong length for x/y")
    numbers = ec.EllipticCurvePublicNumbers(int.from_bytes(x, "big"), int.from_bytes(y, "big"), curve)
    try:
        return numbers.public_key()
    except ValueError as exc:
        raise JWKError(f"invalid EC public key: {exc}") from exc


def _rsa_key(jwk: Mapping[str, Any]) -> rsa.RSAPublicKey:
    n = int.from_bytes(_b64url_decode(jwk, "n"), "big")
    e = int.from_bytes(_b64url_decode(jwk, "e"), "big")
    try:
        return rsa.RSAPublicNumbers(e, n).public_key()
    except ValueError as exc:
        raise JWKError(f"invalid RSA public key: {exc}") from exc


def _okp_key(jwk: Mapping[str, Any]) -> ed25519.Ed25519PublicKey:
    crv = jwk.get("crv")
    if crv != "Ed25519":
        raise JWKError(f"unsupported OKP curve {crv!r}")
    try:
        return ed25519.Ed25519PublicKey.from_public_bytes(_b64url_decode(jwk, "x"))
    except ValueError as exc:
        raise JWKError(f"invalid Ed25519 public key: {exc}") from exc


def key_from_jwk(jwk: Mapping[str, Any]) -> Any:
    """Build the public key described by a JWK object."""
    kty = jwk.get("kty")
    if kty == "EC":
        return _ec_key(jwk)
    if kty == "RSA":
        return _rsa_key(jwk)
    if kty == "OKP":
        return _okp_key(jwk)
    raise JWKError(f"unsupported key type {kty!r}")


def key_to_jwk(key: Any) -> dict[str, str]:
    """Describe a public key as a JWK object holding only key parameters."""
    if isinstance(key, ec.EllipticCurvePublicKey):
        crv = _CURVE_NAMES.get(key.curve.name)
        if crv is None:
            raise JWKError(f"unsupported elliptic curve {key.curve.name!r}")
        size = (key.curve.key_size + 7) // 8
        numbers = key.public_numbers()
        return {
            "kty": "EC",
            "crv": crv,
            "x": _b64url_encode(_int_bytes(numbers.x, size)),
            "y": _b64url_encode(_int_bytes(numbers.y, size)),
        }
    if isinstance(key, rsa.RSAPublicKey):
        numbers = key.public_numbers()
        return {
            "kty": "RSA",
            "n": _b64url_encode(_int_bytes(numbers.n)),
            "e": _b64url_encode(_int_bytes(numbers.e)),
        }
    if isinstance(key, ed25519.Ed25519PublicKey):
        raw = key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)
        return {"kty": "OKP", "crv": "Ed25519", "x": _b64url_encode(raw)}
    raise JWKError(f"unknown key type {type(key).__name__}")


def certificates_from_jwk(jwk: Mapping[str, Any]) -> list[x509.Certificate]:
    """Return the certificates in the JWK's ``x5c`` member.

    When the JWK also carries key parameters, they must match the public key
    of the first certificate.
    """
    chain = jwk.get("x5c")
    if chain is None:
        return []
    if not isinstance(chain, list):
        raise JWKError("invalid JWK, 'x5c' must be a list")
    certs = []
    for position, encoded in enumerate(chain):
        if not isinstance(encoded, str):
            raise JWKError(f"invalid JWK, x5c entry {position} is not a string")
        try:
            der = base64.b64decode(encoded, validate=True)
            certs.append(x509.load_der_x509_certificate(der))
        except (binascii.Error, ValueError) as exc:
            raise JWKError(f"invalid JWK, x5c entry {position}: {exc}") from exc
    if certs and "kty" in jwk:
        key = key_from_jwk(jwk)
        try:
            matches = public_key_equal(key, certs[0].public_key())
        except TypeError:
            matches = False
        if not matches:
            raise JWKError("invalid JWK, public keys in key and x5c fields do not match")
    return certs