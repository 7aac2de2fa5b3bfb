"""Reading and writing PEM-encoded certificates and PKCS#8 private keys."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Any, Callable, Iterable, Iterator

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

__all__ = [
    "PEMError",
    "parse_certificates",
    "parse_private_key",
    "encode_pkcs8_private_key",
    "encode_certificates",
]

CERT_TYPE = "CERTIFICATE"
KEY_TYPE = "PRIVATE KEY"

_BLOCK_RE = re.compile(
    rb"-----BEGIN ([^\r\n-]*)-----\r?\n(.*?)-----END \1-----",
    re.DOTALL,
)


class PEMError(ValueError):
    """Raised when PEM data cannot be decoded or parsed."""


def _decode_body(body: bytes) -> bytes | None:
    lines = body.splitlines()
    rest = iter(lines)
    remaining: list[bytes] = []
    in_headers = True
    had_headers = False
    for line in rest:
        if in_headers and b":" in line:
            had_headers = True
            continue
        if in_headers:
            in_headers = False
            if had_headers and not line.strip():
                continue
        remaining.append(line)
    payload = b"".join(line.strip() for line in remaining)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def _iter_blocks(data: bytes) -> Iterator[tuple[str, bytes]]:
    for match in _BLOCK_RE.finditer(data):
        der = _decode_body(match.group(2))
        if der is None:
            continue
        yield match.group(1).decode("ascii", "replace"), der


def _parse_blocks(data: bytes, expected_type: str, parse: Callable[[bytes], Any]) -> list[Any]:
    found = False
    objects = []
    for block_type, der in _iter_blocks(data):
        found = True
        if block_type != expected_type:
            continue
        try:
            objects.append(parse(der))
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise PEMError(str(exc)) from exc
    if not found:
        raise PEMError("no PEM blocks found")
    return objects


def _load_private_key(der: bytes) -> Any:
    return serialization.load_der_private_key(der, password=None)


def _encode_block(block_type: str, der: bytes) -> bytes:
    encoded = base64.b64encode(der)
    lines = [encoded[start:start + 64] + b"\n" for start in range(0, len(encoded), 64)]
    header = f"-----BEGIN {block_type}-----\n".encode("ascii")
    footer = f"-----END {block_type}-----\n".encode("ascii")
    return header + b"".join(lines) + footer


def parse_certificates(data: bytes) -> list[x509.Certificate]:
    """Parse every CERTIFICATE block; blocks of other types are skipped."""
    return _parse_blocks(data, CERT_TYPE, x509.load_der_x509_certificate)


def parse_private_key(data: bytes) -> Any:
    """Parse the first PKCS#8 PRIVATE KEY block, or return None if there is none."""
    keys = _parse_blocks(data, KEY_TYPE, _load_private_key)
    return keys[0] if keys else None


def encode_pkcs8_private_key(private_key: Any) -> bytes:
    """Encode a private key as a PEM PRIVATE KEY block in PKCS#8 form."""
    try:
        der = private_key.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise PEMError(f"unable to marshal private key: {exc}") from exc
    return _encode_block(KEY_TYPE, der)


def encode_certificates(certificates: Iterable[x509.Certificate]) -> bytes:
    """Encode certificates as concatenated PEM CERTIFICATE blocks."""
    return b"".join(
        _encode_block(CERT_TYPE, cert.public_bytes(serialization.Encoding.DER))
        for cert in certificates
    )