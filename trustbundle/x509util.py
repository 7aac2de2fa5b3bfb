"""Helpers for lists of X.509 certificates."""

from __future__ import annotations

from typing import Iterable, Sequence

from cryptography import x509
from cryptography.hazmat.primitives import serialization

__all__ = [
    "copy_x509_authorities",
    "certs_equal",
    "raw_certs_from_certs",
    "concat_raw_certs_from_certs",
]


def copy_x509_authorities(x509_authorities: Iterable[x509.Certificate] | None) -> list[x509.Certificate]:
    """Return a new list holding the same certificates."""
    return list(x509_authorities or [])


def certs_equal(a: Sequence[x509.Certificate], b: Sequence[x509.Certificate]) -> bool:
    """Return whether both sequences hold equal certificates in the same order."""
    return len(a) == len(b) and all(x == y for x, y in zip(a, b))


def raw_certs_from_certs(certs: Iterable[x509.Certificate]) -> list[bytes]:
    """Return the DER encoding of each certificate."""
    return [cert.public_bytes(serialization.Encoding.DER) for cert in certs]


def concat_raw_certs_from_certs(certs: Iterable[x509.Certificate]) -> bytes:
    """Return the DER encodings of the certificates joined together."""
    return b"".join(raw_certs_from_certs(certs))