"""Bundles of X.509 authorities keyed by trust domain.

A bundle holds the root certificates trusted to authenticate X509-SVIDs for
one trust domain. Bundles are read from PEM or concatenated DER data, written
as PEM, and can be grouped into a ``BundleSet`` keyed by trust domain. Both
``Bundle`` and ``BundleSet`` act as a ``Source``.
"""

from __future__ import annotations

import json
import threading
from typing import IO, Any, Iterable, Iterator, Protocol, runtime_checkable

from cryptography import x509

from .pemutil import PEMError, encode_certificates, parse_certificates
from .x509util import certs_equal, copy_x509_authorities

__all__ = [
    "X509BundleError",
    "Source",
    "Bundle",
    "BundleSet",
    "from_x509_authorities",
    "load",
    "read",
    "parse",
    "parse_raw",
]


class X509BundleError(Exception):
    """Raised for failures reading, building or querying X.509 bundles."""

    def __init__(self, message: str) -> None:
        super().__init__(f"x509bundle: {message}")
        self.message = message


def _quote(value: Any) -> str:
    return json.dumps(str(value))


@runtime_checkable
class Source(Protocol):
    """A source of X.509 bundles keyed by trust domain."""

    def get_x509_bundle_for_trust_domain(self, trust_domain: str) -> "Bundle":
        """Return the X.509 bundle for the trust domain or raise X509BundleError."""
        ...


class Bundle:
    """A collection of trusted X.509 authorities for a trust domain."""

    def __init__(self, trust_domain: str) -> None:
        self._trust_domain = trust_domain
        self._lock = threading.RLock()
        self._x509_authorities: list[x509.Certificate] = []

    def __repr__(self) -> str:
        return f"Bundle(trust_domain={self._trust_domain!r}, authorities={len(self.x509_authorities())})"

    @property
    def trust_domain(self) -> str:
        """The trust domain the bundle belongs to."""
        return self._trust_domain

    def x509_authorities(self) -> list[x509.Certificate]:
        """Return a copy of the list of X.509 authorities."""
        with self._lock:
            return copy_x509_authorities(self._x509_authorities)

    def add_x509_authority(self, x509_authority: x509.Certificate) -> None:
        """Add an authority unless an equal one is already present."""
        with self._lock:
            if x509_authority not in self._x509_authorities:
                self._x509_authorities.append(x509_authority)

    def remove_x509_authority(self, x509_authority: x509.Certificate) -> None:
        """Remove the authority, if present."""
        with self._lock:
            if x509_authority in self._x509_authorities:
                self._x509_authorities.remove(x509_authority)

    def has_x509_authority(self, x509_authority: x509.Certificate) -> bool:
        """Return whether the authority is in the bundle."""
        with self._lock:
            return x509_authority in self._x509_authorities

    def set_x509_authorities(self, x509_authorities: Iterable[x509.Certificate]) -> None:
        """Replace all X.509 authorities with a copy of the given ones."""
        with self._lock:
            self._x509_authorities = copy_x509_authorities(x509_authorities)

    def empty(self) -> bool:
        """Return whether the bundle has no X.509 authorities."""
        with self._lock:
            return not self._x509_authorities

    def marshal(self) -> bytes:
        """Encode the authorities as PEM certificate blocks."""
        with self._lock:
            return encode_certificates(self._x509_authorities)

    def equal(self, other: "Bundle | None") -> bool:
        """Return whether both bundles have the same trust domain and authorities."""
        if other is None:
            return False
        if other is self:
            return True
        return self._trust_domain == other._trust_domain and certs_equal(
            self.x509_authorities(), other.x509_authorities()
        )

    def clone(self) -> "Bundle":
        """Return an independent copy of the bundle."""
        with self._lock:
            return from_x509_authorities(self._trust_domain, self._x509_authorities)

    def get_x509_bundle_for_trust_domain(self, trust_domain: str) -> "Bundle":
        """Return this bundle if it belongs to the trust domain."""
        if self._trust_domain != trust_domain:
            raise X509BundleError(
                f"no X.509 bundle found for trust domain: {_quote(trust_domain)}"
            )
        return self


def from_x509_authorities(trust_domain: str, authorities: Iterable[x509.Certificate]) -> Bundle:
    """Create a bundle holding a copy of the given certificates."""
    bundle = Bundle(trust_domain)
    bundle.set_x509_authorities(authorities)
    return bundle


def load(trust_domain: str, path: str) -> Bundle:
    """Load a bundle from a file of PEM certificate blocks."""
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise X509BundleError(f"unable to load X.509 bundle file: open {path}: {reason}") from exc
    return parse(trust_domain, data)


def read(trust_domain: str, reader: IO[bytes]) -> Bundle:
    """Read a bundle of PEM certificate blocks from a binary file-like object."""
    try:
        data = reader.read()
    except (OSError, ValueError, AttributeError) as exc:
        raise X509BundleError(f"unable to read X.509 bundle: {exc}") from exc
    return parse(trust_domain, data)


def _bundle_of(trust_domain: str, certs: Iterable[x509.Certificate]) -> Bundle:
    bundle = Bundle(trust_domain)
    for cert in certs:
        bundle.add_x509_authority(cert)
    return bundle


def parse(trust_domain: str, data: bytes) -> Bundle:
    """Parse a bundle from PEM certificate blocks; empty data gives an empty bundle."""
    if not data:
        return Bundle(trust_domain)
    try:
        certs = parse_certificates(data)
    except PEMError as exc:
        raise X509BundleError(f"cannot parse certificate: {exc}") from exc
    return _bundle_of(trust_domain, certs)


def _split_der(data: bytes) -> Iterator[bytes]:
    position = 0
    while position < len(data):
        if len(data) - position < 2 or data[position] != 0x30:
            raise ValueError("x509: malformed certificate")
        first = data[position + 1]
        if first < 0x80:
            header, length = 2, first
        else:
            count = first & 0x7F
            if count == 0 or count > 4 or position + 2 + count > len(data):
                raise ValueError("x509: malformed certificate")
            header = 2 + count
            length = int.from_bytes(data[position + 2:position + header], "big")
        end = position + header + length
        if end > len(data):
            raise ValueError("x509: malformed certificate")
        yield data[position:end]
        position = end


def parse_raw(trust_domain: str, data: bytes) -> Bundle:
    """Parse a bundle from ASN.1 DER certificates concatenated without padding."""
    if not data:
        return Bundle(trust_domain)
    try:
        certs = [x509.load_der_x509_certificate(der) for der in _split_der(data)]
    except ValueError as exc:
        raise X509BundleError(f"cannot parse certificate: {exc}") from exc
    return _bundle_of(trust_domain, certs)


class BundleSet:
    """A set of X.509 bundles keyed by trust domain."""

    def __init__(self, *args: Bundle | None) -> None:
        self._lock = threading.RLock()
        self._bundles: dict[str, Bundle] = {
            bundle.trust_domain: bundle for bundle in args if bundle is not None
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._bundles)

    def __contains__(self, trust_domain: object) -> bool:
        with self._lock:
            return trust_domain in self._bundles

    def add(self, bundle: Bundle | None) -> None:
        """Add a bundle, replacing any bundle for the same trust domain."""
        if bundle is None:
            return
        with self._lock:
            self._bundles[bundle.trust_domain] = bundle

    def remove(self, trust_domain: str) -> None:
        """Remove the bundle for the trust domain, if present."""
        with self._lock:
            self._bundles.pop(trust_domain, None)

    def has(self, trust_domain: str) -> bool:
        """Return whether the set holds a bundle for the trust domain."""
        return trust_domain in self

    def get(self, trust_domain: str) -> Bundle | None:
        """Return the bundle for the trust domain, or None."""
        with self._lock:
            return self._bundles.get(trust_domain)

    def bundles(self) -> list[Bundle]:
        """Return the bundles sorted by trust domain."""
        with self._lock:
            return [self._bundles[td] for td in sorted(self._bundles)]

    def get_x509_bundle_for_trust_domain(self, trust_domain: str) -> Bundle:
        """Return the bundle for the trust domain or raise X509BundleError."""
        with self._lock:
            bundle = self._bundles.get(trust_domain)
        if bundle is None:
            raise X509BundleError(f"no X.509 bundle for trust domain {_quote(trust_domain)}")
        return bundle