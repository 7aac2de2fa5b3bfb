"""Bundles of JWT authorities keyed by trust domain.

A bundle holds the public keys, keyed by key ID, that are trusted to sign
JWT-SVIDs for one trust domain. Bundles are read from and written to standard
RFC 7517 JWKS documents and can be grouped into a ``BundleSet`` keyed by
trust domain. Both ``Bundle`` and ``BundleSet`` act as a ``Source``.
"""

from __future__ import annotations

import json
import threading
from typing import IO, Any, Mapping, Protocol, runtime_checkable

from .jwk import JWKError, certificates_from_jwk, key_from_jwk, key_to_jwk
from .jwtutil import copy_jwt_authorities, jwt_authorities_equal

__all__ = [
    "JWTBundleError",
    "Source",
    "Bundle",
    "BundleSet",
    "from_jwt_authorities",
    "load",
    "read",
    "parse",
]


class JWTBundleError(Exception):
    """Raised for failures reading, building or querying JWT bundles."""

    def __init__(self, message: str) -> None:
        super().__init__(f"jwtbundle: {message}")
        self.message = message


def _quote(value: Any) -> str:
    return json.dumps(str(value))


@runtime_checkable
class Source(Protocol):
    """A source of JWT bundles keyed by trust domain."""

    def get_jwt_bundle_for_trust_domain(self, trust_domain: str) -> "Bundle":
        """Return the JWT bundle for the trust domain or raise JWTBundleError."""
        ...


class Bundle:
    """A collection of trusted JWT authorities for a trust domain."""

    def __init__(self, trust_domain: str) -> None:
        self._trust_domain = trust_domain
        self._lock = threading.RLock()
        self._jwt_authorities: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"Bundle(trust_domain={self._trust_domain!r}, key_ids={sorted(self.jwt_authorities())!r})"

    @property
    def trust_domain(self) -> str:
        """The trust domain the bundle belongs to."""
        return self._trust_domain

    def jwt_authorities(self) -> dict[str, Any]:
        """Return a copy of the JWT authorities, keyed by key ID."""
        with self._lock:
            return copy_jwt_authorities(self._jwt_authorities)

    def find_jwt_authority(self, key_id: str) -> Any:
        """Return the authority for the key ID, or None if there is none."""
        with self._lock:
            return self._jwt_authorities.get(key_id)

    def has_jwt_authority(self, key_id: str) -> bool:
        """Return whether an authority exists for the key ID."""
        with self._lock:
            return key_id in self._jwt_authorities

    def add_jwt_authority(self, key_id: str, jwt_authority: Any) -> None:
        """Add or replace the authority for a key ID, which must not be empty."""
        if not key_id:
            raise JWTBundleError("keyID cannot be empty")
        with self._lock:
            self._jwt_authorities[key_id] = jwt_authority

    def remove_jwt_authority(self, key_id: str) -> None:
        """Remove the authority for the key ID, if present."""
        with self._lock:
            self._jwt_authorities.pop(key_id, None)

    def set_jwt_authorities(self, jwt_authorities: Mapping[str, Any]) -> None:
        """Replace all JWT authorities with a copy of the given mapping."""
        with self._lock:
            self._jwt_authorities = copy_jwt_authorities(jwt_authorities)

    def empty(self) -> bool:
        """Return whether the bundle has no JWT authorities."""
        with self._lock:
            return not self._jwt_authorities

    def marshal(self) -> bytes:
        """Encode the bundle as a standard JWKS document."""
        with self._lock:
            items = list(self._jwt_authorities.items())
        keys = []
        for key_id, jwt_authority in items:
            try:
                jwk = key_to_jwk(jwt_authority)
            except JWKError as exc:
                raise JWTBundleError(f"unable to marshal JWKS: {exc}") from exc
            keys.append({**jwk, "kid": key_id})
        return json.dumps({"keys": keys}, separators=(",", ":")).encode("utf-8")

    def clone(self) -> "Bundle":
        """Return an independent copy of the bundle."""
        with self._lock:
            return from_jwt_authorities(self._trust_domain, self._jwt_authorities)

    def equal(self, other: "Bundle | None") -> bool:
        """Return whether both bundles have the same trust domain and authorities."""
        if other is None:
            return False
        if other is self:
            return True
        return self._trust_domain == other._trust_domain and jwt_authorities_equal(
            self.jwt_authorities(), other.jwt_authorities()
        )

    def get_jwt_bundle_for_trust_domain(self, trust_domain: str) -> "Bundle":
        """Return this bundle if it belongs to the trust domain."""
        if self._trust_domain != trust_domain:
            raise JWTBundleError(f"no JWT bundle for trust domain {_quote(trust_domain)}")
        return self


def from_jwt_authorities(trust_domain: str, jwt_authorities: Mapping[str, Any]) -> Bundle:
    """Create a bundle holding a copy of the given JWT authorities."""
    bundle = Bundle(trust_domain)
    bundle.set_jwt_authorities(jwt_authorities)
    return bundle


def load(trust_domain: str, path: str) -> Bundle:
    """Load a bundle from a JWKS file on disk."""
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise JWTBundleError(f"unable to read JWT bundle: open {path}: {reason}") from exc
    return parse(trust_domain, data)


def read(trust_domain: str, reader: IO[bytes]) -> Bundle:
    """Read a bundle from a binary file-like object holding a JWKS document."""
    try:
        data = reader.read()
    except (OSError, ValueError, AttributeError) as exc:
        raise JWTBundleError(f"unable to read: {exc}") from exc
    return parse(trust_domain, data)


def _decode_jwks(data: bytes | str) -> list[tuple[str, Any]]:
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data or not data.strip():
        raise JWTBundleError("unable to parse JWKS: unexpected end of JSON input")
    try:
        document = json.loads(data)
    except ValueError as exc:
        raise JWTBundleError(f"unable to parse JWKS: {exc}") from exc
    if not isinstance(document, dict):
        raise JWTBundleError("unable to parse JWKS: document is not a JSON object")
    entries = document.get("keys")
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise JWTBundleError("unable to parse JWKS: keys is not a list")
    keys = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise JWTBundleError("unable to parse JWKS: key is not a JSON object")
        key_id = entry.get("kid", "")
        if not isinstance(key_id, str):
            raise JWTBundleError("unable to parse JWKS: kid is not a string")
        try:
            key = key_from_jwk(entry)
            certificates_from_jwk(entry)
        except JWKError as exc:
            raise JWTBundleError(f"unable to parse JWKS: {exc}") from exc
        keys.append((key_id, key))
    return keys


def parse(trust_domain: str, data: bytes | str) -> Bundle:
    """Parse a bundle from the bytes of a JWKS document."""
    bundle = Bundle(trust_domain)
    for position, (key_id, key) in enumerate(_decode_jwks(data)):
        try:
            bundle.add_jwt_authority(key_id, key)
        except JWTBundleError as exc:
            raise JWTBundleError(
                f"error adding authority {position} of JWKS: {exc.message}"
            ) from exc
    return bundle


class BundleSet:
    """A set of JWT bundles keyed by trust domain."""

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

    def get_jwt_bundle_for_trust_domain(self, trust_domain: str) -> Bundle:
        """Return the bundle for the trust domain or raise JWTBundleError."""
        with self._lock:
            bundle = self._bundles.get(trust_domain)
        if bundle is None:
            raise JWTBundleError(f"no JWT bundle for trust domain {_quote(trust_domain)}")
        return bundle