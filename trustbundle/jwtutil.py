"""Helpers for maps of JWT authorities keyed by key ID."""

from __future__ import annotations

from typing import Any, Mapping

from .cryptoutil import public_key_equal

__all__ = ["copy_jwt_authorities", "jwt_authorities_equal"]


def copy_jwt_authorities(jwt_authorities: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a shallow copy of the authorities as a new dict."""
    return dict(jwt_authorities or {})


def jwt_authorities_equal(a: Mapping[str, Any], b: Mapping[str, Any]) -> bool:
    """Return whether both maps hold equal public keys under the same key IDs."""
    if len(a) != len(b):
        return False
    for key_id, key_a in a.items():
        if key_id not in b:
            return False
        try:
            if not public_key_equal(key_a, b[key_id]):
                return False
        except TypeError:
            return False
    return True