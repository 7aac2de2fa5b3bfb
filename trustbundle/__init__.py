"""SPIFFE trust bundles: X.509 and JWT authority bundles, bundle sets, PEM and JWK helpers."""

__version__ = "0.1.0"

__all__ = [
    "cryptoutil",
    "jwtutil",
    "pemutil",
    "x509util",
    "jwk",
    "jwtbundle",
    "x509bundle",
]