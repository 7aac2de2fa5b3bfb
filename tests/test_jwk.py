import base64
import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.x509.oid import NameOID

from trustbundle.cryptoutil import public_key_equal
from trustbundle.jwk import JWKError, certificates_from_jwk, key_from_jwk, key_to_jwk

SOURCE_JWK = {
    "use": "jwt-svid",
    "kty": "EC",
    "kid": "KID",
    "crv": "P-256",
    "x": "fK-wKTnKL7KFLM27lqq5DC-bxrVaH6rDV-IcCSEOeL4",
    "y": "wq-g3TQWxYlV51TCPH030yXsRxvujD4hUUaIQrXk4KI",
}


def _make_cert(key):
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "test ca")])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(hours=1))
        .sign(key, hashes.SHA256())
    )


def _x5c(cert):
    return base64.b64encode(cert.public_bytes(serialization.Encoding.DER)).decode("ascii")


@pytest.fixture(scope="module")
def rsa_public_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048).public_key()


@pytest.mark.parametrize("curve", [ec.SECP256R1, ec.SECP384R1, ec.SECP521R1])
def test_ec_round_trip(curve):
    key = ec.generate_private_key(curve()).public_key()
    assert public_key_equal(key_from_jwk(key_to_jwk(key)), key)


def test_rsa_round_trip(rsa_public_key):
    jwk = key_to_jwk(rsa_public_key)
    assert jwk["e"] == "AQAB"
    assert public_key_equal(key_from_jwk(jwk), rsa_public_key)


def test_ed25519_round_trip():
    key = ed25519.Ed25519PrivateKey.generate().public_key()
    jwk = key_to_jwk(key)
    assert jwk["kty"] == "OKP"
    assert public_key_equal(key_from_jwk(jwk), key)


def test_source_document_key_re_encodes_identically():
    key = key_from_jwk(SOURCE_JWK)
    jwk = key_to_jwk(key)
    assert jwk == {k: SOURCE_JWK[k] for k in ("kty", "crv", "x", "y")}


def test_missing_kty_raises():
    with pytest.raises(JWKError, match="unsupported key type"):
        key_from_jwk({"x": "AA"})


def test_symmetric_key_type_raises():
    with pytest.raises(JWKError, match="unsupported key type"):
        key_from_jwk({"kty": "oct", "k": "AA"})


def test_unknown_curve_raises():
    with pytest.raises(JWKError, match="unsupported elliptic curve"):
        key_from_jwk(dict(SOURCE_JWK, crv="P-192"))


def test_wrong_coordinate_length_raises():
    with pytest.raises(JWKError, match="wrong length"):
        key_from_jwk(dict(SOURCE_JWK, x=SOURCE_JWK["x"][:-4]))


def test_missing_coordinate_raises():
    jwk = dict(SOURCE_JWK)
    del jwk["y"]
    with pytest.raises(JWKError):
        key_from_jwk(jwk)


def test_key_to_jwk_rejects_non_keys():
    with pytest.raises(JWKError, match="unknown key type"):
        key_to_jwk("test-1")


def test_certificates_absent():
    assert certificates_from_jwk(SOURCE_JWK) == []


def test_certificates_round_trip():
    private_key = ec.generate_private_key(ec.SECP256R1())
    cert = _make_cert(private_key)
    jwk = dict(key_to_jwk(private_key.public_key()), use="x509-svid", x5c=[_x5c(cert)])
    assert certificates_from_jwk(jwk) == [cert]


def test_certificates_key_mismatch_raises():
    cert = _make_cert(ec.generate_private_key(ec.SECP256R1()))
    jwk = dict(SOURCE_JWK, x5c=[_x5c(cert)])
    with pytest.raises(JWKError, match="do not match"):
        certificates_from_jwk(jwk)


def test_certificates_invalid_base64_raises():
    with pytest.raises(JWKError):
        certificates_from_jwk({"x5c": ["***"]})


def test_certificates_not_a_list_raises():
    with pytest.raises(JWKError):
        certificates_from_jwk({"x5c": "abc"})