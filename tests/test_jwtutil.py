from cryptography.hazmat.primitives.asymmetric import ec

from trustbundle.jwtutil import copy_jwt_authorities, jwt_authorities_equal


def _key():
    return ec.generate_private_key(ec.SECP256R1()).public_key()


def test_copy_is_independent():
    original = {"key-1": "test-1", "key-2": "test-2"}
    copied = copy_jwt_authorities(original)
    assert copied == original
    copied["key-3"] = "test-3"
    assert "key-3" not in original


def test_copy_none_gives_empty_dict():
    assert copy_jwt_authorities(None) == {}


def test_equal_same_keys():
    k1, k2 = _key(), _key()
    a = {"key-1": k1, "key-2": k2}
    b = {"key-1": k1.public_numbers().public_key(), "key-2": k2}
    assert jwt_authorities_equal(a, b) is True


def test_equal_empty_maps():
    assert jwt_authorities_equal({}, {}) is True


def test_not_equal_different_length():
    k = _key()
    assert jwt_authorities_equal({"key-1": k}, {}) is False


def test_not_equal_missing_key_id():
    k = _key()
    assert jwt_authorities_equal({"key-1": k}, {"key-2": k}) is False


def test_not_equal_different_key():
    assert jwt_authorities_equal({"key-1": _key()}, {"key-1": _key()}) is False


def test_unsupported_values_are_not_equal():
    assert jwt_authorities_equal({"key-1": "test-1"}, {"key-1": "test-1"}) is False