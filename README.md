# trustbundle

`trustbundle` handles SPIFFE trust bundles in Python. A trust bundle holds the public key material that is trusted for one trust domain. Trust domains are plain strings such as `"example.org"`.

- `trustbundle.x509bundle` holds X.509 authorities, which are root certificates. It reads them from PEM or from concatenated DER, and writes them as PEM.
- `trustbundle.jwtbundle` holds JWT authorities, which are public keys keyed by key ID. It reads and writes them as an RFC 7517 JWKS document.

Each of these modules has the following:

- a `Bundle` class;
- a `BundleSet` keyed by trust domain;
- a `Source` protocol, for looking up a bundle by trust domain. Both `Bundle` and `BundleSet` satisfy it.

Bundles and sets guard their state with a lock, so they can be shared between threads.

## Installation

```
pip install trustbundle
```

To install the test dependencies as well:

```
pip install "trustbundle[test]"
```

## X.509 bundles

```python
from trustbundle import x509bundle

bundle = x509bundle.load("example.org", "bundle.pem")   # PEM file
bundle.add_x509_authority(ca_certificate)               # ignored if already present
bundle.has_x509_authority(ca_certificate)               # True
pem_bytes = bundle.marshal()                            # PEM CERTIFICATE blocks

raw = x509bundle.parse_raw("example.org", der_bytes)    # concatenated DER
copy = bundle.clone()
assert copy.equal(bundle)
```

Other constructors:

- `x509bundle.read(trust_domain, binary_file)`
- `x509bundle.parse(trust_domain, pem_bytes)`
- `x509bundle.from_x509_authorities(trust_domain, certificates)`

Empty input gives an empty bundle. When PEM input holds no PEM block, or a certificate cannot be parsed, `X509BundleError` is raised. Its message starts with `x509bundle: cannot parse certificate:`.

## JWT bundles

```python
from trustbundle import jwtbundle

bundle = jwtbundle.Bundle("example.org")
bundle.add_jwt_authority("key-1", public_key)  # an empty key ID raises JWTBundleError
bundle.find_jwt_authority("key-1")             # the key, or None
bundle.remove_jwt_authority("key-1")
jwks = bundle.marshal()                        # {"keys": [{..., "kid": ...}]}

loaded = jwtbundle.load("example.org", "bundle.jwks")
parsed = jwtbundle.parse("example.org", jwks)
```

JWKS entries may be any of these key types:

- EC keys on P-256, P-384 or P-521;
- RSA keys;
- Ed25519 (`OKP`) keys.

If an entry carries an `x5c` chain, the key in the entry must match the key of the first certificate. An entry with no `kid` is an error, for example `jwtbundle: error adding authority 1 of JWKS: keyID cannot be empty`.

## Bundle sets

```python
from trustbundle import x509bundle

bundles = x509bundle.BundleSet(bundle_a, bundle_b)   # None entries are skipped
bundles.add(bundle_c)                                # replaces one for the same trust domain
"example.org" in bundles                             # same as bundles.has("example.org")
bundles.get("example.org")                           # the bundle, or None
bundles.bundles()                                    # sorted by trust domain
len(bundles)

found = bundles.get_x509_bundle_for_trust_domain("example.org")
```

`jwtbundle.BundleSet` works the same way, with `get_jwt_bundle_for_trust_domain`. A lookup for a trust domain that is not present raises the module's error, for example:

```
x509bundle: no X.509 bundle for trust domain "other.org"
```

## Lower-level helpers

- `trustbundle.pemutil` has the following:
  - `parse_certificates` and `parse_private_key`, which read PKCS#8;
  - `encode_certificates` and `encode_pkcs8_private_key`;
  - `PEMError`, which is raised on bad input.
- `trustbundle.jwk` converts between keys and JWK objects:
  - `key_from_jwk` and `key_to_jwk` convert public keys;
  - `certificates_from_jwk` reads the `x5c` chain;
  - `JWKError` is raised on bad input.
- `trustbundle.cryptoutil.public_key_equal` compares RSA, ECDSA and Ed25519 public keys. It raises `TypeError` for other key types.
- `trustbundle.jwtutil` copies and compares maps of JWT authorities.
- `trustbundle.x509util` copies and compares lists of certificates. It also gives their DER encodings, one by one or joined together.

## What this package does not do

This package works only with X.509 bundles and JWT bundles held on their own.

- It has no combined bundle type that carries both kinds of authority, a refresh hint and a sequence number.
- It cannot read or write the SPIFFE bundle JSON format that uses `x509-svid` and `jwt-svid` entries.
- It does not fetch bundles from a bundle endpoint over the network.
- It does not serve bundles over HTTP.
- It does not poll an endpoint for changes.
- It has no command-line program.