[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trustbundle"
version = "0.1.0"
description = "SPIFFE trust bundles: X.509 and JWT authority bundles, bundle sets, PEM and JWKS encoding"
requires-python = ">=3.10"
keywords = ["spiffe", "trust-bundle", "x509", "jwks", "jwk", "pem", "pki"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["trustbundle"]

[tool.hatch.build.targets.sdist]
include = ["trustbundle", "tests", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
