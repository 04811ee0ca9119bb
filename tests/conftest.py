"""Root conftest for all tests - provides shared key fixtures."""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa


@pytest.fixture(scope="session")
def rsa_private_key():
    """2048-bit RSA key shared by the RS*/PS* tests."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_p256_private_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_p384_private_key():
    return ec.generate_private_key(ec.SECP384R1())


@pytest.fixture
def sodium():
    """pysodium module; skips when libsodium cannot be loaded on this host."""
    try:
        import pysodium
    except Exception as e:  # ImportError, or ValueError/OSError from the ctypes loader
        pytest.skip(f"libsodium not available: {e}")
    return pysodium


@pytest.fixture
def hmac_key():
    return b"0123456789abcdef0123456789abcdef"
