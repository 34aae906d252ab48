import pytest

from Crypto.Util.number import bytes_to_long

from bleichenbacher import generate_keypair, pkcs1_v15_pad


@pytest.fixture(scope="session")
def keypair_256():
    return generate_keypair(256)


@pytest.fixture(scope="session")
def keypair_384():
    return generate_keypair(384)


@pytest.fixture
def target_256(keypair_256):
    """(padded plaintext, ciphertext) of a short message under the 256-bit key."""
    public_key, _ = keypair_256
    em = pkcs1_v15_pad(b"kick it, CC", public_key.size_in_bytes)
    m = bytes_to_long(em)
    return m, pow(m, public_key.exponent, public_key.modulus)
