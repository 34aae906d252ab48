import pytest

from Crypto.Util.number import bytes_to_long

from bleichenbacher import (Key, PaddingOracle, encrypt, generate_keypair,
                            is_pkcs_conformant, pkcs1_v15_pad, pkcs1_v15_unpad)


def test_key_rejects_non_positive_modulus():
    with pytest.raises(ValueError):
        Key(3, 0)
    with pytest.raises(ValueError):
        Key(3, -35)


def test_generate_keypair():
    public_key, private_key = generate_keypair(256)
    assert public_key.exponent == 3
    assert public_key.modulus == private_key.modulus
    assert public_key.modulus.bit_length() == 256
    assert public_key.size_in_bytes == 32
    m = 0x1234567890
    c = pow(m, public_key.exponent, public_key.modulus)
    assert pow(c, private_key.exponent, private_key.modulus) == m


def test_generate_keypair_rejects_odd_sizes():
    with pytest.raises(ValueError):
        generate_keypair(255)


def test_pad_layout():
    em = pkcs1_v15_pad(b"hello", 32)
    assert len(em) == 32
    assert em[:2] == b"\x00\x02"
    assert b"\x00" not in em[2:26]
    assert em[26:] == b"\x00hello"


def test_pad_rejects_long_message():
    with pytest.raises(ValueError):
        pkcs1_v15_pad(b"A" * 22, 32)
    # allowed when the caller accepts a short PS
    assert len(pkcs1_v15_pad(b"A" * 22, 32, min_padding=1)) == 32
    with pytest.raises(ValueError):
        pkcs1_v15_pad(b"A" * 29, 32, min_padding=0)


def test_unpad():
    assert pkcs1_v15_unpad(pkcs1_v15_pad(b"secret", 32)) == b"secret"
    assert pkcs1_v15_unpad(b"\x00\x02\xff\xff\x00") == b""
    assert pkcs1_v15_unpad(b"\x00\x01\xff\xff\x00abc") is None
    assert pkcs1_v15_unpad(b"\x00\x02\x00abc") is None
    assert pkcs1_v15_unpad(b"\x00\x02\xff\xff") is None


def test_oracle_accepts_encryptions(keypair_256):
    public_key, private_key = keypair_256
    c = encrypt(b"kick it, CC", public_key)
    assert is_pkcs_conformant(c, private_key)
    assert is_pkcs_conformant(c, private_key, strict=True)


def test_oracle_rejects_other_headers(keypair_256):
    public_key, private_key = keypair_256
    k = public_key.size_in_bytes
    for header in (b"\x00\x01", b"\x00\x03", b"\x01\x02", b"\x00\x00"):
        block = header + b"\xff" * (k - 2)
        c = pow(bytes_to_long(block), public_key.exponent, public_key.modulus)
        assert not is_pkcs_conformant(c, private_key)


def test_strict_oracle_checks_padding(keypair_256):
    public_key, private_key = keypair_256
    k = public_key.size_in_bytes
    # only 4 padding bytes before the separator
    block = b"\x00\x02" + b"\xff" * 4 + b"\x00" + b"A" * (k - 7)
    c = pow(bytes_to_long(block), public_key.exponent, public_key.modulus)
    assert is_pkcs_conformant(c, private_key)
    assert not is_pkcs_conformant(c, private_key, strict=True)


def test_padding_oracle_counts_calls(keypair_256):
    public_key, private_key = keypair_256
    oracle = PaddingOracle(private_key)
    c = encrypt(b"abc", public_key)
    assert oracle(c)
    assert not oracle(0)
    assert oracle.calls == 2
