"""
Textbook RSA key generation and PKCS#1 v1.5 encryption padding.

    EM = 0x00 || 0x02 || PS || 0x00 || M

PS is made of random non-zero bytes. These helpers build the targets the
attack runs against.
"""

from math import gcd
from typing import Optional, Tuple

from Crypto.Random import get_random_bytes
from Crypto.Util.number import bytes_to_long, getPrime, inverse

from .oracle import Key

PUBLIC_EXPONENT = 3
MIN_PADDING = 8     # minimum PS length required by PKCS#1 v1.5


def generate_keypair(bits: int, e: int = PUBLIC_EXPONENT) -> Tuple[Key, Key]:
    """
    Generate an RSA modulus of exactly `bits` bits with gcd(e, phi) = 1.
    Returns (public_key, private_key).
    """
    if bits < 32 or bits % 2:
        raise ValueError("bits must be an even number >= 32")
    while True:
        p = getPrime(bits // 2)
        q = getPrime(bits // 2)
        n = p * q
        phi = (p - 1) * (q - 1)
        if p != q and n.bit_length() == bits and gcd(e, phi) == 1:
            break
    d = inverse(e, phi)
    return Key(e, n), Key(d, n)


def pkcs1_v15_pad(message: bytes, k: int, min_padding: int = MIN_PADDING) -> bytes:
    """Return EM = 0x00 || 0x02 || PS || 0x00 || message, PS non-zero bytes."""
    ps_len = k - len(message) - 3
    if ps_len < max(min_padding, 1):
        raise ValueError("message too long for PKCS#1 v1.5")
    ps = bytearray()
    while len(ps) < ps_len:
        b = get_random_bytes(1)[0]
        if b != 0:
            ps.append(b)
    return b'\x00\x02' + bytes(ps) + b'\x00' + message


def pkcs1_v15_unpad(block: bytes) -> Optional[bytes]:
    """Return message if block is a PKCS#1 v1.5 EM, otherwise None."""
    if len(block) < 3 or block[0:2] != b'\x00\x02':
        return None
    # locate 0x00 after PS
    idx = block.find(b'\x00', 2)
    if idx < 3:
        return None
    return block[idx + 1:]


def encrypt(message: bytes, public_key: Key, min_padding: int = MIN_PADDING) -> int:
    """Pad message and compute c = EM^e mod n."""
    em = pkcs1_v15_pad(message, public_key.size_in_bytes, min_padding)
    return pow(bytes_to_long(em), public_key.exponent, public_key.modulus)
