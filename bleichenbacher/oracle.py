"""
RSA keys and the PKCS#1 v1.5 padding oracle.

The oracle decrypts with the private key and only leaks whether the block
starts with 0x00 0x02. The attacker never sees anything else.
"""

from dataclasses import dataclass

from Crypto.Util.number import long_to_bytes


@dataclass(frozen=True)
class Key:
    """RSA key (exponent, modulus), public (e, n) or private (d, n)."""
    exponent: int
    modulus: int

    def __post_init__(self):
        if self.modulus <= 0:
            raise ValueError("modulus must be positive")

    @property
    def size_in_bytes(self) -> int:
        return (self.modulus.bit_length() + 7) // 8


def is_pkcs_conformant(ciphertext: int, private_key: Key, strict: bool = False) -> bool:
    """
    Return True when the decrypted block starts with 0x00 0x02.

    With strict=True the block must also carry at least 8 non-zero padding
    bytes followed by a 0x00 separator.
    """
    m = pow(ciphertext, private_key.exponent, private_key.modulus)
    block = long_to_bytes(m, private_key.size_in_bytes)
    if block[0:2] != b'\x00\x02':
        return False
    if not strict:
        return True
    sep = block.find(b'\x00', 2)
    return sep >= 10


class PaddingOracle:
    """Local padding oracle holding the private key, counts its queries."""

    def __init__(self, private_key: Key, strict: bool = False):
        self._key = private_key
        self.strict = strict
        self.calls = 0

    def __call__(self, ciphertext: int) -> bool:
        self.calls += 1
        return is_pkcs_conformant(ciphertext, self._key, strict=self.strict)
