"""Bleichenbacher's adaptive chosen-ciphertext attack on RSA PKCS#1 v1.5."""

from .attack import AttackFailed, AttackState, Attacker, Step, narrow
from .intervals import Interval, IntervalSet
from .oracle import Key, PaddingOracle, is_pkcs_conformant
from .pkcs1 import encrypt, generate_keypair, pkcs1_v15_pad, pkcs1_v15_unpad

__version__ = "0.1.0"
