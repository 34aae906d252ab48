#!/usr/bin/env python3
"""
Bleichenbacher attack demo against a local padding oracle.

Scenarios:
  small : 256-bit modulus, message "kick it, CC"
  big   : 768-bit modulus, random 40-byte message

Usage:
  python3 -m bleichenbacher small [-v]
  python3 -m bleichenbacher big [--bits 768] [--message TEXT] [-v]
"""

import argparse
import time

from Crypto.Random import get_random_bytes
from Crypto.Util.number import long_to_bytes

from .attack import DEFAULT_SEARCH_LIMIT, AttackFailed, Attacker
from .oracle import PaddingOracle, is_pkcs_conformant
from .pkcs1 import PUBLIC_EXPONENT, encrypt, generate_keypair, pkcs1_v15_unpad

SCENARIOS = {
    "small": {"bits": 256, "message": b"kick it, CC"},
    "big": {"bits": 768, "message": None},   # two 384-bit primes; None: random 40 bytes
}
RANDOM_MESSAGE_BYTES = 40


def run_demo(bits: int, message: bytes, search_limit: int = DEFAULT_SEARCH_LIMIT,
             verbose: bool = False) -> bool:
    """Encrypt message under a fresh key, attack it, return whether it matches."""
    print(f"Generating RSA key {bits} bits, e={PUBLIC_EXPONENT}.")
    public_key, private_key = generate_keypair(bits)
    k = public_key.size_in_bytes
    print(f"Modulus length: {k} bytes, message: {message!r}\n")

    ciphertext = encrypt(message, public_key, min_padding=1)
    assert is_pkcs_conformant(ciphertext, private_key)

    oracle = PaddingOracle(private_key)
    attacker = Attacker(ciphertext, public_key, oracle,
                        search_limit=search_limit, verbose=verbose)

    print("Running Bleichenbacher attack..")
    start_time = time.time()
    m = attacker.run()
    elapsed = time.time() - start_time

    recovered = pkcs1_v15_unpad(long_to_bytes(m, k))
    print(f"\nRecovered message: {recovered!r}")
    print("Match ?", recovered == message)
    print(f"Oracle queries: {oracle.calls} ({elapsed:.2f} s)")
    return recovered == message


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bleichenbacher PKCS#1 v1.5 padding-oracle attack demo.")
    parser.add_argument("scenario", choices=sorted(SCENARIOS), help="Demo scenario.")
    parser.add_argument("--bits", type=int, help="Modulus size in bits (overrides the scenario).")
    parser.add_argument("-m", "--message", help="Message to encrypt (overrides the scenario).")
    parser.add_argument("--search-limit", type=int, default=DEFAULT_SEARCH_LIMIT,
                        help=f"Candidate multipliers per search (default {DEFAULT_SEARCH_LIMIT}).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print every step.")
    args = parser.parse_args(argv)

    scenario = SCENARIOS[args.scenario]
    bits = args.bits or scenario["bits"]
    if args.message is not None:
        message = args.message.encode()
    else:
        message = scenario["message"] or get_random_bytes(RANDOM_MESSAGE_BYTES)

    try:
        ok = run_demo(bits, message, search_limit=args.search_limit, verbose=args.verbose)
    except (ValueError, AttackFailed) as e:
        raise SystemExit(f"Attack failed: {e}")
    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
