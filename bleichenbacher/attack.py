"""
Bleichenbacher PKCS#1 v1.5 padding-oracle attack (CRYPTO '98).

Recovers m from c = m^e mod n using only an oracle telling whether a
ciphertext decrypts to a block starting with 0x00 0x02, i.e. whether its
plaintext lies in [2B, 3B-1] with B = 2^(8(k-2)).

  1.  Blinding: find s0 such that c0 = c * s0^e mod n is conformant
  2.a First multiplier: smallest s1 >= n / 3B with c0 * s1^e conformant
  2.b Several intervals left: next conformant s after s_{i-1}
  2.c One interval [a, b] left: grow r from 2(b*s_{i-1} - 2B)/n and scan
      s in [(2B + rn)/b, (3B - 1 + rn)/a]
  3.  Narrow every interval with the conformant multiplier s_i
  4.  Single value a left: m = a * s0^-1 mod n

The attacker is a state machine: AttackState is an immutable snapshot and
Attacker.transition() maps one snapshot to the next.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from itertools import chain, count
from math import gcd
from typing import Callable, Iterable, Iterator, Optional, Tuple

from Crypto.Random import random as crypto_random
from Crypto.Util.number import inverse

from .intervals import Interval, IntervalSet
from .oracle import Key

# budget of candidate multipliers for a single search (Step 1 or Step 2)
DEFAULT_SEARCH_LIMIT = 1 << 24
# budget of narrowing rounds (Step 3) for a whole attack
DEFAULT_MAX_ROUNDS = 10000

Oracle = Callable[[int], bool]


class AttackFailed(RuntimeError):
    """The attack ran out of budget or the oracle answers are inconsistent."""


class Step(Enum):
    STEP1 = "1"
    STEP2A = "2a"
    STEP2B = "2b"
    STEP2C = "2c"
    STEP3 = "3"
    STEP4 = "4"


@dataclass(frozen=True)
class AttackState:
    """
    Snapshot of the attack.

    multipliers holds s0, s1, ..., s_i. round_index is i, the index of the
    multiplier searched by the current round. The interval set is never
    mutated once stored in a state and is left out of the hash, so states
    sharing it stay hashable.
    """
    step: Step = Step.STEP1
    multipliers: Tuple[int, ...] = ()
    c0: int = 0
    intervals: IntervalSet = field(default_factory=IntervalSet, hash=False)
    round_index: int = 0


def ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def narrow(intervals: IntervalSet, s: int, B: int, n: int) -> IntervalSet:
    """
    Step 3. Given a conformant multiplier s, every candidate m in [a, b]
    satisfies 2B <= m*s - r*n <= 3B - 1 for some integer r, hence
        m in [ceil((2B + rn) / s), floor((3B - 1 + rn) / s)]
    for r in [ceil((a*s - 3B + 1) / n), floor((b*s - 2B) / n)].
    """
    narrowed = IntervalSet()
    for a, b in intervals:
        r_min = ceil_div(a * s - 3 * B + 1, n)
        r_max = (b * s - 2 * B) // n
        for r in range(r_min, r_max + 1):
            lo = max(a, ceil_div(2 * B + r * n, s))
            hi = min(b, (3 * B - 1 + r * n) // s)
            if lo <= hi:
                narrowed.insert_interval(Interval(lo, hi))
    return narrowed


class Attacker:
    """
    Drives the attack against one target ciphertext.

    oracle is any callable taking a ciphertext and returning True when it
    decrypts to a conformant block.
    """

    def __init__(self, ciphertext: int, public_key: Key, oracle: Oracle,
                 search_limit: int = DEFAULT_SEARCH_LIMIT,
                 max_rounds: int = DEFAULT_MAX_ROUNDS,
                 rng=None, verbose: bool = False):
        k = public_key.size_in_bytes
        if k < 3:
            raise ValueError("modulus must be at least 3 bytes long")
        self.ciphertext = ciphertext
        self.public_key = public_key
        self.oracle = oracle
        self.B = 2 ** (8 * (k - 2))
        self.search_limit = search_limit
        self.max_rounds = max_rounds
        self.rng = rng if rng is not None else crypto_random
        self.verbose = verbose
        self.queries = 0
        self.state = AttackState()
        self._steps = {
            Step.STEP1: self._step1,
            Step.STEP2A: self._step2a,
            Step.STEP2B: self._step2b,
            Step.STEP2C: self._step2c,
            Step.STEP3: self._step3,
        }

    # public driving API

    def run(self) -> int:
        """Run until one value is left and return the padded plaintext."""
        while self.state.step is not Step.STEP4:
            self.advance()
        m = self.recover(self.state)
        if self.verbose:
            print(f"[+] Plaintext recovered after {self.queries} oracle queries")
        return m

    def advance(self) -> AttackState:
        """Apply one transition to the current state."""
        self.state = self.transition(self.state)
        return self.state

    def transition(self, state: AttackState) -> AttackState:
        """Return the state following `state`. Step 4 has no successor."""
        if state.step is Step.STEP4:
            raise ValueError("Step 4 is terminal, use recover()")
        return self._steps[state.step](state)

    def recover(self, state: AttackState) -> int:
        """Step 4: unblind the single remaining value."""
        intervals = state.intervals.get_intervals()
        if state.step is not Step.STEP4 or len(intervals) != 1 or intervals[0].width:
            raise ValueError("recover() needs a single interval [a, a]")
        n = self.public_key.modulus
        s0 = state.multipliers[0]
        if gcd(s0, n) != 1:
            raise ValueError(f"s0 = {s0} is not invertible modulo n")
        return intervals[0].start * inverse(s0, n) % n

    # oracle helpers

    def _query(self, c: int, s: int) -> bool:
        e, n = self.public_key.exponent, self.public_key.modulus
        self.queries += 1
        return self.oracle(c * pow(s, e, n) % n)

    def _search(self, c: int, candidates: Iterable[Optional[int]], step: Step) -> int:
        """
        Return the first candidate s such that c * s^e is conformant.
        None candidates stand for empty windows: they use budget, no query.
        """
        for tries, s in enumerate(candidates, 1):
            if tries > self.search_limit:
                break
            if s is not None and self._query(c, s):
                return s
        raise AttackFailed(
            f"Step {step.value}: no conformant multiplier within "
            f"{self.search_limit} candidates")

    def _blinding_candidates(self) -> Iterator[int]:
        n = self.public_key.modulus
        return chain([1], (self.rng.randint(1, n - 1) for _ in count()))

    def _window_candidates(self, interval: Interval, s_prev: int) -> Iterator[Optional[int]]:
        a, b = interval
        B, n = self.B, self.public_key.modulus
        r = ceil_div(2 * (b * s_prev - 2 * B), n)
        while True:
            lo = ceil_div(2 * B + r * n, b)
            hi = (3 * B - 1 + r * n) // a
            if lo > hi:
                yield None
            else:
                yield from range(lo, hi + 1)
            r += 1

    # transitions

    def _step1(self, state: AttackState) -> AttackState:
        n = self.public_key.modulus
        s0 = self._search(self.ciphertext, self._blinding_candidates(), Step.STEP1)
        c0 = self.ciphertext * pow(s0, self.public_key.exponent, n) % n
        if self.verbose:
            print(f"[*] Step 1: blinding with s0={s0} ({self.queries} queries)")
        return replace(state, step=Step.STEP2A, multipliers=(s0,), c0=c0,
                       intervals=IntervalSet([Interval(2 * self.B, 3 * self.B - 1)]),
                       round_index=1)

    def _step2a(self, state: AttackState) -> AttackState:
        start = ceil_div(self.public_key.modulus, 3 * self.B)
        s = self._search(state.c0, count(start), Step.STEP2A)
        if self.verbose:
            print(f"[*] Step 2a: found s1={s} ({self.queries} queries)")
        return replace(state, step=Step.STEP3, multipliers=state.multipliers + (s,))

    def _step2b(self, state: AttackState) -> AttackState:
        s = self._search(state.c0, count(state.multipliers[-1] + 1), Step.STEP2B)
        if self.verbose:
            print(f"[*] Step 2b: found s{state.round_index}={s} ({self.queries} queries)")
        return replace(state, step=Step.STEP3, multipliers=state.multipliers + (s,))

    def _step2c(self, state: AttackState) -> AttackState:
        intervals = state.intervals.get_intervals()
        if len(intervals) != 1:
            raise ValueError("Step 2c needs exactly one interval")
        candidates = self._window_candidates(intervals[0], state.multipliers[-1])
        s = self._search(state.c0, candidates, Step.STEP2C)
        if self.verbose:
            print(f"[*] Step 2c: found s{state.round_index}={s}, "
                  f"interval width {intervals[0].width.bit_length()} bits")
        return replace(state, step=Step.STEP3, multipliers=state.multipliers + (s,))

    def _step3(self, state: AttackState) -> AttackState:
        s = state.multipliers[-1]
        intervals = narrow(state.intervals, s, self.B, self.public_key.modulus)
        if not intervals:
            raise AttackFailed("Step 3: no interval left, oracle answers are inconsistent")

        if len(intervals) > 1:
            step = Step.STEP2B
        elif intervals.get_intervals()[0].width == 0:
            step = Step.STEP4
        else:
            step = Step.STEP2C
        if step is not Step.STEP4 and state.round_index >= self.max_rounds:
            raise AttackFailed(f"no single value left after {self.max_rounds} rounds")
        if self.verbose and len(intervals) > 1:
            print(f"[*] Step 3: {len(intervals)} intervals left")
        return replace(state, step=step, intervals=intervals,
                       round_index=state.round_index + 1)
