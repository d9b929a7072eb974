"""
Seedable RNG for deterministic combat simulation.

Every random draw in the simulator (initiative rolls, hit and crit rolls,
random-role AI scores) comes from an explicitly injected generator. Nothing
reads ambient entropy, so a fixed seed reproduces a fight exactly.

The generator is XorShift128 (libGDX RandomXS128 layout). Its full state is
two 64-bit integers plus a call counter, which is small enough to live
inside a CombatState snapshot as a plain tuple.

Usage:
    rng = Random(42)
    roll = rng.random_float()          # [0, 1)
    state = rng.get_state()            # (seed0, seed1, counter)
    same = Random.from_state(state)    # resumes the identical stream
"""

from typing import Optional, Tuple

__all__ = ["XorShift128", "Random", "RNGState", "seed_to_long"]

_MASK64 = 0xFFFFFFFFFFFFFFFF

RNGState = Tuple[int, int, int]


class XorShift128:
    """
    XorShift128 PRNG.

    State is two 64-bit integers (seed0, seed1).
    """

    def __init__(self, seed: int, seed1: Optional[int] = None):
        """
        Initialize with a 64-bit seed or explicit (seed0, seed1) state.

        Args:
            seed: Either the initial seed (if seed1 is None) or seed0 state
            seed1: If provided, use (seed, seed1) as direct state values
        """
        if seed1 is not None:
            self.seed0 = seed & _MASK64
            self.seed1 = seed1 & _MASK64
        else:
            # An all-zero state never leaves zero
            if seed == 0:
                seed = -0x8000000000000000
            self.seed0 = self._murmur_hash3(seed)
            self.seed1 = self._murmur_hash3(self.seed0)

    @staticmethod
    def _murmur_hash3(x: int) -> int:
        """MurmurHash3 finalizer - spreads a small seed across 64 bits."""
        x = x & _MASK64
        x ^= x >> 33
        x = (x * 0xff51afd7ed558ccd) & _MASK64
        x ^= x >> 33
        x = (x * 0xc4ceb9fe1a85ec53) & _MASK64
        x ^= x >> 33
        return x

    def _next_long(self) -> int:
        """Advance the state and return the next unsigned 64-bit value."""
        s1 = self.seed0
        s0 = self.seed1
        self.seed0 = s0
        s1 ^= (s1 << 23) & _MASK64
        self.seed1 = (s1 ^ s0 ^ (s1 >> 17) ^ (s0 >> 26)) & _MASK64
        return (self.seed0 + self.seed1) & _MASK64

    def next_double(self) -> float:
        """Random double in [0, 1) with 53 bits of precision."""
        return (self._next_long() >> 11) / (1 << 53)

    def get_state(self, index: int) -> int:
        """Get state value (0 = seed0, 1 = seed1)."""
        if index == 0:
            return self.seed0
        return self.seed1

    def copy(self) -> 'XorShift128':
        return XorShift128(self.seed0, self.seed1)


class Random:
    """
    Simulation RNG wrapper.

    Tracks a counter of draws made so a stream can be inspected and
    restored. Calling the instance directly returns a float in [0, 1),
    which is the shape the AI and combat formulas consume.
    """

    def __init__(self, seed: int, counter: int = 0):
        """
        Initialize RNG with seed and optional counter.

        Args:
            seed: 64-bit seed value
            counter: Number of draws to skip before first use
        """
        self._rng = XorShift128(seed)
        self.counter = 0
        for _ in range(counter):
            self.random_float()

    @classmethod
    def from_state(cls, state: RNGState) -> 'Random':
        """Rebuild a generator from a (seed0, seed1, counter) tuple."""
        seed0, seed1, counter = state
        new = cls.__new__(cls)
        new._rng = XorShift128(seed0, seed1)
        new.counter = counter
        return new

    def get_state(self) -> RNGState:
        return (self._rng.get_state(0), self._rng.get_state(1), self.counter)

    def __call__(self) -> float:
        return self.random_float()

    def random_float(self) -> float:
        """Random float in [0, 1)."""
        self.counter += 1
        return self._rng.next_double()

    def copy(self) -> 'Random':
        """Create an independent copy that continues the same stream."""
        return Random.from_state(self.get_state())


def seed_to_long(seed_string: str) -> int:
    """
    Convert a seed string (e.g., "DUEL42") to a numeric seed.

    Pure numeric strings are taken as plain integers; anything else is
    read as base-36 over 0-9A-Z, case-insensitive, skipping other characters.
    """
    if seed_string.lstrip('-').isdigit():
        return int(seed_string)

    characters = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    result = 0
    for char in seed_string.upper():
        remainder = characters.find(char)
        if remainder == -1:
            continue
        result = result * len(characters) + remainder
    return result
