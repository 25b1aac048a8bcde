"""Stateless seed derivation.

A run seed and a datapoint index are each decorrelated through a fixed 64-bit
mixer and combined with wraparound, so every index owns an independent
generator and datasets can be produced in any order.
"""

from __future__ import annotations

from .errors import InvalidParametersError

_MASK_64 = (1 << 64) - 1


def hash64(value: int) -> int:
    """SplitMix64 finalizer over an unsigned 64-bit integer."""
    if not 0 <= value <= _MASK_64:
        raise InvalidParametersError(f"Value must fit in an unsigned 64-bit integer: {value}")
    z = (value + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


def seed_offset(seed: int = 0) -> int:
    return hash64(hash64(seed))


def datapoint_seed(index: int, offset: int) -> int:
    return (hash64(index) + offset) & _MASK_64
