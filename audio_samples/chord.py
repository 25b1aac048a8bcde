from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

import numpy as np

from .errors import InvalidParametersError

# Octave search never needs to go further than this many doublings above the lowest copy.
_MAX_OCTAVES = 40


@dataclass(frozen=True, slots=True)
class ChordType:
    """A chord as frequency multipliers relative to its root note."""

    name: str
    offsets: tuple[float, ...]

    @property
    def num_notes(self) -> int:
        return len(self.offsets) + 1

    def frequencies(self, base_frequency: float) -> Iterator[float]:
        """Yield the root, then every chord member in table order."""
        yield base_frequency
        for offset in self.offsets:
            yield base_frequency * offset


# Just-intonation ratios; the index of each entry is its persisted chord type id.
CHORD_TYPES: tuple[ChordType, ...] = (
    ChordType("Single Note", ()),
    ChordType("Major", (5 / 4, 3 / 2)),
    ChordType("Minor", (6 / 5, 3 / 2)),
    ChordType("Diminished", (6 / 5, 36 / 25)),
    ChordType("Augmented", (5 / 4, 25 / 16)),
    ChordType("Major Seventh", (5 / 4, 3 / 2, 15 / 8)),
    ChordType("Minor Seventh", (6 / 5, 3 / 2, 9 / 5)),
    ChordType("Dominant Seventh", (5 / 4, 3 / 2, 9 / 5)),
    ChordType("Suspended Second", (9 / 8, 3 / 2)),
    ChordType("Suspended Fourth", (4 / 3, 3 / 2)),
    ChordType("Power Chord", (3 / 2,)),
)

CHORD_IDS: Mapping[str, int] = MappingProxyType(
    {chord.name.lower(): index for index, chord in enumerate(CHORD_TYPES)}
)


def chord_type(chord_id: int) -> ChordType:
    if not 0 <= chord_id < len(CHORD_TYPES):
        raise InvalidParametersError(
            f"Invalid chord type {chord_id}. Chord type must be less than {len(CHORD_TYPES)}."
        )
    return CHORD_TYPES[chord_id]


def chord_id_from_name(name: str) -> int:
    try:
        return CHORD_IDS[name.strip().lower()]
    except KeyError as exc:
        valid = ", ".join(chord.name for chord in CHORD_TYPES)
        raise InvalidParametersError(f"Unknown chord type {name!r}. Valid: {valid}") from exc


@dataclass(frozen=True, slots=True)
class OctaveParameters:
    """Octave spread policy for chord notes.

    Every chord note is moved to a random octave inside
    ``[min_frequency, max_frequency]`` (the root keeps its own octave), and
    further distinct octave copies are added while a Bernoulli trial with the
    matching probability succeeds.
    """

    add_root_octave_probability: float
    add_other_octave_probability: float
    min_frequency: float
    max_frequency: float

    def __post_init__(self) -> None:
        for name in ("add_root_octave_probability", "add_other_octave_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidParametersError(
                    f"Probabilities must be within [0, 1]. {name}: {value}"
                )
        if self.min_frequency <= 0.0:
            raise InvalidParametersError(
                f"Minimum frequency must be positive. Value: {self.min_frequency}"
            )
        if self.max_frequency < self.min_frequency * 2.0:
            raise InvalidParametersError(
                "Maximum frequency must be at least twice the minimum frequency. "
                f"Min frequency: {self.min_frequency} Max frequency: {self.max_frequency}"
            )

    def base_octave(self, frequency: float) -> int:
        """Octave ``k`` with ``frequency / 2**k >= min`` and ``frequency / 2**(k+1) < min``."""
        if frequency <= 0.0:
            raise InvalidParametersError(f"Frequency must be positive. Value: {frequency}")
        octave = math.floor(math.log2(frequency / self.min_frequency))
        # log2 can land one step off near exact powers of two.
        while frequency / 2.0**octave < self.min_frequency:
            octave -= 1
        while frequency / 2.0 ** (octave + 1) >= self.min_frequency:
            octave += 1
        return octave

    def num_octaves(self, lowest_frequency: float) -> int:
        for octave in range(1, _MAX_OCTAVES):
            if lowest_frequency * 2.0**octave > self.max_frequency:
                return octave
        raise InvalidParametersError(
            f"Could not fit {lowest_frequency} Hz below {self.max_frequency} Hz."
        )

    def generate_octave(self, rng: np.random.Generator, frequency: float) -> float:
        lowest = frequency / 2.0 ** self.base_octave(frequency)
        octave = int(rng.integers(self.num_octaves(lowest)))
        return lowest * 2.0**octave

    def generate_frequencies(
        self, rng: np.random.Generator, frequency: float, root: bool
    ) -> list[float]:
        given_octave = self.base_octave(frequency)
        lowest = frequency / 2.0**given_octave
        num_octaves = self.num_octaves(lowest)

        if root:
            octaves = [min(max(given_octave, 0), num_octaves - 1)]
            probability = self.add_root_octave_probability
        else:
            octaves = [int(rng.integers(num_octaves))]
            probability = self.add_other_octave_probability

        while len(octaves) < num_octaves and rng.random() < probability:
            octave = int(rng.integers(num_octaves))
            if octave not in octaves:
                octaves.append(octave)

        return [lowest * 2.0**octave for octave in octaves]
