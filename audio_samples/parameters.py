"""Parameter space templates and the concrete per-datapoint parameters sampled from them.

``DataParameters`` describes a whole dataset. ``generate(index)`` derives a
seed from the index alone and samples a fully resolved
``DataPointParameters``, which renders into a ``DataPoint``. No state is
shared between indices.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np

from . import notes
from .chord import CHORD_TYPES, OctaveParameters, chord_type
from .effects import EffectDistribution, EffectParameters, EffectTypeDistribution
from .errors import InvalidParametersError
from .log_uniform import LogUniform, Uniform
from .oscillators import (
    OscillatorDistribution,
    OscillatorParameters,
    OscillatorTypeDistribution,
    random_seed,
)
from .seeds import datapoint_seed
from .seeds import seed_offset as derive_seed_offset

if TYPE_CHECKING:
    from .data import DataPoint, DataPointLabel

_LOGGER = logging.getLogger("audio_samples.parameters")

_AMPLITUDE_TOLERANCE = 1e-9


def _amplitude_budget(oscillators: Iterable[OscillatorDistribution]) -> float:
    return sum(oscillator.maximum_amplitude for oscillator in oscillators)


def _check_amplitude_budget(oscillators: Sequence[OscillatorDistribution]) -> None:
    total = _amplitude_budget(oscillators)
    if total > 1.0 + _AMPLITUDE_TOLERANCE:
        raise InvalidParametersError(
            f"The sum of oscillator amplitudes must not exceed 1. Current: {total}"
        )


def _can_produce_frequency(oscillators: Iterable[OscillatorDistribution]) -> bool:
    return any(osc.has_frequency and osc.probability > 0.0 for osc in oscillators)


@dataclass(frozen=True, slots=True)
class DataParameters:
    """Immutable, validated description of a dataset's parameter space."""

    sample_rate: int
    frequency_distribution: Uniform
    frequency_std_dev_distribution: LogUniform
    possible_chords: tuple[int, ...]
    octave_parameters: OctaveParameters
    num_samples: int
    oscillators: tuple[OscillatorDistribution, ...] = ()
    effects: tuple[EffectDistribution, ...] = ()
    seed_offset: int = field(default_factory=derive_seed_offset)

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise InvalidParametersError("sample_rate must be greater than 0.")
        if self.num_samples <= 0:
            raise InvalidParametersError("num_samples must be greater than 0.")
        if not self.possible_chords:
            raise InvalidParametersError("No chords provided.")
        for chord_id in self.possible_chords:
            chord_type(chord_id)
        _check_amplitude_budget(self.oscillators)

    @classmethod
    def create(
        cls,
        sample_rate: int,
        frequency_range: tuple[float, float],
        frequency_std_dev_range: tuple[float, float],
        possible_chords: Iterable[int],
        octave_parameters: OctaveParameters,
        num_samples: int,
    ) -> "DataParameters":
        low, high = frequency_range
        if not 0.0 < low < high:
            raise InvalidParametersError(f"Invalid frequency range: {frequency_range}")
        return cls(
            sample_rate=int(sample_rate),
            frequency_distribution=Uniform(
                notes.frequency_to_map(low), notes.frequency_to_map(high)
            ),
            frequency_std_dev_distribution=LogUniform.from_tuple(frequency_std_dev_range),
            possible_chords=tuple(int(chord_id) for chord_id in possible_chords),
            octave_parameters=octave_parameters,
            num_samples=int(num_samples),
        )

    @property
    def frequency_range(self) -> tuple[float, float]:
        return (
            notes.map_to_frequency(self.frequency_distribution.min),
            notes.map_to_frequency(self.frequency_distribution.max),
        )

    @property
    def amplitude_budget(self) -> float:
        return _amplitude_budget(self.oscillators)

    @property
    def has_frequency(self) -> bool:
        return _can_produce_frequency(self.oscillators)

    def with_seed_offset(self, seed: int) -> "DataParameters":
        return replace(self, seed_offset=derive_seed_offset(seed))

    def with_oscillator(
        self,
        type_distribution: OscillatorTypeDistribution,
        probability: float,
        amplitude_range: tuple[float, float],
    ) -> "DataParameters":
        oscillator = OscillatorDistribution.create(type_distribution, probability, amplitude_range)
        return replace(self, oscillators=(*self.oscillators, oscillator))

    def with_effect(
        self, type_distribution: EffectTypeDistribution, probability: float
    ) -> "DataParameters":
        effect = EffectDistribution(type_distribution, float(probability))
        return replace(self, effects=(*self.effects, effect))

    def seed_for(self, index: int) -> int:
        return datapoint_seed(index, self.seed_offset)

    def generate(self, index: int) -> "DataPointParameters":
        if not self.has_frequency:
            raise InvalidParametersError(
                "Cannot generate a signal without an oscillator with frequency."
            )
        return DataPointParameters.sample(self, self.seed_for(index))


class DataParametersBuilder:
    """Accumulates template pieces, validating each one as it is added.

    Example:
        parameters = (
            DataParametersBuilder(44100, (50.0, 2000.0), (0.5, 3.0), [0], octaves, 256)
            .with_oscillator(OscillatorTypeDistribution.sine(), 1.0, (0.5, 0.7))
            .with_effect(EffectTypeDistribution.normalize(), 1.0)
            .build()
        )
    """

    def __init__(
        self,
        sample_rate: int,
        frequency_range: tuple[float, float],
        frequency_std_dev_range: tuple[float, float],
        possible_chords: Iterable[int],
        octave_parameters: OctaveParameters,
        num_samples: int,
    ) -> None:
        self._parameters = DataParameters.create(
            sample_rate,
            frequency_range,
            frequency_std_dev_range,
            possible_chords,
            octave_parameters,
            num_samples,
        )

    def with_seed_offset(self, seed: int) -> "DataParametersBuilder":
        self._parameters = self._parameters.with_seed_offset(seed)
        return self

    def with_oscillator(
        self,
        type_distribution: OscillatorTypeDistribution,
        probability: float,
        amplitude_range: tuple[float, float],
    ) -> "DataParametersBuilder":
        self._parameters = self._parameters.with_oscillator(
            type_distribution, probability, amplitude_range
        )
        return self

    def with_effect(
        self, type_distribution: EffectTypeDistribution, probability: float
    ) -> "DataParametersBuilder":
        self._parameters = self._parameters.with_effect(type_distribution, probability)
        return self

    def build(self) -> DataParameters:
        if not self._parameters.has_frequency:
            raise InvalidParametersError(
                "A template needs at least one oscillator with frequency "
                "and a non-zero probability."
            )
        return self._parameters


@dataclass(frozen=True, slots=True)
class DataPointParameters:
    """Fully resolved recipe for one datapoint."""

    sample_rate: int
    base_frequency_map: float
    base_frequency: float
    frequency_std_dev: float
    frequency_walk_seed: int
    chord_type: int
    frequencies: tuple[float, ...]
    oscillators: tuple[OscillatorParameters, ...]
    effects: tuple[EffectParameters, ...]
    num_samples: int

    @classmethod
    def sample(cls, data_parameters: DataParameters, seed: int) -> "DataPointParameters":
        rng = np.random.default_rng(seed)
        frequency_map, base_frequency = _sample_base_frequency(data_parameters, rng)

        attempts = 0
        while True:
            attempts += 1
            oscillators = tuple(
                oscillator
                for distribution in data_parameters.oscillators
                if (oscillator := distribution.sample(rng)) is not None
            )
            if any(oscillator.has_frequency for oscillator in oscillators):
                break
        if attempts > 1:
            _LOGGER.debug("Resampled oscillators %d times for seed %d", attempts - 1, seed)

        chord_id = data_parameters.possible_chords[
            int(rng.integers(len(data_parameters.possible_chords)))
        ]
        chord = CHORD_TYPES[chord_id]
        octaves = data_parameters.octave_parameters
        chord_frequencies = list(chord.frequencies(base_frequency))
        frequencies = octaves.generate_frequencies(rng, chord_frequencies[0], root=True)
        for frequency in chord_frequencies[1:]:
            frequencies.extend(octaves.generate_frequencies(rng, frequency, root=False))

        frequency_std_dev = data_parameters.frequency_std_dev_distribution.sample(rng)
        frequency_walk_seed = random_seed(rng)
        effects = tuple(
            effect
            for distribution in data_parameters.effects
            if (effect := distribution.sample(rng)) is not None
        )

        return cls(
            sample_rate=data_parameters.sample_rate,
            base_frequency_map=frequency_map,
            base_frequency=base_frequency,
            frequency_std_dev=frequency_std_dev,
            frequency_walk_seed=frequency_walk_seed,
            chord_type=chord_id,
            frequencies=tuple(frequencies),
            oscillators=oscillators,
            effects=effects,
            num_samples=data_parameters.num_samples,
        )

    @property
    def has_frequency(self) -> bool:
        return any(oscillator.has_frequency for oscillator in self.oscillators)

    @property
    def note_number(self) -> float:
        return notes.map_to_note_number(self.base_frequency_map)

    @property
    def signal_amplitude(self) -> float:
        """Sum of the included oscillators' peak amplitudes."""
        return sum(oscillator.amplitude for oscillator in self.oscillators)

    def generate(self) -> "DataPoint":
        from .data import DataPoint

        return DataPoint.render(self)

    def label(self) -> "DataPointLabel":
        from .data import DataPointLabel

        return DataPointLabel.from_parameters(self)


def _sample_base_frequency(
    data_parameters: DataParameters, rng: np.random.Generator
) -> tuple[float, float]:
    frequency_map = data_parameters.frequency_distribution.sample(rng)
    return frequency_map, notes.map_to_frequency(frequency_map)
