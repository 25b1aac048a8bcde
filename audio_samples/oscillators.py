"""Oscillator distributions, sampled oscillator parameters, and waveform rendering.

Oscillator kinds form a closed set (``OscillatorKind``) dispatched with a
single ``match`` at sampling and render time. Pitched oscillators are evaluated
on a phase that follows a damped frequency random walk; noise ignores the
phase entirely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

import numpy as np
from numpy.typing import NDArray
from scipy.signal import lfilter  # type: ignore[import]

from .errors import InvalidParametersError
from .log_uniform import LogUniform, Uniform

FloatArray: TypeAlias = NDArray[np.float64]
OscillatorKind = Literal["sine", "saw", "pulse", "triangle", "noise"]

WALK_DAMPENING = 0.9
_UINT64_MAX = np.iinfo(np.uint64).max


def random_seed(rng: np.random.Generator) -> int:
    """Draw a fresh unsigned 64-bit seed."""
    return int(rng.integers(0, _UINT64_MAX, dtype=np.uint64, endpoint=True))


def cents_to_walk_std_dev(frequency: float, std_dev_cents: float) -> float:
    return frequency * (2.0 ** (std_dev_cents / 1200.0) - 1.0)


def frequency_walk(
    rng: np.random.Generator,
    frequency: float,
    std_dev_cents: float,
    num_samples: int,
) -> FloatArray:
    """Instantaneous frequency of a damped random walk around ``frequency``."""
    walk_std_dev = cents_to_walk_std_dev(frequency, std_dev_cents)
    steps = rng.normal(0.0, walk_std_dev, num_samples)
    # x[n] = 0.9 * x[n - 1] + e[n]
    offsets = lfilter([1.0], [1.0, -WALK_DAMPENING], steps)
    return frequency + np.asarray(offsets, dtype=np.float64)


def phase_from_frequencies(frequencies: FloatArray, sample_rate: int) -> FloatArray:
    """Phase in cycles; sample 0 starts at phase 0."""
    phase = np.zeros(len(frequencies), dtype=np.float64)
    if len(frequencies) > 1:
        phase[1:] = np.cumsum(frequencies[:-1]) / sample_rate
    return phase


def sine_wave(phase: FloatArray) -> FloatArray:
    return np.sin(2 * np.pi * phase)


def saw_wave(phase: FloatArray) -> FloatArray:
    return 2.0 * (phase - np.floor(phase)) - 1.0


def pulse_wave(phase: FloatArray, duty_cycle: float) -> FloatArray:
    return np.where(phase - np.floor(phase) < duty_cycle, 1.0, -1.0)


def triangle_wave(phase: FloatArray) -> FloatArray:
    return 2 * np.abs(2 * (phase - np.floor(phase + 0.5))) - 1.0


def noise_wave(seed: int, num_samples: int) -> FloatArray:
    samples = np.random.default_rng(seed).standard_normal(num_samples)
    return np.clip(samples, -1.0, 1.0)


@dataclass(frozen=True, slots=True)
class OscillatorType:
    """A concrete oscillator kind with its per-datapoint sub-parameter."""

    kind: OscillatorKind
    duty_cycle: float | None = None
    seed: int | None = None

    def __post_init__(self) -> None:
        match self.kind:
            case "pulse":
                if self.duty_cycle is None or not 0.0 <= self.duty_cycle <= 1.0:
                    raise InvalidParametersError(
                        "Pulse oscillators need a duty cycle within [0, 1]. "
                        f"Value: {self.duty_cycle}"
                    )
                if self.seed is not None:
                    raise InvalidParametersError("Pulse oscillators take no seed.")
            case "noise":
                if self.seed is None:
                    raise InvalidParametersError("Noise oscillators need a seed.")
                if self.duty_cycle is not None:
                    raise InvalidParametersError("Noise oscillators take no duty cycle.")
            case _:
                if self.duty_cycle is not None or self.seed is not None:
                    raise InvalidParametersError(
                        f"{self.kind} oscillators take no duty cycle or seed."
                    )

    @property
    def has_frequency(self) -> bool:
        return self.kind != "noise"

    def waveform(self, phase: FloatArray) -> FloatArray:
        match self.kind:
            case "sine":
                return sine_wave(phase)
            case "saw":
                return saw_wave(phase)
            case "pulse":
                assert self.duty_cycle is not None
                return pulse_wave(phase, self.duty_cycle)
            case "triangle":
                return triangle_wave(phase)
            case "noise":
                assert self.seed is not None
                return noise_wave(self.seed, len(phase))


@dataclass(frozen=True, slots=True)
class OscillatorTypeDistribution:
    kind: OscillatorKind
    duty_cycle: Uniform | None = None

    def __post_init__(self) -> None:
        if self.kind == "pulse":
            if self.duty_cycle is None:
                raise InvalidParametersError("Pulse oscillators need a duty cycle range.")
            if self.duty_cycle.min < 0.0 or self.duty_cycle.max > 1.0:
                raise InvalidParametersError(
                    f"Duty cycle range must lie within [0, 1]. Range: {self.duty_cycle}"
                )
        elif self.duty_cycle is not None:
            raise InvalidParametersError(
                f"Only pulse oscillators take a duty cycle, not {self.kind}."
            )

    @classmethod
    def sine(cls) -> "OscillatorTypeDistribution":
        return cls("sine")

    @classmethod
    def saw(cls) -> "OscillatorTypeDistribution":
        return cls("saw")

    @classmethod
    def pulse(cls, duty_cycle_range: tuple[float, float]) -> "OscillatorTypeDistribution":
        return cls("pulse", Uniform.from_tuple(duty_cycle_range))

    @classmethod
    def triangle(cls) -> "OscillatorTypeDistribution":
        return cls("triangle")

    @classmethod
    def noise(cls) -> "OscillatorTypeDistribution":
        return cls("noise")

    @property
    def has_frequency(self) -> bool:
        return self.kind != "noise"

    def sample(self, rng: np.random.Generator) -> OscillatorType:
        match self.kind:
            case "pulse":
                assert self.duty_cycle is not None
                return OscillatorType("pulse", duty_cycle=self.duty_cycle.sample(rng))
            case "noise":
                return OscillatorType("noise", seed=random_seed(rng))
            case _:
                return OscillatorType(self.kind)


@dataclass(frozen=True, slots=True)
class OscillatorParameters:
    oscillator_type: OscillatorType
    amplitude: float

    @property
    def has_frequency(self) -> bool:
        return self.oscillator_type.has_frequency

    def render(self, phase: FloatArray) -> FloatArray:
        """Amplitude-scaled waveform; noise only uses ``len(phase)``."""
        return self.amplitude * self.oscillator_type.waveform(phase)


@dataclass(frozen=True, slots=True)
class OscillatorDistribution:
    """One oscillator slot of a template, included per datapoint with ``probability``."""

    type_distribution: OscillatorTypeDistribution
    probability: float
    amplitude: LogUniform

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise InvalidParametersError(
                f"Probabilities must be within [0, 1]. Value: {self.probability}"
            )
        if self.amplitude.max > 1.0:
            raise InvalidParametersError(
                f"Amplitude range must not exceed 1. Max: {self.amplitude.max}"
            )

    @classmethod
    def create(
        cls,
        type_distribution: OscillatorTypeDistribution,
        probability: float,
        amplitude_range: tuple[float, float],
    ) -> "OscillatorDistribution":
        return cls(type_distribution, float(probability), LogUniform.from_tuple(amplitude_range))

    @property
    def maximum_amplitude(self) -> float:
        return self.amplitude.max

    @property
    def has_frequency(self) -> bool:
        return self.type_distribution.has_frequency

    def sample(self, rng: np.random.Generator) -> OscillatorParameters | None:
        if not rng.random() < self.probability:
            return None
        oscillator_type = self.type_distribution.sample(rng)
        amplitude = min(self.amplitude.sample(rng), self.amplitude.max)
        return OscillatorParameters(oscillator_type, amplitude)
