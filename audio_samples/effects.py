from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

import numpy as np
from numpy.typing import NDArray

from .audio import Audio
from .errors import InvalidParametersError
from .log_uniform import LogUniform

FloatArray: TypeAlias = NDArray[np.float64]
EffectKind = Literal["distortion", "normalize"]

_NORMALIZE_TOLERANCE = 1e-6


def distortion(samples: FloatArray, power: float, signal_amplitude: float) -> FloatArray:
    """Power-law waveshaper relative to the nominal signal amplitude.

    ``power > 1`` pushes samples towards +/- ``signal_amplitude``, ``power < 1``
    pulls them towards zero and ``power == 1`` is the identity. The output never
    exceeds ``signal_amplitude`` in magnitude.
    """
    if signal_amplitude <= 0.0:
        return samples
    magnitude = np.minimum(np.abs(samples) / signal_amplitude, 1.0)
    shaped = 1.0 - (1.0 - magnitude) ** power
    return np.sign(samples) * signal_amplitude * shaped


def normalize(samples: FloatArray) -> FloatArray:
    """Scale so the peak magnitude is exactly 1; silence is returned unchanged."""
    peak = float(np.max(np.abs(samples))) if samples.size else 0.0
    if peak == 0.0:
        return samples
    normalized = samples / peak
    assert float(np.max(np.abs(normalized))) <= 1.0 + _NORMALIZE_TOLERANCE
    return normalized


def low_pass(audio: Audio, cutoff_freq: float) -> Audio:
    """Zero every FFT bin from ``cutoff_freq`` upwards and transform back."""
    spectrum = audio.fft()
    cutoff_index = int(cutoff_freq / audio.sample_rate * len(spectrum))
    spectrum[max(cutoff_index, 0) :] = 0.0
    return Audio.from_spectrum(spectrum, audio.sample_rate)


@dataclass(frozen=True, slots=True)
class EffectParameters:
    kind: EffectKind
    power: float | None = None

    def __post_init__(self) -> None:
        if self.kind == "distortion" and (self.power is None or self.power <= 0.0):
            raise InvalidParametersError(
                f"Distortion needs a positive power. Value: {self.power}"
            )
        if self.kind == "normalize" and self.power is not None:
            raise InvalidParametersError("Normalize takes no parameters.")

    def apply_to_buffer(self, buffer: FloatArray, signal_amplitude: float) -> None:
        """Apply the effect to ``buffer`` in place."""
        match self.kind:
            case "distortion":
                assert self.power is not None
                buffer[:] = distortion(buffer, self.power, signal_amplitude)
            case "normalize":
                buffer[:] = normalize(buffer)


@dataclass(frozen=True, slots=True)
class EffectTypeDistribution:
    kind: EffectKind
    power: LogUniform | None = None

    def __post_init__(self) -> None:
        if self.kind == "distortion" and self.power is None:
            raise InvalidParametersError("Distortion needs a power range.")
        if self.kind == "normalize" and self.power is not None:
            raise InvalidParametersError("Normalize takes no parameters.")

    @classmethod
    def distortion(cls, power_range: tuple[float, float]) -> "EffectTypeDistribution":
        return cls("distortion", LogUniform.from_tuple(power_range))

    @classmethod
    def normalize(cls) -> "EffectTypeDistribution":
        return cls("normalize")

    def sample(self, rng: np.random.Generator) -> EffectParameters:
        match self.kind:
            case "distortion":
                assert self.power is not None
                return EffectParameters("distortion", power=self.power.sample(rng))
            case "normalize":
                return EffectParameters("normalize")


@dataclass(frozen=True, slots=True)
class EffectDistribution:
    type_distribution: EffectTypeDistribution
    probability: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise InvalidParametersError(
                f"Probabilities must be within [0, 1]. Value: {self.probability}"
            )

    def sample(self, rng: np.random.Generator) -> EffectParameters | None:
        if not rng.random() < self.probability:
            return None
        return self.type_distribution.sample(rng)
