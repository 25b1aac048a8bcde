"""Bijective maps between a perceptual coordinate in [-1, 1] and a physical value.

A coordinate drawn uniformly in [-1, 1] maps onto the domain either on a log
scale (``LogUniform``: frequencies, amplitudes, distortion powers) or on a
linear scale (``Uniform``: duty cycles, frequency-map intervals). Sampling
returns both the coordinate and the value so labels can report where in the
domain a datapoint landed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .errors import InvalidParametersError

_MIN_LOG_VALUE = 1e-6


@dataclass(frozen=True, slots=True)
class LogUniform:
    """Log-uniform distribution over ``[min, max]``."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if self.min < 0.0:
            raise InvalidParametersError(f"Range must be non-negative. Min: {self.min}")
        if self.max < self.min:
            raise InvalidParametersError(
                f"Range maximum must be no less than the minimum. Range: ({self.min}, {self.max})"
            )
        if self.min == 0.0:
            # log(0) is undefined; nudge the floor instead of rejecting it.
            object.__setattr__(self, "min", _MIN_LOG_VALUE)
            if self.max < _MIN_LOG_VALUE:
                object.__setattr__(self, "max", _MIN_LOG_VALUE)

    @classmethod
    def from_tuple(cls, value_range: tuple[float, float]) -> "LogUniform":
        low, high = value_range
        return cls(float(low), float(high))

    @property
    def is_degenerate(self) -> bool:
        return self.min == self.max

    def map_to_value(self, coordinate: float) -> float:
        if self.is_degenerate:
            return self.min
        log_min = math.log(self.min)
        log_max = math.log(self.max)
        return math.exp((log_max - log_min) * (coordinate + 1.0) / 2.0 + log_min)

    def value_to_map(self, value: float) -> float:
        if self.is_degenerate:
            raise InvalidParametersError("Cannot map a value onto an empty range.")
        log_min = math.log(self.min)
        log_max = math.log(self.max)
        return (math.log(value) - log_min) / (log_max - log_min) * 2.0 - 1.0

    def sample_with_map(self, rng: np.random.Generator) -> tuple[float, float]:
        """Return ``(coordinate, value)`` with the coordinate uniform in [-1, 1]."""
        coordinate = float(rng.uniform(-1.0, 1.0))
        return coordinate, self.map_to_value(coordinate)

    def sample(self, rng: np.random.Generator) -> float:
        return self.sample_with_map(rng)[1]


@dataclass(frozen=True, slots=True)
class Uniform:
    """Uniform distribution over ``[min, max]`` with the same coordinate contract."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if self.max < self.min:
            raise InvalidParametersError(
                f"Range maximum must be no less than the minimum. Range: ({self.min}, {self.max})"
            )

    @classmethod
    def from_tuple(cls, value_range: tuple[float, float]) -> "Uniform":
        low, high = value_range
        return cls(float(low), float(high))

    @property
    def is_degenerate(self) -> bool:
        return self.min == self.max

    def map_to_value(self, coordinate: float) -> float:
        if self.is_degenerate:
            return self.min
        return (self.max - self.min) * (coordinate + 1.0) / 2.0 + self.min

    def value_to_map(self, value: float) -> float:
        if self.is_degenerate:
            raise InvalidParametersError("Cannot map a value onto an empty range.")
        return (value - self.min) / (self.max - self.min) * 2.0 - 1.0

    def sample_with_map(self, rng: np.random.Generator) -> tuple[float, float]:
        coordinate = float(rng.uniform(-1.0, 1.0))
        return coordinate, self.map_to_value(coordinate)

    def sample(self, rng: np.random.Generator) -> float:
        return self.sample_with_map(rng)[1]
