from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .chord import OctaveParameters, chord_id_from_name
from .effects import EffectTypeDistribution
from .errors import InvalidConfigError, InvalidParametersError
from .log_uniform import Uniform
from .oscillators import OscillatorKind, OscillatorTypeDistribution
from .parameters import DataParameters, DataParametersBuilder

_LOGGER = logging.getLogger("audio_samples.config")

Range = tuple[float, float]


class OctaveConfig(BaseModel):
    add_root_octave_probability: float = 0.0
    add_other_octave_probability: float = 0.0
    min_frequency: float = 20.0
    max_frequency: float = 20_000.0

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_parameters(self) -> OctaveParameters:
        return OctaveParameters(
            self.add_root_octave_probability,
            self.add_other_octave_probability,
            self.min_frequency,
            self.max_frequency,
        )


class OscillatorConfig(BaseModel):
    kind: OscillatorKind
    probability: float = 1.0
    amplitude_range: Range
    duty_cycle_range: Range | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    def type_distribution(self) -> OscillatorTypeDistribution:
        duty_cycle = None
        if self.duty_cycle_range is not None:
            duty_cycle = Uniform.from_tuple(self.duty_cycle_range)
        return OscillatorTypeDistribution(self.kind, duty_cycle)


class EffectConfig(BaseModel):
    kind: Literal["distortion", "normalize"]
    probability: float = 1.0
    power_range: Range | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    def type_distribution(self) -> EffectTypeDistribution:
        if self.kind == "distortion":
            if self.power_range is None:
                raise InvalidParametersError("Distortion effects need a power_range.")
            return EffectTypeDistribution.distortion(self.power_range)
        return EffectTypeDistribution.normalize()


class DatasetConfig(BaseModel):
    """JSON-friendly description of a dataset run."""

    sample_rate: int = 44_100
    frequency_range: Range = (50.0, 2000.0)
    frequency_std_dev_range: Range = (0.0, 0.0)
    chords: list[int | str] = Field(default_factory=lambda: [0])
    octaves: OctaveConfig = Field(default_factory=OctaveConfig)
    oscillators: list[OscillatorConfig] = Field(default_factory=list)
    effects: list[EffectConfig] = Field(default_factory=list)
    num_samples: int = 256
    seed: int = 0
    size: int = 1000

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("chords")
    @classmethod
    def _resolve_chords(cls, value: list[int | str]) -> list[int | str]:
        return [chord_id_from_name(chord) if isinstance(chord, str) else chord for chord in value]

    def chord_ids(self) -> list[int]:
        return [int(chord) for chord in self.chords]

    def to_parameters(self) -> DataParameters:
        builder = DataParametersBuilder(
            self.sample_rate,
            self.frequency_range,
            self.frequency_std_dev_range,
            self.chord_ids(),
            self.octaves.to_parameters(),
            self.num_samples,
        ).with_seed_offset(self.seed)
        for oscillator in self.oscillators:
            builder.with_oscillator(
                oscillator.type_distribution(), oscillator.probability, oscillator.amplitude_range
            )
        for effect in self.effects:
            builder.with_effect(effect.type_distribution(), effect.probability)
        return builder.build()


def load_dataset_config(path: str | Path) -> DatasetConfig:
    """Load a JSON dataset config file."""
    source = Path(path)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidConfigError(f"Could not read config file {source}: {exc}") from exc
    match data:
        case dict():
            try:
                config = DatasetConfig.model_validate(data)
            except (ValidationError, InvalidParametersError) as exc:
                raise InvalidConfigError(f"Invalid config file {source}: {exc}") from exc
            _LOGGER.debug("Loaded dataset config from %s", source)
            return config
        case _:
            raise InvalidConfigError("Config file must contain a JSON object.")


def write_dataset_config(path: str | Path, config: DatasetConfig) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(config.model_dump_json(indent=2) + "\n", encoding="utf-8")
    return target


def _all_oscillators(amplitude_range: Range, probability: float) -> list[OscillatorConfig]:
    return [
        OscillatorConfig(kind="sine", probability=probability, amplitude_range=amplitude_range),
        OscillatorConfig(kind="saw", probability=probability, amplitude_range=amplitude_range),
        OscillatorConfig(
            kind="pulse",
            probability=probability,
            amplitude_range=amplitude_range,
            duty_cycle_range=(0.1, 0.9),
        ),
        OscillatorConfig(kind="triangle", probability=probability, amplitude_range=amplitude_range),
        OscillatorConfig(kind="noise", probability=probability, amplitude_range=amplitude_range),
    ]


PRESETS: Mapping[str, DatasetConfig] = MappingProxyType(
    {
        "single-note": DatasetConfig(
            frequency_range=(50.0, 2000.0),
            chords=[0],
            oscillators=_all_oscillators((0.1, 0.2), 1.0),
            effects=[EffectConfig(kind="distortion", power_range=(0.1, 20.0))],
        ),
        "chords": DatasetConfig(
            frequency_range=(50.0, 2000.0),
            frequency_std_dev_range=(0.5, 3.0),
            chords=[1, 2, 3, 4, 5, 6],
            octaves=OctaveConfig(
                add_root_octave_probability=0.5,
                add_other_octave_probability=0.3,
                min_frequency=90.0,
                max_frequency=10_000.0,
            ),
            oscillators=_all_oscillators((0.1, 0.2), 0.5),
            effects=[
                EffectConfig(kind="distortion", probability=0.5, power_range=(0.1, 20.0)),
                EffectConfig(kind="normalize", probability=1.0),
            ],
        ),
    }
)


def preset(name: str) -> DatasetConfig:
    try:
        return PRESETS[name]
    except KeyError as exc:
        raise InvalidConfigError(f"Unknown preset: {name}. Valid: {sorted(PRESETS)}") from exc
