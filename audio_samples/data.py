from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from . import notes
from .audio import Audio
from .chord import CHORD_TYPES
from .errors import DatasetError, UnsupportedWavSpecError
from .oscillators import frequency_walk, phase_from_frequencies
from .parameters import DataParameters, DataPointParameters

_LOGGER = logging.getLogger("audio_samples.data")

FloatArray: TypeAlias = NDArray[np.float64]
LABELS_FILE_NAME = "labels.json"


class DataPointLabel(BaseModel):
    """Published ground truth for one datapoint."""

    sample_rate: int
    base_frequency_map: float
    base_frequency: float
    frequencies: list[float]
    note_number: float
    chord_type: int = 0
    num_samples: int

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_parameters(cls, params: DataPointParameters) -> "DataPointLabel":
        return cls(
            sample_rate=params.sample_rate,
            base_frequency_map=params.base_frequency_map,
            base_frequency=params.base_frequency,
            frequencies=list(params.frequencies),
            note_number=params.note_number,
            chord_type=params.chord_type,
            num_samples=params.num_samples,
        )

    @classmethod
    def from_note_number(
        cls, note_number: float, sample_rate: int, num_samples: int
    ) -> "DataPointLabel":
        base_frequency_map = notes.note_number_to_map(note_number)
        base_frequency = notes.map_to_frequency(base_frequency_map)
        return cls(
            sample_rate=sample_rate,
            base_frequency_map=base_frequency_map,
            base_frequency=base_frequency,
            frequencies=[base_frequency],
            note_number=float(note_number),
            num_samples=num_samples,
        )


NamedDataPoint: TypeAlias = tuple[str, Audio, DataPointLabel]

_LABELS_ADAPTER: TypeAdapter[dict[str, DataPointLabel]] = TypeAdapter(dict[str, DataPointLabel])


def render_buffer(params: DataPointParameters) -> FloatArray:
    """Sum every oscillator at every sounding frequency, scale by the chord size, apply effects.

    Octave copies are not counted in the scale, so heavy doubling can exceed full
    scale unless an effect such as normalize brings it back.
    """
    buffer = np.zeros(params.num_samples, dtype=np.float64)
    walk_rng = np.random.default_rng(params.frequency_walk_seed)
    for frequency in params.frequencies:
        instantaneous = frequency_walk(
            walk_rng, frequency, params.frequency_std_dev, params.num_samples
        )
        phase = phase_from_frequencies(instantaneous, params.sample_rate)
        for oscillator in params.oscillators:
            buffer += oscillator.render(phase)
    buffer /= CHORD_TYPES[params.chord_type].num_notes

    signal_amplitude = params.signal_amplitude
    for effect in params.effects:
        effect.apply_to_buffer(buffer, signal_amplitude)
    return buffer


@dataclass(frozen=True, slots=True)
class DataPoint:
    audio: Audio
    parameters: DataPointParameters

    @classmethod
    def render(cls, params: DataPointParameters) -> "DataPoint":
        audio = Audio.from_buffer(render_buffer(params), params.sample_rate)
        return cls(audio=audio, parameters=params)

    @property
    def label(self) -> DataPointLabel:
        return DataPointLabel.from_parameters(self.parameters)


class DataGenerator:
    """Endless iterator over consecutive datapoint indices of a template."""

    def __init__(self, data_parameters: DataParameters, start: int = 0) -> None:
        self._data_parameters = data_parameters
        self.data_point_num = start

    def __iter__(self) -> "DataGenerator":
        return self

    def __next__(self) -> DataPoint:
        data_point = self._data_parameters.generate(self.data_point_num).generate()
        self.data_point_num += 1
        return data_point


def datapoint_name(index: int, prefix: str = "") -> str:
    return f"{prefix}{index}"


def generate_dataset(
    data_parameters: DataParameters,
    count: int,
    *,
    start: int = 0,
    prefix: str = "",
) -> Iterator[NamedDataPoint]:
    for index in range(start, start + count):
        data_point = data_parameters.generate(index).generate()
        yield datapoint_name(index, prefix), data_point.audio, data_point.label


def write_labels(path: str | Path, labels: Mapping[str, DataPointLabel]) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(_LABELS_ADAPTER.dump_json(dict(labels), indent=2) + b"\n")
    return target


def read_labels(path: str | Path) -> dict[str, DataPointLabel]:
    source = Path(path)
    if not source.is_file():
        raise DatasetError(str(source), "labels file not found")
    try:
        return _LABELS_ADAPTER.validate_json(source.read_bytes())
    except ValidationError as exc:
        raise DatasetError(str(source), f"malformed labels file: {exc}") from exc


def write_dataset(
    directory: str | Path, datapoints: Iterable[NamedDataPoint]
) -> dict[str, DataPointLabel]:
    """Write one WAV file per datapoint plus the labels document."""
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)
    labels: dict[str, DataPointLabel] = {}
    for name, audio, label in datapoints:
        if name in labels:
            raise DatasetError(name, "duplicate datapoint name")
        audio.to_wav(target / f"{name}.wav")
        labels[name] = label
    write_labels(target / LABELS_FILE_NAME, labels)
    _LOGGER.info("Wrote %d datapoints to %s", len(labels), target)
    return labels


def load_dataset(directory: str | Path) -> Iterator[NamedDataPoint]:
    """Yield every datapoint of a dataset directory, checking audio against labels."""
    source = Path(directory)
    labels = read_labels(source / LABELS_FILE_NAME)
    for name, label in labels.items():
        wav_path = source / f"{name}.wav"
        if not wav_path.is_file():
            raise DatasetError(name, f"missing audio file {wav_path}")
        try:
            audio = Audio.from_wav(wav_path)
        except UnsupportedWavSpecError as exc:
            raise DatasetError(name, str(exc)) from exc
        except (sf.LibsndfileError, OSError) as exc:
            raise DatasetError(name, f"unreadable audio file {wav_path}: {exc}") from exc
        if audio.sample_rate != label.sample_rate:
            raise DatasetError(
                name,
                f"sample rate mismatch: label {label.sample_rate}, audio {audio.sample_rate}",
            )
        if audio.num_samples != label.num_samples:
            raise DatasetError(
                name,
                f"sample count mismatch: label {label.num_samples}, audio {audio.num_samples}",
            )
        yield name, audio, label
