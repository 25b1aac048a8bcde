"""Turn a recording of consecutive notes into labeled datapoints.

The recording is expected to hold one note per ``note_length`` seconds,
sweeping ``start_note..end_note`` once per run name. Random windows are cut
from each note, peak-normalized, and labeled with the note's pitch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np

from .audio import Audio
from .data import DataPointLabel, NamedDataPoint
from .effects import normalize
from .errors import InvalidParametersError

_LOGGER = logging.getLogger("audio_samples.prepare")

DEFAULT_RUN_NAMES: tuple[str, ...] = ("loud", "quiet")


def slice_recording(
    audio: Audio,
    *,
    start_note: int = 12,
    end_note: int = 91,
    run_names: Sequence[str] = DEFAULT_RUN_NAMES,
    note_length: float = 1.0,
    data_points_per_note: int = 4,
    data_point_samples: int = 256,
    rng: np.random.Generator | None = None,
) -> Iterator[NamedDataPoint]:
    if end_note < start_note:
        raise InvalidParametersError(f"end_note {end_note} is below start_note {start_note}.")
    if data_point_samples <= 0 or data_points_per_note <= 0:
        raise InvalidParametersError(
            "data_point_samples and data_points_per_note must be positive."
        )
    samples_per_note = int(audio.sample_rate * note_length)
    if samples_per_note <= data_point_samples:
        raise InvalidParametersError(
            f"A note of {samples_per_note} samples cannot hold windows of {data_point_samples}."
        )
    generator = rng if rng is not None else np.random.default_rng()
    samples = audio.samples.astype(np.float64)

    notes = [(run, note) for run in run_names for note in range(start_note, end_note + 1)]
    for chunk_index, (run, note) in enumerate(notes):
        chunk = samples[chunk_index * samples_per_note : (chunk_index + 1) * samples_per_note]
        if len(chunk) <= data_point_samples:
            _LOGGER.warning("Recording ends before %s note %d; stopping.", run, note)
            return
        label = DataPointLabel.from_note_number(note, audio.sample_rate, data_point_samples)
        for sub_index in range(data_points_per_note):
            start = int(generator.integers(len(chunk) - data_point_samples))
            window = normalize(chunk[start : start + data_point_samples])
            yield f"{run}_{note}_{sub_index}", Audio.from_samples(window, audio.sample_rate), label
