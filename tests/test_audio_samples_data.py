import json
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf  # type: ignore[import]

from audio_samples.chord import CHORD_TYPES, OctaveParameters
from audio_samples.data import (
    LABELS_FILE_NAME,
    DataGenerator,
    DataPointLabel,
    generate_dataset,
    load_dataset,
    read_labels,
    render_buffer,
    write_dataset,
)
from audio_samples.effects import EffectParameters
from audio_samples.errors import ClippingError, DatasetError
from audio_samples.oscillators import (
    OscillatorParameters,
    OscillatorType,
    OscillatorTypeDistribution,
    frequency_walk,
    phase_from_frequencies,
)
from audio_samples.parameters import DataParameters, DataParametersBuilder, DataPointParameters


def _template() -> DataParameters:
    return (
        DataParametersBuilder(
            8000, (100.0, 1000.0), (0.0, 0.0), [0, 1], OctaveParameters(0.0, 0.0, 20.0, 4000.0), 64
        )
        .with_oscillator(OscillatorTypeDistribution.sine(), 1.0, (0.3, 0.5))
        .build()
    )


def test_data_generator_counts_indices() -> None:
    template = _template()
    generator = DataGenerator(template, start=5)
    first = next(generator)
    assert generator.data_point_num == 6
    assert first.parameters == template.generate(5)


def test_generate_dataset_names_and_labels() -> None:
    datapoints = list(generate_dataset(_template(), 3, start=10, prefix="train_"))
    assert [name for name, _, _ in datapoints] == ["train_10", "train_11", "train_12"]
    for _, audio, label in datapoints:
        assert audio.sample_rate == label.sample_rate == 8000
        assert audio.num_samples == label.num_samples == 64
        assert label.chord_type in (0, 1)


def test_label_from_note_number() -> None:
    label = DataPointLabel.from_note_number(69, 44_100, 256)
    assert label.base_frequency == pytest.approx(440.0)
    assert label.frequencies == pytest.approx([440.0])
    assert label.chord_type == 0


def test_write_and_load_dataset(tmp_path: Path) -> None:
    written = write_dataset(tmp_path, generate_dataset(_template(), 4))
    assert sorted(path.name for path in tmp_path.glob("*.wav")) == [
        "0.wav",
        "1.wav",
        "2.wav",
        "3.wav",
    ]
    document = json.loads((tmp_path / LABELS_FILE_NAME).read_text(encoding="utf-8"))
    assert set(document) == {"0", "1", "2", "3"}
    assert read_labels(tmp_path / LABELS_FILE_NAME) == written

    loaded = list(load_dataset(tmp_path))
    assert [name for name, _, _ in loaded] == ["0", "1", "2", "3"]
    regenerated = list(generate_dataset(_template(), 4))
    for (_, audio, label), (_, expected_audio, expected_label) in zip(loaded, regenerated):
        assert label == expected_label
        assert np.array_equal(audio.samples, expected_audio.samples)


def test_write_dataset_rejects_duplicate_names(tmp_path: Path) -> None:
    name, audio, label = next(generate_dataset(_template(), 1))
    with pytest.raises(DatasetError, match="duplicate"):
        write_dataset(tmp_path, [(name, audio, label), (name, audio, label)])


def test_load_dataset_missing_labels(tmp_path: Path) -> None:
    with pytest.raises(DatasetError, match="labels file not found"):
        list(load_dataset(tmp_path))


def test_load_dataset_malformed_labels(tmp_path: Path) -> None:
    (tmp_path / LABELS_FILE_NAME).write_text('{"0": {"sample_rate": "fast"}}', encoding="utf-8")
    with pytest.raises(DatasetError, match="malformed"):
        read_labels(tmp_path / LABELS_FILE_NAME)


def test_load_dataset_missing_audio(tmp_path: Path) -> None:
    write_dataset(tmp_path, generate_dataset(_template(), 2))
    (tmp_path / "1.wav").unlink()
    with pytest.raises(DatasetError) as excinfo:
        list(load_dataset(tmp_path))
    assert excinfo.value.name == "1"


def test_load_dataset_sample_count_mismatch(tmp_path: Path) -> None:
    write_dataset(tmp_path, generate_dataset(_template(), 1))
    sf.write(tmp_path / "0.wav", np.zeros(10, dtype=np.float32), 8000, subtype="FLOAT")
    with pytest.raises(DatasetError, match="sample count mismatch"):
        list(load_dataset(tmp_path))


def test_load_dataset_sample_rate_mismatch(tmp_path: Path) -> None:
    write_dataset(tmp_path, generate_dataset(_template(), 1))
    sf.write(tmp_path / "0.wav", np.zeros(64, dtype=np.float32), 16_000, subtype="FLOAT")
    with pytest.raises(DatasetError, match="sample rate mismatch"):
        list(load_dataset(tmp_path))


def test_load_dataset_wraps_unsupported_wav(tmp_path: Path) -> None:
    write_dataset(tmp_path, generate_dataset(_template(), 1))
    sf.write(tmp_path / "0.wav", np.zeros(64, dtype=np.float32), 8000, subtype="PCM_16")
    with pytest.raises(DatasetError, match="bit depth"):
        list(load_dataset(tmp_path))


def test_load_dataset_wraps_unreadable_wav(tmp_path: Path) -> None:
    write_dataset(tmp_path, generate_dataset(_template(), 1))
    (tmp_path / "0.wav").write_bytes(b"not a wav file at all")
    with pytest.raises(DatasetError, match="unreadable audio file") as excinfo:
        list(load_dataset(tmp_path))
    assert excinfo.value.name == "0"


def _octave_sine_params(
    frequencies: tuple[float, ...], amplitude: float, effects: tuple[EffectParameters, ...] = ()
) -> DataPointParameters:
    return DataPointParameters(
        sample_rate=44_100,
        base_frequency_map=0.0,
        base_frequency=frequencies[0],
        frequency_std_dev=0.0,
        frequency_walk_seed=0,
        chord_type=0,
        frequencies=frequencies,
        oscillators=(OscillatorParameters(OscillatorType("sine"), amplitude),),
        effects=effects,
        num_samples=256,
    )


def test_octave_copies_are_scaled_by_chord_size() -> None:
    template = (
        DataParametersBuilder(
            44_100, (50.0, 2000.0), (0.0, 0.0), [0], OctaveParameters(1.0, 0.0, 20.0, 20_000.0), 256
        )
        .with_oscillator(OscillatorTypeDistribution.sine(), 1.0, (0.05, 0.05))
        .build()
    )
    params = template.generate(0)
    num_notes = CHORD_TYPES[params.chord_type].num_notes
    assert num_notes == 1
    assert len(params.frequencies) > num_notes

    walk_rng = np.random.default_rng(params.frequency_walk_seed)
    expected = np.zeros(params.num_samples)
    for frequency in params.frequencies:
        walk = frequency_walk(walk_rng, frequency, params.frequency_std_dev, params.num_samples)
        expected += params.oscillators[0].render(phase_from_frequencies(walk, 44_100))
    expected /= num_notes

    assert np.allclose(render_buffer(params), expected)


def test_doubled_octaves_can_clip_without_normalize() -> None:
    params = _octave_sine_params((220.0, 440.0), 0.9)
    with pytest.raises(ClippingError):
        params.generate()

    rescued = _octave_sine_params((220.0, 440.0), 0.9, (EffectParameters("normalize"),))
    peak = float(np.max(np.abs(rescued.generate().audio.samples)))
    assert peak == pytest.approx(1.0, abs=1e-6)
