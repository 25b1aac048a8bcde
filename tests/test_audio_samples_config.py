import json
from pathlib import Path

import pytest

from audio_samples.config import (
    PRESETS,
    DatasetConfig,
    EffectConfig,
    OscillatorConfig,
    load_dataset_config,
    preset,
    write_dataset_config,
)
from audio_samples.errors import InvalidConfigError, InvalidParametersError


def test_presets_build_valid_templates() -> None:
    for name in PRESETS:
        parameters = preset(name).to_parameters()
        assert parameters.has_frequency
        assert parameters.amplitude_budget <= 1.0 + 1e-9


def test_unknown_preset() -> None:
    with pytest.raises(InvalidConfigError, match="Unknown preset"):
        preset("orchestra")


def test_chord_names_resolve_to_ids() -> None:
    config = DatasetConfig(
        chords=["major", 6, "Power Chord"],
        oscillators=[OscillatorConfig(kind="sine", amplitude_range=(0.1, 0.5))],
    )
    assert config.chord_ids() == [1, 6, 10]
    assert config.to_parameters().possible_chords == (1, 6, 10)


def test_seed_changes_the_template_offset() -> None:
    base = DatasetConfig(oscillators=[OscillatorConfig(kind="sine", amplitude_range=(0.1, 0.5))])
    reseeded = base.model_copy(update={"seed": 9})
    assert base.to_parameters().generate(0) != reseeded.to_parameters().generate(0)


def test_distortion_requires_power_range() -> None:
    with pytest.raises(InvalidParametersError):
        EffectConfig(kind="distortion").type_distribution()


def test_config_round_trip(tmp_path: Path) -> None:
    path = write_dataset_config(tmp_path / "configs" / "chords.json", preset("chords"))
    assert load_dataset_config(path) == preset("chords")


def test_load_dataset_config_errors(tmp_path: Path) -> None:
    with pytest.raises(InvalidConfigError, match="Could not read"):
        load_dataset_config(tmp_path / "missing.json")

    not_json = tmp_path / "broken.json"
    not_json.write_text("{", encoding="utf-8")
    with pytest.raises(InvalidConfigError, match="Could not read"):
        load_dataset_config(not_json)

    array = tmp_path / "array.json"
    array.write_text("[]", encoding="utf-8")
    with pytest.raises(InvalidConfigError, match="JSON object"):
        load_dataset_config(array)

    unknown = tmp_path / "unknown.json"
    unknown.write_text(json.dumps({"tempo": 120}), encoding="utf-8")
    with pytest.raises(InvalidConfigError, match="Invalid config"):
        load_dataset_config(unknown)

    bad_chord = tmp_path / "chord.json"
    bad_chord.write_text(json.dumps({"chords": ["hexachord"]}), encoding="utf-8")
    with pytest.raises(InvalidConfigError, match="Invalid config"):
        load_dataset_config(bad_chord)
