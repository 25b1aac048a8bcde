import numpy as np
import pytest

from audio_samples.chord import OctaveParameters
from audio_samples.effects import EffectTypeDistribution
from audio_samples.errors import ClippingError, InvalidParametersError
from audio_samples.notes import frequency_to_note_number
from audio_samples.oscillators import (
    OscillatorParameters,
    OscillatorType,
    OscillatorTypeDistribution,
    phase_from_frequencies,
)
from audio_samples.parameters import DataParameters, DataParametersBuilder, DataPointParameters

FULL_RANGE = OctaveParameters(0.0, 0.0, 20.0, 20_000.0)


def _builder(chords: list[int] | None = None) -> DataParametersBuilder:
    return DataParametersBuilder(44_100, (50.0, 2000.0), (0.0, 0.0), chords or [0], FULL_RANGE, 256)


def _sine_template() -> DataParameters:
    return _builder().with_oscillator(OscillatorTypeDistribution.sine(), 1.0, (0.5, 0.7)).build()


def test_amplitude_budget_is_enforced() -> None:
    builder = _builder().with_oscillator(OscillatorTypeDistribution.sine(), 1.0, (0.1, 0.6))
    with pytest.raises(InvalidParametersError, match="must not exceed 1"):
        builder.with_oscillator(OscillatorTypeDistribution.saw(), 1.0, (0.1, 0.6))


def test_five_oscillators_at_point_two_fit_the_budget() -> None:
    builder = _builder()
    for distribution in (
        OscillatorTypeDistribution.sine(),
        OscillatorTypeDistribution.saw(),
        OscillatorTypeDistribution.pulse((0.1, 0.9)),
        OscillatorTypeDistribution.triangle(),
        OscillatorTypeDistribution.noise(),
    ):
        builder.with_oscillator(distribution, 1.0, (0.1, 0.2))
    assert builder.build().amplitude_budget == pytest.approx(1.0)


def test_template_without_pitched_oscillator_is_rejected() -> None:
    builder = _builder().with_oscillator(OscillatorTypeDistribution.noise(), 1.0, (0.1, 0.2))
    with pytest.raises(InvalidParametersError):
        builder.build()
    never = _builder().with_oscillator(OscillatorTypeDistribution.sine(), 0.0, (0.1, 0.2))
    with pytest.raises(InvalidParametersError):
        never.build()


def test_invalid_template_fields() -> None:
    with pytest.raises(InvalidParametersError):
        DataParametersBuilder(44_100, (2000.0, 50.0), (0.0, 0.0), [0], FULL_RANGE, 256)
    with pytest.raises(InvalidParametersError):
        DataParametersBuilder(44_100, (50.0, 2000.0), (0.0, 0.0), [11], FULL_RANGE, 256)
    with pytest.raises(InvalidParametersError):
        DataParametersBuilder(44_100, (50.0, 2000.0), (0.0, 0.0), [], FULL_RANGE, 256)
    with pytest.raises(InvalidParametersError):
        DataParametersBuilder(44_100, (50.0, 2000.0), (0.0, 0.0), [0], FULL_RANGE, 0)


def test_generation_is_deterministic_per_index() -> None:
    template = _sine_template()
    assert template.generate(7) == template.generate(7)
    assert template.generate(7) != template.generate(8)
    reseeded = template.with_seed_offset(1)
    assert reseeded.generate(7) != template.generate(7)
    assert template.with_seed_offset(0).generate(7) == template.generate(7)


def test_generation_order_does_not_matter() -> None:
    template = _sine_template()
    forwards = [template.generate(index) for index in range(5)]
    backwards = [template.generate(index) for index in reversed(range(5))]
    assert forwards == list(reversed(backwards))


def test_single_note_datapoint_parameters() -> None:
    template = _sine_template()
    for index in range(20):
        params = template.generate(index)
        low, high = template.frequency_range
        assert low <= params.base_frequency <= high
        assert params.chord_type == 0
        assert params.frequencies == pytest.approx((params.base_frequency,))
        assert params.note_number == pytest.approx(frequency_to_note_number(params.base_frequency))
        assert len(params.oscillators) == 1
        assert 0.5 <= params.oscillators[0].amplitude <= 0.7


def test_every_datapoint_has_a_pitched_oscillator() -> None:
    template = (
        _builder()
        .with_oscillator(OscillatorTypeDistribution.sine(), 0.1, (0.1, 0.3))
        .with_oscillator(OscillatorTypeDistribution.noise(), 1.0, (0.1, 0.3))
        .build()
    )
    for index in range(50):
        assert template.generate(index).has_frequency


def test_chord_datapoint_renders_within_range() -> None:
    octaves = OctaveParameters(0.5, 0.3, 90.0, 10_000.0)
    template = (
        DataParametersBuilder(44_100, (50.0, 2000.0), (0.5, 3.0), [1, 5], octaves, 512)
        .with_seed_offset(3)
        .with_oscillator(OscillatorTypeDistribution.sine(), 1.0, (0.2, 0.4))
        .with_oscillator(OscillatorTypeDistribution.triangle(), 0.5, (0.2, 0.4))
        .with_effect(EffectTypeDistribution.distortion((0.1, 20.0)), 0.5)
        .with_effect(EffectTypeDistribution.normalize(), 1.0)
        .build()
    )
    for index in range(10):
        params = template.generate(index)
        assert params.chord_type in (1, 5)
        assert all(90.0 <= frequency <= 10_000.0 for frequency in params.frequencies)
        data_point = params.generate()
        assert data_point.audio.num_samples == 512
        assert np.max(np.abs(data_point.audio.samples)) <= 1.0
        assert data_point.label.frequencies == pytest.approx(list(params.frequencies))


def test_normalize_effect_yields_unit_peak() -> None:
    template = (
        _builder()
        .with_oscillator(OscillatorTypeDistribution.saw(), 1.0, (0.1, 0.2))
        .with_effect(EffectTypeDistribution.normalize(), 1.0)
        .build()
    )
    audio = template.generate(0).generate().audio
    assert float(np.max(np.abs(audio.samples))) == pytest.approx(1.0, abs=1e-6)


def test_overdriven_oscillator_reports_clipping_index() -> None:
    params = DataPointParameters(
        sample_rate=44_100,
        base_frequency_map=0.0,
        base_frequency=1000.0,
        frequency_std_dev=0.0,
        frequency_walk_seed=0,
        chord_type=0,
        frequencies=(1000.0,),
        oscillators=(OscillatorParameters(OscillatorType("sine"), 1.5),),
        effects=(),
        num_samples=256,
    )
    phase = phase_from_frequencies(np.full(256, 1000.0), 44_100)
    expected = int(np.flatnonzero(np.abs(1.5 * np.sin(2 * np.pi * phase)) > 1.0)[0])
    with pytest.raises(ClippingError) as excinfo:
        params.generate()
    assert excinfo.value.sample_index == expected


def test_single_note_sine_scenario() -> None:
    template = (
        DataParametersBuilder(44_100, (50.0, 2000.0), (0.0, 0.0), [0], FULL_RANGE, 256)
        .with_seed_offset(0)
        .with_oscillator(OscillatorTypeDistribution.sine(), 1.0, (0.5, 0.7))
        .build()
    )
    data_point = template.generate(0).generate()
    assert data_point.audio.num_samples == 256
    assert data_point.audio.sample_rate == 44_100
    label = data_point.label
    assert label.chord_type == 0
    assert len(label.frequencies) == 1
    assert 50.0 <= label.base_frequency <= 2000.0
    assert float(np.max(np.abs(data_point.audio.samples))) <= 0.7 + 1e-6
    assert template.generate(0).label() == label
