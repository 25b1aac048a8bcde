from __future__ import annotations

from .audio import SAMPLE_RATE, Audio
from .chord import CHORD_TYPES, ChordType, OctaveParameters, chord_id_from_name, chord_type
from .config import DatasetConfig, load_dataset_config, preset
from .data import (
    DataGenerator,
    DataPoint,
    DataPointLabel,
    generate_dataset,
    load_dataset,
    write_dataset,
)
from .effects import EffectTypeDistribution
from .errors import (
    AudioSamplesError,
    ClippingError,
    DatasetError,
    InvalidConfigError,
    InvalidParametersError,
    UnsupportedWavSpecError,
)
from .log_uniform import LogUniform, Uniform
from .notes import frequency_to_map, map_to_frequency, note_number_to_frequency
from .oscillators import OscillatorTypeDistribution
from .parameters import DataParameters, DataParametersBuilder, DataPointParameters

__all__ = [
    "SAMPLE_RATE",
    "Audio",
    "AudioSamplesError",
    "CHORD_TYPES",
    "ChordType",
    "ClippingError",
    "DataGenerator",
    "DataParameters",
    "DataParametersBuilder",
    "DataPoint",
    "DataPointLabel",
    "DataPointParameters",
    "DatasetConfig",
    "DatasetError",
    "EffectTypeDistribution",
    "InvalidConfigError",
    "InvalidParametersError",
    "LogUniform",
    "OctaveParameters",
    "OscillatorTypeDistribution",
    "Uniform",
    "UnsupportedWavSpecError",
    "chord_id_from_name",
    "chord_type",
    "frequency_to_map",
    "generate_dataset",
    "load_dataset",
    "load_dataset_config",
    "map_to_frequency",
    "note_number_to_frequency",
    "preset",
    "write_dataset",
]

__version__ = "0.1.0"
