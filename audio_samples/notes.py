"""Conversions between frequencies, MIDI note numbers, and the global frequency map."""

from __future__ import annotations

import math

from .log_uniform import LogUniform

MIN_FREQUENCY = 20.0
MAX_FREQUENCY = 20_000.0
A4_FREQUENCY = 440.0
A4_NOTE_NUMBER = 69.0

FREQUENCY_MAP = LogUniform(MIN_FREQUENCY, MAX_FREQUENCY)


def map_to_frequency(frequency_map: float) -> float:
    return FREQUENCY_MAP.map_to_value(frequency_map)


def frequency_to_map(frequency: float) -> float:
    return FREQUENCY_MAP.value_to_map(frequency)


def note_number_to_frequency(note_number: float) -> float:
    return A4_FREQUENCY * 2.0 ** ((note_number - A4_NOTE_NUMBER) / 12.0)


def frequency_to_note_number(frequency: float) -> float:
    return A4_NOTE_NUMBER + 12.0 * math.log2(frequency / A4_FREQUENCY)


def note_number_to_map(note_number: float) -> float:
    return frequency_to_map(note_number_to_frequency(note_number))


def map_to_note_number(frequency_map: float) -> float:
    return frequency_to_note_number(map_to_frequency(frequency_map))
