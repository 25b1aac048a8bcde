from __future__ import annotations

import csv
import logging
from collections.abc import Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, model_validator

from .errors import ClippingError, UnsupportedWavSpecError

_LOGGER = logging.getLogger("audio_samples.audio")

FloatArray = NDArray[np.float32]
AudioNumbers = NDArray[np.floating[Any]] | Sequence[float] | FloatArray

SAMPLE_RATE = 44_100
_SUPPORTED_BIT_DEPTH = 32
_SUPPORTED_FORMAT = "float"

# soundfile subtype -> (bits per sample, sample format)
_WAV_SUBTYPES: Mapping[str, tuple[int, str]] = MappingProxyType(
    {
        "FLOAT": (32, "float"),
        "DOUBLE": (64, "float"),
        "PCM_U8": (8, "int"),
        "PCM_S8": (8, "int"),
        "PCM_16": (16, "int"),
        "PCM_24": (24, "int"),
        "PCM_32": (32, "int"),
    }
)


def first_clipping_index(buffer: AudioNumbers) -> int | None:
    """Index of the first sample whose magnitude exceeds 1, if any."""
    over = np.flatnonzero(np.abs(np.asarray(buffer, dtype=np.float64)) > 1.0)
    if over.size == 0:
        return None
    return int(over[0])


class Audio(BaseModel):
    """Mono sample buffer with its sample rate."""

    samples: FloatArray
    sample_rate: int = SAMPLE_RATE

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    @model_validator(mode="after")
    def _contract(self) -> "Audio":
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        mono = np.asarray(self.samples, dtype=np.float32).reshape(-1)
        mono.setflags(write=False)
        object.__setattr__(self, "samples", mono)
        return self

    @classmethod
    def from_samples(cls, samples: AudioNumbers, sample_rate: int = SAMPLE_RATE) -> "Audio":
        return cls(samples=np.asarray(samples, dtype=np.float32), sample_rate=sample_rate)

    @classmethod
    def from_buffer(cls, buffer: AudioNumbers, sample_rate: int = SAMPLE_RATE) -> "Audio":
        """Build audio from a rendered buffer, refusing to clamp out-of-range samples."""
        index = first_clipping_index(buffer)
        if index is not None:
            raise ClippingError(index)
        return cls.from_samples(buffer, sample_rate)

    @classmethod
    def from_spectrum(
        cls, spectrum: NDArray[np.complexfloating[Any, Any]], sample_rate: int
    ) -> "Audio":
        # numpy's inverse FFT already divides by the buffer length.
        samples = np.fft.ifft(np.asarray(spectrum)).real
        return cls.from_samples(samples, sample_rate)

    @property
    def num_samples(self) -> int:
        return int(self.samples.size)

    @property
    def duration(self) -> float:
        return self.num_samples / self.sample_rate

    def fft(self) -> NDArray[np.complex128]:
        return np.fft.fft(self.samples.astype(np.float64))

    def low_pass(self, cutoff_freq: float) -> "Audio":
        from .effects import low_pass

        return low_pass(self, cutoff_freq)

    def to_wav(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        sf.write(target, self.samples, self.sample_rate, subtype="FLOAT")  # type: ignore[reportUnknownMemberType]
        return target

    @classmethod
    def from_wav(cls, path: str | Path) -> "Audio":
        """Load a mono 32-bit float WAV file; any other layout is rejected."""
        source = Path(path)
        info = sf.info(source)  # type: ignore[reportUnknownMemberType]
        channels = int(info.channels)
        if channels != 1:
            raise UnsupportedWavSpecError("channels", channels)
        bit_depth, sample_format = _WAV_SUBTYPES.get(str(info.subtype), (0, str(info.subtype)))
        if sample_format in ("float", "int") and bit_depth != _SUPPORTED_BIT_DEPTH:
            raise UnsupportedWavSpecError("bit_depth", bit_depth)
        if sample_format != _SUPPORTED_FORMAT:
            raise UnsupportedWavSpecError("sample_format", sample_format)
        samples, sample_rate = sf.read(source, dtype="float32", always_2d=False)  # type: ignore[reportUnknownMemberType]
        _LOGGER.debug("Loaded %s (%d samples at %d Hz)", source, len(samples), sample_rate)
        return cls.from_samples(samples, int(sample_rate))

    def to_csv(self, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(["Index", "Sample"])
            for index, sample in enumerate(self.samples.tolist()):
                writer.writerow([index, sample])
        return target
