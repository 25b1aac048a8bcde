from __future__ import annotations


class AudioSamplesError(Exception):
    """Base error for the audio_samples library."""


class InvalidParametersError(AudioSamplesError, ValueError):
    """Raised when a parameter space or distribution is invalid."""


class InvalidConfigError(AudioSamplesError):
    """Raised when a dataset config cannot be parsed or validated."""


class ClippingError(AudioSamplesError):
    """Raised when a rendered sample leaves the [-1, 1] range."""

    def __init__(self, sample_index: int) -> None:
        self.sample_index = sample_index
        super().__init__(f"Audio generation failed due to clipping at sample {sample_index}.")


class UnsupportedWavSpecError(AudioSamplesError):
    """Raised when a WAV file is not mono 32-bit float."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        match field:
            case "channels":
                detail = f"Unsupported number of channels {value}. Only mono is supported."
            case "bit_depth":
                detail = f"Unsupported bit depth {value}. Only 32-bit float is supported."
            case _:
                detail = f"Unsupported sample format {value}. Only 32-bit float is supported."
        super().__init__(detail)


class DatasetError(AudioSamplesError):
    """Raised when a dataset directory, labels file, or datapoint is inconsistent."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"{name}: {message}")
