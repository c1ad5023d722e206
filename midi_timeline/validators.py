"""midi_timeline.validators

Input validation functions for MIDI decoding.
"""
import os


class ValidationError(Exception):
    """Exception raised when validation fails."""
    pass


def validate_midi_file_path(path: str) -> None:
    """Validate MIDI file path exists and is readable.

    Args:
        path: Path to MIDI file

    Raises:
        ValidationError: If path is invalid or file doesn't exist
    """
    if not isinstance(path, (str, os.PathLike)):
        raise ValidationError(f"path must be a string, got {type(path).__name__}")
    if not str(path):
        raise ValidationError("path cannot be empty")
    if not os.path.exists(path):
        raise ValidationError(f"MIDI file not found: {path}")
    if not os.path.isfile(path):
        raise ValidationError(f"path is not a file: {path}")


def validate_midi_data(data) -> None:
    """Validate that the decoder input is a byte buffer.

    Raises:
        ValidationError: If data is not bytes-like
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValidationError(f"data must be bytes, got {type(data).__name__}")


def validate_ticks_per_quarter_note(ticks: int) -> None:
    """Validate the header resolution.

    Args:
        ticks: Ticks per quarter note

    Raises:
        ValidationError: If value is invalid
    """
    if not isinstance(ticks, int) or isinstance(ticks, bool):
        raise ValidationError(f"ticks_per_quarter_note must be an integer, got {type(ticks).__name__}")
    if ticks <= 0:
        raise ValidationError(f"ticks_per_quarter_note must be positive, got {ticks}")


def validate_tempo(tempo: int) -> None:
    """Validate tempo value (microseconds per quarter note).

    Args:
        tempo: Tempo in microseconds per quarter note

    Raises:
        ValidationError: If tempo is invalid
    """
    if not isinstance(tempo, int) or isinstance(tempo, bool):
        raise ValidationError(f"tempo must be an integer, got {type(tempo).__name__}")
    if tempo <= 0:
        raise ValidationError(f"tempo must be positive, got {tempo}")


def validate_config_path(config_path: str) -> None:
    """Validate configuration file path.

    Args:
        config_path: Path to configuration file

    Raises:
        ValidationError: If path is invalid
    """
    if not isinstance(config_path, (str, os.PathLike)):
        raise ValidationError(f"config_path must be a string, got {type(config_path).__name__}")
    if not str(config_path):
        raise ValidationError("config_path cannot be empty")


def validate_export_format(format: str) -> None:
    """Validate an export format name.

    Raises:
        ValidationError: If format is not a string
    """
    if not isinstance(format, str):
        raise ValidationError(f"format must be a string, got {type(format).__name__}")
