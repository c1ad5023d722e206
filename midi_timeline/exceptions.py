"""midi_timeline.exceptions

Custom exception classes for MIDI decoding errors.

Every decode failure is a subclass of MIDIParsingError, so callers that only
care whether a file could be read can catch that one class.
"""


class MIDIProcessingError(Exception):
    """Base exception for all MIDI processing errors."""
    pass


class MIDIParsingError(MIDIProcessingError):
    """Exception raised when MIDI file parsing fails."""
    pass


class InvalidFileError(MIDIParsingError):
    """The buffer does not start with a valid 'MThd' header chunk."""
    pass


class UnsupportedFileError(MIDIParsingError):
    """The file is a recognised MIDI format variant that is not supported.

    Only multi-track (format 1) files can be decoded.
    """

    def __init__(self, message: str, format_code: int = None):
        super().__init__(message)
        self.format_code = format_code


class UnreadableTrackError(MIDIParsingError):
    """A track chunk is malformed (bad 'MTrk' tag or bad payload)."""

    def __init__(self, message: str, track_index: int = None):
        super().__init__(message)
        self.track_index = track_index


class TruncatedError(MIDIParsingError):
    """The buffer ended before a required read completed."""

    def __init__(self, message: str, position: int = None, needed: int = None):
        super().__init__(message)
        self.position = position
        self.needed = needed


class UnrecognizedEventError(MIDIParsingError):
    """An unknown meta subtype or status byte was met in strict mode."""

    def __init__(self, message: str, status: int = None, subtype: int = None):
        super().__init__(message)
        self.status = status
        self.subtype = subtype


class ConfigurationError(MIDIProcessingError):
    """Exception raised when configuration is invalid."""
    pass


class InvalidInputError(MIDIProcessingError):
    """Exception raised when input parameters are invalid."""

    def __init__(self, message: str, parameter_name: str = None, expected: str = None):
        super().__init__(message)
        self.parameter_name = parameter_name
        self.expected = expected
