"""midi_timeline.midi_parser

Decodes Standard MIDI Files (SMF) from raw bytes.

Features:
- Header validation ('MThd', format 1 only)
- Per-track event decoding with running status
- Cross-track timeline reconstruction with tempo changes (played notes with
  absolute start time and duration in microseconds)

This module is the entry point of the package: bytes go in, a MIDIFile comes
out, or one of the MIDIParsingError subclasses is raised.
"""
import logging
from typing import Optional

from .byte_cursor import ByteCursor
from .config import DecoderConfig
from .event_decoder import decode_track
from .exceptions import InvalidFileError, UnsupportedFileError
from .models import Header, MIDIFile, MIDIFormat
from .timeline_generator import MusicTimeline
from .validators import validate_midi_data, validate_midi_file_path

logger = logging.getLogger(__name__)

HEADER_MAGIC = b'MThd'


def parse_header(cursor: ByteCursor) -> Header:
    """Read the 'MThd' chunk at the cursor.

    Args:
        cursor: Cursor positioned at the start of the file.

    Returns:
        The decoded Header.

    Raises:
        InvalidFileError: If the magic is missing or the resolution is 0.
        UnsupportedFileError: If the format is not 1 (multi-track).
        TruncatedError: If the buffer ends inside the header.

    Example:
        >>> header = parse_header(ByteCursor(b'MThd\\x00\\x00\\x00\\x06\\x00\\x01\\x00\\x02\\x01\\xe0'))
        >>> header.tracks, header.ticks_per_quarter_note
        (2, 480)
    """
    if cursor.remaining < len(HEADER_MAGIC) or cursor.read_bytes(len(HEADER_MAGIC)) != HEADER_MAGIC:
        raise InvalidFileError("not a MIDI file: missing 'MThd' header")

    length = cursor.read_uint32()
    format_code = cursor.read_uint16()
    if format_code == MIDIFormat.SINGLE_TRACK.value:
        raise UnsupportedFileError("single-track (format 0) MIDI files are not supported", format_code=format_code)
    if format_code == MIDIFormat.MULTI_SONG.value:
        raise UnsupportedFileError("multi-song (format 2) MIDI files are not supported", format_code=format_code)
    if format_code != MIDIFormat.MULTI_TRACK.value:
        raise UnsupportedFileError(f"unknown MIDI format {format_code}", format_code=format_code)

    tracks = cursor.read_uint16()
    ticks_per_quarter_note = cursor.read_uint16()
    if ticks_per_quarter_note == 0:
        raise InvalidFileError("header declares 0 ticks per quarter note")

    return Header(length=length, format=MIDIFormat.MULTI_TRACK, tracks=tracks,
                  ticks_per_quarter_note=ticks_per_quarter_note)


def decode_midi(data: bytes, config: Optional[DecoderConfig] = None) -> MIDIFile:
    """Decode a MIDI file held in memory.

    Args:
        data: The complete file contents.
        config: Decoder settings; defaults to strict mode and 120 BPM.

    Returns:
        A loaded MIDIFile: header, tracks with their events and played
        notes, the starting tempo and the tempo-change history.

    Raises:
        MIDIParsingError: One of InvalidFileError, UnsupportedFileError,
            UnreadableTrackError, TruncatedError or UnrecognizedEventError.
            Nothing is returned for a file that fails part-way.

    Example:
        >>> with open('song.mid', 'rb') as f:
        ...     midi = decode_midi(f.read())
        >>> [(pn.time, pn.note.name, pn.length_type.value) for pn in midi.tracks[1].notes][:2]
        [(0, 'C5', 'quarter'), (500000, 'E5', 'quarter')]
    """
    validate_midi_data(data)
    config = config or DecoderConfig()
    data = bytes(data)
    cursor = ByteCursor(data)

    header = parse_header(cursor)
    logger.debug("header: format=%s tracks=%d tpq=%d", header.format.name, header.tracks,
                 header.ticks_per_quarter_note)
    midi = MIDIFile(header=header, tempo=config.default_tempo, data=data)

    for index in range(header.tracks):
        midi.tracks.append(decode_track(cursor, index, config))

    timeline = MusicTimeline(header.ticks_per_quarter_note, default_tempo=config.default_tempo)
    result = timeline.reconstruct(midi.tracks)
    midi.tempo = result.starting_tempo
    midi.tempo_changes = result.tempo_changes
    midi.loaded = True

    logger.info("decoded %d tracks, %d notes, %d tempo changes", len(midi.tracks),
                sum(len(t.notes) for t in midi.tracks), len(midi.tempo_changes))
    return midi


def parse_midi(path: str, config: Optional[DecoderConfig] = None) -> MIDIFile:
    """Read a MIDI file from disk and decode it.

    Raises:
        ValidationError: If the path does not point to a file.
        MIDIParsingError: If decoding fails (see decode_midi).
    """
    validate_midi_file_path(path)
    with open(path, 'rb') as f:
        data = f.read()
    logger.debug("read %d bytes from %s", len(data), path)
    return decode_midi(data, config)


class MIDIDecoder:
    """Class-based API holding one decoder configuration.

    Example:
        >>> decoder = MIDIDecoder(DecoderConfig(strict=False))
        >>> midi = decoder.decode_file('song.mid')
        >>> for track in midi.tracks:
        ...     print(f"Track {track.index}: {track.name} ({len(track.notes)} notes)")
    """

    def __init__(self, config: Optional[DecoderConfig] = None):
        self.config = config or DecoderConfig()

    def decode(self, data: bytes) -> MIDIFile:
        return decode_midi(data, self.config)

    def decode_file(self, file_path: str) -> MIDIFile:
        return parse_midi(file_path, self.config)
