"""midi_timeline.models

Data classes for a decoded MIDI file: header, tracks, events, played notes
and tempo changes.

Events form a closed set of variants (MetaEvent, ChannelVoiceEvent,
SysExEvent, UnknownEvent). All of them carry ``delta``, the number of ticks
since the previous event in the same track.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

import mido

from .pitch import Note

DEFAULT_TEMPO = 500000


class MIDIFormat(Enum):
    SINGLE_TRACK = 0
    MULTI_TRACK = 1
    MULTI_SONG = 2


class MetaType(Enum):
    SEQUENCE_NUMBER = 'sequence_number'
    TEXT = 'text'
    TRACK_NAME = 'track_name'
    INSTRUMENT_NAME = 'instrument_name'
    LYRIC = 'lyric'
    MARKER = 'marker'
    CUE_POINT = 'cue_point'
    END_OF_TRACK = 'end_of_track'
    TEMPO = 'tempo'
    TIME_SIGNATURE = 'time_signature'
    KEY_SIGNATURE = 'key_signature'
    SEQUENCER_SPECIFIC = 'sequencer_specific'
    TIMING_CLOCK = 'timing_clock'
    START_SEQUENCE = 'start_sequence'
    CONTINUE_SEQUENCE = 'continue_sequence'
    STOP_SEQUENCE = 'stop_sequence'


class ChannelVoiceKind(Enum):
    """Channel voice message kinds, valued by their status high nibble."""

    NOTE_OFF = 0x8
    NOTE_ON = 0x9
    KEY_AFTER_TOUCH = 0xA
    CONTROL_CHANGE = 0xB
    PATCH_CHANGE = 0xC
    CHANNEL_AFTER_TOUCH = 0xD
    PITCH_WHEEL_CHANGE = 0xE

    @property
    def has_note(self) -> bool:
        return self in (ChannelVoiceKind.NOTE_OFF, ChannelVoiceKind.NOTE_ON,
                        ChannelVoiceKind.KEY_AFTER_TOUCH)


class NoteLength(Enum):
    DOUBLE_WHOLE = 'double_whole'
    WHOLE = 'whole'
    HALF = 'half'
    QUARTER = 'quarter'
    EIGHTH = 'eighth'
    SIXTEENTH = 'sixteenth'
    THIRTY_SECOND = 'thirty_second'
    SIXTY_FOURTH = 'sixty_fourth'
    HUNDRED_TWENTY_EIGHTH = 'hundred_twenty_eighth'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class Header:
    """The 'MThd' chunk.

    Attributes:
        length: Header length field, excluding the tag and the length itself.
        format: File format; only MULTI_TRACK survives decoding.
        tracks: Declared number of track chunks.
        ticks_per_quarter_note: Delta-time resolution.
    """

    length: int
    format: MIDIFormat
    tracks: int
    ticks_per_quarter_note: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'length': self.length,
            'format': self.format.name,
            'tracks': self.tracks,
            'ticks_per_quarter_note': self.ticks_per_quarter_note,
        }


@dataclass(frozen=True)
class MetaEvent:
    category: ClassVar[str] = 'meta'

    delta: int
    meta_type: MetaType
    data: bytes = b''

    @property
    def tempo(self) -> Optional[int]:
        """Microseconds per quarter note, for TEMPO events."""
        if self.meta_type is not MetaType.TEMPO:
            return None
        return int.from_bytes(self.data[:3], byteorder='big')

    @property
    def text(self) -> Optional[str]:
        if self.meta_type not in (MetaType.TEXT, MetaType.TRACK_NAME, MetaType.INSTRUMENT_NAME,
                                  MetaType.LYRIC, MetaType.MARKER, MetaType.CUE_POINT):
            return None
        return self.data.decode('latin-1')

    def to_dict(self) -> Dict[str, Any]:
        out = {'type': self.category, 'delta': self.delta, 'meta_type': self.meta_type.value,
               'data': self.data.hex()}
        if self.text is not None:
            out['text'] = self.text
        if self.tempo is not None:
            out['tempo'] = self.tempo
        return out


@dataclass(frozen=True)
class ChannelVoiceEvent:
    """A channel voice message.

    ``note`` is set for note off/on and key after-touch (where the velocity
    field holds the pressure). ``controller`` is only set for control
    changes. ``value`` holds the controller value, the patch, the channel
    pressure or the pitch wheel amount.
    """

    category: ClassVar[str] = 'channel_voice'

    delta: int
    kind: ChannelVoiceKind
    channel: int
    note: Optional[Note] = None
    controller: Optional[int] = None
    value: Optional[int] = None

    @property
    def note_number(self) -> int:
        return self.note.number if self.note is not None else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.category,
            'delta': self.delta,
            'kind': self.kind.name,
            'channel': self.channel,
            'note': self.note.to_dict() if self.note is not None else None,
            'controller': self.controller,
            'value': self.value,
        }


@dataclass(frozen=True)
class SysExEvent:
    category: ClassVar[str] = 'sysex'

    delta: int
    data: bytes = b''

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.category, 'delta': self.delta, 'data': self.data.hex()}


@dataclass(frozen=True)
class UnknownEvent:
    """An event skipped in lenient mode (or an always-tolerated meta subtype)."""

    category: ClassVar[str] = 'unknown'

    delta: int
    status: int
    subtype: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.category, 'delta': self.delta, 'status': self.status,
                'subtype': self.subtype}


Event = Union[MetaEvent, ChannelVoiceEvent, SysExEvent, UnknownEvent]


@dataclass(frozen=True)
class PlayedNote:
    """A matched note on/off pair. Times are microseconds from song start."""

    note: Note
    time: int
    length: int
    length_type: NoteLength
    channel: int = 0

    @property
    def end(self) -> int:
        return self.time + self.length

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'length': self.length,
            'length_type': self.length_type.value,
            'channel': self.channel,
            **self.note.to_dict(),
        }


@dataclass(frozen=True)
class TempoChange:
    """Tempos are microseconds per quarter note, ``time`` is microseconds."""

    old_tempo: int
    new_tempo: int
    time: int

    @property
    def old_bpm(self) -> float:
        return mido.tempo2bpm(self.old_tempo)

    @property
    def bpm(self) -> float:
        return mido.tempo2bpm(self.new_tempo)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'old_tempo': self.old_tempo,
            'new_tempo': self.new_tempo,
            'bpm': round(self.bpm, 3),
        }


@dataclass
class Track:
    """One 'MTrk' chunk and everything derived from it."""

    index: int
    length: int
    data: bytes
    events: List[Event] = field(default_factory=list)
    name: Optional[str] = None
    number: int = 0
    notes: List[PlayedNote] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'name': self.name,
            'number': self.number,
            'length': self.length,
            'events': [ev.to_dict() for ev in self.events],
            'notes': [pn.to_dict() for pn in self.notes],
        }


@dataclass
class MIDIFile:
    """Container for a decoded MIDI file.

    ``tempo`` is the tempo the song starts with; it is replaced when a track
    sets the tempo before any time has passed in it. ``loaded`` becomes True
    only once decoding and timeline reconstruction have both finished.
    """

    header: Header
    tracks: List[Track] = field(default_factory=list)
    tempo: int = DEFAULT_TEMPO
    tempo_changes: List[TempoChange] = field(default_factory=list)
    data: bytes = b''
    loaded: bool = False

    @property
    def file_length(self) -> int:
        return len(self.data)

    @property
    def duration(self) -> int:
        """End time of the last played note, in microseconds."""
        return max((pn.end for track in self.tracks for pn in track.notes), default=0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the decoded file to plain Python types.

        Returns:
            Dictionary representation suitable for JSON/YAML export
        """
        return {
            'header': self.header.to_dict(),
            'tempo': self.tempo,
            'tempo_changes': [tc.to_dict() for tc in self.tempo_changes],
            'tracks': [track.to_dict() for track in self.tracks],
        }
