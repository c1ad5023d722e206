"""midi_timeline.event_decoder

Decodes the events of one 'MTrk' chunk.

Each event is a delta-time (variable-length quantity) followed by a status
byte and a payload whose shape depends on the status:

- 0xFF: meta event, subtype byte then (mostly) a 1-byte length and data
- 0x80-0xEF: channel voice message, channel in the low nibble
- 0xF0-0xFE: system exclusive, 1-byte length and opaque data

A status byte with the high bit clear is really the first data byte of an
event that reuses the previous status ("running status"). That byte is fed
back into the payload decoding in place of the first byte that would
otherwise be read. Replaying any 0xFn status, 0xFF included, reads a
system exclusive event whose length is the fed-back byte.
"""
import logging
from typing import List, Optional

from .byte_cursor import ByteCursor
from .config import DecoderConfig
from .exceptions import UnreadableTrackError, UnrecognizedEventError, TruncatedError
from .models import (
    ChannelVoiceEvent, ChannelVoiceKind, Event, MetaEvent, MetaType, SysExEvent, Track, UnknownEvent,
)
from .pitch import make_note

logger = logging.getLogger(__name__)

TRACK_MAGIC = b'MTrk'

META_STATUS = 0xFF
END_OF_TRACK = 0x2F

# subtypes read as "1-byte length, then data"
META_TYPES = {
    0x00: MetaType.SEQUENCE_NUMBER,
    0x01: MetaType.TEXT,
    0x02: MetaType.TEXT,  # copyright notice
    0x03: MetaType.TRACK_NAME,
    0x04: MetaType.INSTRUMENT_NAME,
    0x05: MetaType.LYRIC,
    0x06: MetaType.MARKER,
    0x07: MetaType.CUE_POINT,
    0x51: MetaType.TEMPO,
    0x58: MetaType.TIME_SIGNATURE,
    0x59: MetaType.KEY_SIGNATURE,
    0x7F: MetaType.SEQUENCER_SPECIFIC,
}

PAYLOADLESS_META_TYPES = {
    0xF8: MetaType.TIMING_CLOCK,
    0xFA: MetaType.START_SEQUENCE,
    0xFB: MetaType.CONTINUE_SEQUENCE,
    0xFC: MetaType.STOP_SEQUENCE,
}

# skipped even in strict mode (MIDI port / SMPTE offset in most files)
TOLERATED_META_SUBTYPES = frozenset({0x21, 0x48})


class EventDecoder:
    """Stateful decoder for the event stream of a single track.

    Args:
        data: The track chunk payload (without the 'MTrk' header).
        strict: Raise UnrecognizedEventError on unknown meta subtypes
            instead of skipping them.
        track_index: Used in error messages only.
    """

    def __init__(self, data: bytes, strict: bool = True, track_index: int = 0):
        self.cursor = ByteCursor(data)
        self.strict = strict
        self.track_index = track_index
        self.running_status: Optional[int] = None

    def decode(self) -> List[Event]:
        """Decode events up to and including End-Of-Track.

        Raises:
            TruncatedError: If the data runs out before End-Of-Track.
            UnrecognizedEventError: On unknown events in strict mode, or a
                data byte with no running status to apply it to.
        """
        events: List[Event] = []
        while True:
            if self.cursor.at_end:
                raise TruncatedError(
                    f"track {self.track_index} ended after {len(events)} events without End-Of-Track",
                    position=self.cursor.position, needed=1)
            event = self.read_event()
            events.append(event)
            if isinstance(event, MetaEvent) and event.meta_type is MetaType.END_OF_TRACK:
                return events

    def read_event(self) -> Event:
        delta = self.cursor.read_vlq()
        status = self.cursor.read_uint8()
        first = None
        if status & 0x80:
            self.running_status = status
        else:
            if self.running_status is None:
                raise UnrecognizedEventError(
                    f"track {self.track_index}: data byte 0x{status:02X} at offset "
                    f"{self.cursor.position - 1} with no running status", status=status)
            first, status = status, self.running_status

        if status >> 4 != 0xF:
            return self._read_channel_voice(delta, status, first)
        if status == META_STATUS and first is None:
            return self._read_meta(delta)
        return self._read_sysex(delta, first)

    def _read_meta(self, delta: int) -> Event:
        subtype = self.cursor.read_uint8()

        if subtype == END_OF_TRACK:
            return MetaEvent(delta, MetaType.END_OF_TRACK, self.cursor.read_bytes(1))

        meta_type = PAYLOADLESS_META_TYPES.get(subtype)
        if meta_type is not None:
            return MetaEvent(delta, meta_type)

        meta_type = META_TYPES.get(subtype)
        if meta_type is None:
            if self.strict and subtype not in TOLERATED_META_SUBTYPES:
                raise UnrecognizedEventError(
                    f"track {self.track_index}: unknown meta event 0x{subtype:02X}",
                    status=META_STATUS, subtype=subtype)
            length = self.cursor.read_uint8()
            self.cursor.read_bytes(length)
            if subtype not in TOLERATED_META_SUBTYPES:
                logger.warning("track %d: skipped unknown meta event 0x%02X (%d bytes)",
                               self.track_index, subtype, length)
            return UnknownEvent(delta, META_STATUS, subtype)

        length = self.cursor.read_uint8()
        data = self.cursor.read_bytes(length)
        event = MetaEvent(delta, meta_type, data)
        if meta_type is MetaType.TEMPO and (len(data) < 3 or event.tempo == 0):
            raise UnreadableTrackError(
                f"track {self.track_index}: bad tempo event payload {data.hex()}",
                track_index=self.track_index)
        return event

    def _read_channel_voice(self, delta: int, status: int, first: Optional[int] = None) -> ChannelVoiceEvent:
        kind = ChannelVoiceKind(status >> 4)
        channel = status & 0x0F
        data1 = first if first is not None else self.cursor.read_uint8()

        if kind in (ChannelVoiceKind.PATCH_CHANGE, ChannelVoiceKind.CHANNEL_AFTER_TOUCH):
            return ChannelVoiceEvent(delta, kind, channel, value=data1)

        data2 = self.cursor.read_uint8()
        if kind.has_note:
            return ChannelVoiceEvent(delta, kind, channel, note=make_note(data1, data2))
        if kind is ChannelVoiceKind.CONTROL_CHANGE:
            return ChannelVoiceEvent(delta, kind, channel, controller=data1, value=data2)
        # second byte is the high byte, kept as-is rather than as 14 bits
        return ChannelVoiceEvent(delta, kind, channel, value=data2 * 256 + data1)

    def _read_sysex(self, delta: int, length: Optional[int] = None) -> SysExEvent:
        if length is None:
            length = self.cursor.read_uint8()
        return SysExEvent(delta, self.cursor.read_bytes(length))


def decode_events(data: bytes, config: Optional[DecoderConfig] = None, track_index: int = 0) -> List[Event]:
    """Decode the events of a track chunk payload."""
    config = config or DecoderConfig()
    return EventDecoder(data, strict=config.strict, track_index=track_index).decode()


def decode_track(cursor: ByteCursor, index: int, config: Optional[DecoderConfig] = None) -> Track:
    """Read one 'MTrk' chunk from ``cursor`` and decode its events.

    The track name comes from its Track-Name meta event (the last one wins)
    and the track number from a 2-byte Sequence-Number event, falling back
    to the track's position in the file.

    Raises:
        UnreadableTrackError: If the chunk tag is not 'MTrk'.
        TruncatedError: If the chunk or its events are cut short.
    """
    tag = cursor.read_bytes(4)
    if tag != TRACK_MAGIC:
        raise UnreadableTrackError(f"track {index}: expected chunk tag b'MTrk', got {tag!r}", track_index=index)
    length = cursor.read_uint32()
    data = cursor.read_bytes(length)
    logger.debug("track %d: %d bytes at offset %d", index, length, cursor.position - length)

    track = Track(index=index, length=length, data=data, number=index)
    track.events = decode_events(data, config, track_index=index)
    for ev in track.events:
        if not isinstance(ev, MetaEvent):
            continue
        if ev.meta_type is MetaType.TRACK_NAME:
            track.name = ev.text
        elif ev.meta_type is MetaType.SEQUENCE_NUMBER and len(ev.data) == 2:
            track.number = int.from_bytes(ev.data, byteorder='big')
    logger.debug("track %d (%s): %d events", index, track.name, len(track.events))
    return track
