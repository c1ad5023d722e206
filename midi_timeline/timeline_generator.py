"""midi_timeline.timeline_generator

Provides the MusicTimeline class, which turns decoded tracks into played notes
and a tempo-change history.

All tracks are replayed together. At every step the track whose next event
comes first is picked, the event's delta is converted to microseconds with
the tempo changes seen so far, and note on/off pairs are matched into
PlayedNote records.

Note:
    The next track is picked by ``accumulated microseconds + raw tick delta``.
    Those units only agree at the default resolution and tempo, so with other
    tempos events from different tracks can be visited out of time order.
"""
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .models import (
    DEFAULT_TEMPO, ChannelVoiceEvent, ChannelVoiceKind, Event, MetaEvent, MetaType, NoteLength, PlayedNote,
    TempoChange, Track,
)
from .pitch import Note
from .tempo_map import TempoMap
from .validators import validate_tempo

logger = logging.getLogger(__name__)

# (length, quarter notes, tolerance)
LENGTH_WINDOWS: List[Tuple[NoteLength, float, float]] = [
    (NoteLength.DOUBLE_WHOLE, 8.0, 0.1),
    (NoteLength.WHOLE, 4.0, 0.1),
    (NoteLength.HALF, 2.0, 0.1),
    (NoteLength.QUARTER, 1.0, 0.1),
    (NoteLength.EIGHTH, 0.5, 0.05),
    (NoteLength.SIXTEENTH, 0.25, 0.05),
    (NoteLength.THIRTY_SECOND, 0.125, 0.0125),
    (NoteLength.SIXTY_FOURTH, 0.0625, 0.0005),
    (NoteLength.HUNDRED_TWENTY_EIGHTH, 0.03125, 0.00005),
]


def classify_length(duration: int, tempo: int) -> NoteLength:
    """Classify a note duration as a fraction of a quarter note.

    Args:
        duration: Note length in microseconds.
        tempo: Tempo in microseconds per quarter note.

    Returns:
        The first NoteLength whose window contains ``duration / tempo``,
        or NoteLength.UNKNOWN.

    Example:
        >>> classify_length(250000, 500000)
        <NoteLength.EIGHTH: 'eighth'>
    """
    ratio = duration / tempo
    for length_type, quarters, tolerance in LENGTH_WINDOWS:
        if abs(ratio - quarters) < tolerance:
            return length_type
    return NoteLength.UNKNOWN


def normalize_event(event: Event) -> Event:
    """Turn a note-on with velocity 0 into the equivalent note-off."""
    if (isinstance(event, ChannelVoiceEvent) and event.kind is ChannelVoiceKind.NOTE_ON
            and event.note is not None and event.note.velocity == 0):
        return dataclasses.replace(event, kind=ChannelVoiceKind.NOTE_OFF)
    return event


@dataclass
class _OpenNote:
    note: Note
    start: int
    channel: int


@dataclass
class TimelineResult:
    starting_tempo: int
    tempo_changes: List[TempoChange] = field(default_factory=list)


class MusicTimeline:
    """Reconstructs absolute timing for the tracks of one file.

    Attributes:
        ticks_per_quarter_note: Header resolution.
        default_tempo: Tempo in force until the first tempo event.

    Example:
        >>> timeline = MusicTimeline(ticks_per_quarter_note=480)
        >>> result = timeline.reconstruct(midi.tracks)
        >>> midi.tracks[1].notes[0].length
        500000
    """

    def __init__(self, ticks_per_quarter_note: int, default_tempo: int = DEFAULT_TEMPO):
        validate_tempo(default_tempo)
        self.ticks_per_quarter_note = ticks_per_quarter_note
        self.default_tempo = default_tempo
        self.tempo_map = TempoMap(ticks_per_quarter_note)

    def reconstruct(self, tracks: List[Track]) -> TimelineResult:
        """Replay every track and fill in ``Track.notes``.

        Args:
            tracks: Decoded tracks; their ``notes`` lists are replaced.

        Returns:
            TimelineResult with the starting tempo and all tempo changes in
            the order they were met.
        """
        self.tempo_map = TempoMap(self.ticks_per_quarter_note)
        cursors = [0] * len(tracks)
        times = [0] * len(tracks)
        open_notes: List[List[_OpenNote]] = [[] for _ in tracks]
        played: List[List[PlayedNote]] = [[] for _ in tracks]
        tempo = self.default_tempo
        starting_tempo = self.default_tempo

        while True:
            ti = self._select_track(tracks, cursors, times)
            if ti is None:
                break
            event = normalize_event(tracks[ti].events[cursors[ti]])
            start = times[ti]
            at = start + self.tempo_map.to_microseconds(event.delta, tempo, start)
            new_tempo = tempo

            if isinstance(event, ChannelVoiceEvent):
                if event.kind is ChannelVoiceKind.NOTE_ON:
                    open_notes[ti].append(_OpenNote(event.note, at, event.channel))
                elif event.kind is ChannelVoiceKind.NOTE_OFF:
                    pn = self._close_note(open_notes[ti], event, at, tempo)
                    if pn is not None:
                        played[ti].append(pn)
            elif isinstance(event, MetaEvent) and event.meta_type is MetaType.TEMPO:
                new_tempo = event.tempo
                self.tempo_map.append(TempoChange(old_tempo=tempo, new_tempo=new_tempo, time=at))
                if start == 0:
                    starting_tempo = new_tempo
                logger.debug("track %d: tempo %d -> %d at %dus", ti, tempo, new_tempo, at)

            times[ti] = at
            cursors[ti] += 1
            tempo = new_tempo

        for track, notes, still_open in zip(tracks, played, open_notes):
            track.notes = notes
            if still_open:
                logger.debug("track %d: %d notes never released", track.index, len(still_open))

        return TimelineResult(starting_tempo=starting_tempo, tempo_changes=list(self.tempo_map.changes))

    @staticmethod
    def _select_track(tracks: List[Track], cursors: List[int], times: List[int]) -> Optional[int]:
        best = None
        best_key = None
        for i, track in enumerate(tracks):
            if cursors[i] >= len(track.events):
                continue
            key = times[i] + track.events[cursors[i]].delta
            if best_key is None or key < best_key:
                best, best_key = i, key
        return best

    @staticmethod
    def _close_note(open_notes: List[_OpenNote], event: ChannelVoiceEvent, at: int,
                    tempo: int) -> Optional[PlayedNote]:
        # first match in scan order; unmatched note-offs are dropped
        for i, candidate in enumerate(open_notes):
            if candidate.note.number == event.note_number:
                del open_notes[i]
                length = at - candidate.start
                return PlayedNote(note=candidate.note, time=candidate.start, length=length,
                                  length_type=classify_length(length, tempo), channel=candidate.channel)
        return None
