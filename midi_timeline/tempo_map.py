"""midi_timeline.tempo_map

Tick to microsecond conversion across tempo changes.

The tempo-change list is file-wide: a change found in one track applies to
the conversions of every other track. It is filled while the timeline is
being reconstructed, so a conversion only sees the changes appended before
it runs.
"""
from fractions import Fraction
from typing import List, Optional

from .models import TempoChange
from .validators import validate_ticks_per_quarter_note


class TempoMap:
    """Ordered history of tempo changes plus the tick converter.

    Attributes:
        ticks_per_quarter_note: Resolution from the file header.
        changes: TempoChange records in the order they were discovered.

    Example:
        >>> tm = TempoMap(480)
        >>> tm.to_microseconds(480, 500000, 0)
        500000
        >>> tm.append(TempoChange(old_tempo=500000, new_tempo=250000, time=250000))
        >>> tm.to_microseconds(480, 250000, 0)  # half at 120 BPM, half at 240 BPM
        375000
    """

    def __init__(self, ticks_per_quarter_note: int, changes: Optional[List[TempoChange]] = None):
        validate_ticks_per_quarter_note(ticks_per_quarter_note)
        self.ticks_per_quarter_note = ticks_per_quarter_note
        self.changes: List[TempoChange] = list(changes) if changes else []

    def append(self, change: TempoChange) -> None:
        self.changes.append(change)

    def to_microseconds(self, ticks: int, tempo: int, start: int) -> int:
        """Convert a tick delta that begins at ``start`` microseconds.

        The delta's end is first estimated at the tempo in force at
        ``start``. Recorded changes that fall strictly between ``start`` and
        that estimate are boundaries: the part up to each one is converted at
        the change's old tempo and the ticks are reduced proportionally.
        Whatever ticks are left after the last boundary use ``tempo``.

        Args:
            ticks: Delta-time in ticks.
            tempo: Current tempo, microseconds per quarter note.
            start: Absolute time in microseconds at which the delta begins.

        Returns:
            The delta's length in whole microseconds.
        """
        tpq = self.ticks_per_quarter_note
        later = sorted((c for c in self.changes if c.time > start), key=lambda c: c.time)
        # a later change's old tempo is the tempo in force at start
        tempo_at_start = later[0].old_tempo if later else tempo
        target = start + Fraction(ticks) * tempo_at_start / tpq

        remaining = Fraction(ticks)
        position = start
        elapsed = Fraction(0)
        for change in later:
            if change.time >= target:
                break
            if position + remaining * change.old_tempo / tpq <= change.time:
                break
            gap = change.time - position
            elapsed += gap
            remaining -= Fraction(gap) * tpq / change.old_tempo
            position = change.time

        return int(elapsed + remaining * tempo / tpq)
