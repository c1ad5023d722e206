"""midi_timeline.pitch

Pitch-class and octave labelling for raw MIDI note numbers.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']


class PitchClass(IntEnum):
    """The twelve pitch classes, numbered from C."""

    C = 0
    C_SHARP = 1
    D = 2
    D_SHARP = 3
    E = 4
    F = 5
    F_SHARP = 6
    G = 7
    G_SHARP = 8
    A = 9
    A_SHARP = 10
    B = 11

    @property
    def label(self) -> str:
        return NOTE_NAMES[self.value]


def classify_pitch(number: int) -> Tuple[int, PitchClass]:
    """Return ``(octave, pitch_class)`` for a MIDI note number.

    Example:
        >>> classify_pitch(61)
        (5, <PitchClass.C_SHARP: 1>)
    """
    return number // 12, PitchClass(number % 12)


@dataclass(frozen=True)
class Note:
    """A note as carried by a channel voice message."""

    number: int
    velocity: int = 0
    octave: int = 0
    pitch_class: PitchClass = PitchClass.C

    @property
    def name(self) -> str:
        return f"{self.pitch_class.label}{self.octave}"

    def to_dict(self) -> dict:
        return {
            'number': self.number,
            'pitch': self.pitch_class.label,
            'octave': self.octave,
            'velocity': self.velocity,
        }


def make_note(number: int, velocity: int = 0) -> Note:
    # note number 0 keeps the default octave/pitch class
    if number == 0:
        return Note(number=0, velocity=velocity)
    octave, pitch_class = classify_pitch(number)
    return Note(number=number, velocity=velocity, octave=octave, pitch_class=pitch_class)
