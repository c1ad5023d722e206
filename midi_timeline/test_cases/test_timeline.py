import pytest
from mido import MetaMessage, Message

from midi_timeline.midi_parser import decode_midi
from midi_timeline.models import ChannelVoiceEvent, ChannelVoiceKind, NoteLength, TempoChange
from midi_timeline.pitch import PitchClass, classify_pitch, make_note
from midi_timeline.tempo_map import TempoMap
from midi_timeline.timeline_generator import classify_length, normalize_event

from midi_fixtures import END_OF_TRACK, mido_file, smf


@pytest.mark.parametrize('duration, expected', [
    (500000, NoteLength.QUARTER),
    (250000, NoteLength.EIGHTH),
    (4000000, NoteLength.DOUBLE_WHOLE),
    (2000000, NoteLength.WHOLE),
    (1000000, NoteLength.HALF),
    (125000, NoteLength.SIXTEENTH),
    (62500, NoteLength.THIRTY_SECOND),
    (31250, NoteLength.SIXTY_FOURTH),
    (15625, NoteLength.HUNDRED_TWENTY_EIGHTH),
    (750000, NoteLength.UNKNOWN),
    (0, NoteLength.UNKNOWN),
])
def test_classify_length(duration, expected):
    assert classify_length(duration, 500000) is expected


def test_classify_length_window_edges():
    assert classify_length(540000, 500000) is NoteLength.QUARTER
    assert classify_length(560000, 500000) is NoteLength.UNKNOWN
    assert classify_length(31600, 500000) is NoteLength.UNKNOWN


def test_pitch_classifier():
    assert classify_pitch(60) == (5, PitchClass.C)
    assert classify_pitch(71) == (5, PitchClass.B)
    assert classify_pitch(127) == (10, PitchClass.G)
    assert make_note(69, 100).name == 'A5'
    assert PitchClass.F_SHARP.label == 'F#'


def test_normalize_event():
    silent = ChannelVoiceEvent(5, ChannelVoiceKind.NOTE_ON, 0, note=make_note(60, 0))
    assert normalize_event(silent).kind is ChannelVoiceKind.NOTE_OFF
    assert normalize_event(silent).delta == 5
    loud = ChannelVoiceEvent(5, ChannelVoiceKind.NOTE_ON, 0, note=make_note(60, 1))
    assert normalize_event(loud) is loud


def test_note_on_velocity_zero_acts_as_note_off():
    with_off = decode_midi(smf(b'\x00\x90\x3c\x40' + b'\x83\x60\x80\x3c\x40' + END_OF_TRACK))
    with_on = decode_midi(smf(b'\x00\x90\x3c\x40' + b'\x83\x60\x90\x3c\x00' + END_OF_TRACK))
    assert with_on.tracks[0].notes == with_off.tracks[0].notes
    assert len(with_on.tracks[0].notes) == 1


def test_unmatched_note_off_is_dropped():
    midi = decode_midi(smf(b'\x00\x80\x3c\x40' + b'\x00\x90\x3e\x40' + b'\x60\x80\x3c\x00' + END_OF_TRACK))
    assert midi.loaded
    assert midi.tracks[0].notes == []


def test_note_off_matches_first_open_note():
    midi = decode_midi(mido_file([
        Message('note_on', note=60, velocity=10, time=0),
        Message('note_on', note=60, velocity=20, time=240),
        Message('note_off', note=60, time=240),
        Message('note_off', note=60, time=240),
    ]))
    first, second = midi.tracks[0].notes
    assert (first.time, first.length, first.note.velocity) == (0, 500000, 10)
    assert (second.time, second.length, second.note.velocity) == (250000, 500000, 20)


def test_notes_are_matched_per_track():
    midi = decode_midi(mido_file(
        [Message('note_on', note=60, velocity=64, time=0)],
        [Message('note_off', note=60, velocity=64, time=480)],
    ))
    assert midi.tracks[0].notes == []
    assert midi.tracks[1].notes == []


def test_tempo_at_start_sets_file_tempo():
    midi = decode_midi(mido_file(
        [MetaMessage('set_tempo', tempo=250000, time=0)],
        [Message('note_on', note=60, velocity=64, time=0),
         Message('note_off', note=60, velocity=64, time=480)],
    ))
    assert midi.tempo == 250000
    assert midi.tempo_changes == [TempoChange(old_tempo=500000, new_tempo=250000, time=0)]
    (pn,) = midi.tracks[1].notes
    assert pn.length == 250000
    assert pn.length_type is NoteLength.QUARTER


def test_tempo_change_inside_note_same_track():
    midi = decode_midi(mido_file([
        Message('note_on', note=60, velocity=64, time=0),
        MetaMessage('set_tempo', tempo=250000, time=240),
        Message('note_off', note=60, velocity=64, time=240),
    ]))
    (pn,) = midi.tracks[0].notes
    # 240 ticks at 500000 + 240 ticks at 250000
    assert pn.length == 375000
    assert midi.tempo_changes == [TempoChange(old_tempo=500000, new_tempo=250000, time=250000)]


def test_tempo_change_inside_note_other_track():
    midi = decode_midi(mido_file(
        [MetaMessage('set_tempo', tempo=250000, time=240)],
        [Message('note_on', note=60, velocity=64, time=0),
         Message('note_off', note=60, velocity=64, time=480)],
    ))
    (pn,) = midi.tracks[1].notes
    assert pn.time == 0
    assert pn.length == 375000
    assert midi.tempo_changes[0].time == 250000


def test_notes_after_tempo_change_use_new_tempo():
    midi = decode_midi(mido_file([
        MetaMessage('set_tempo', tempo=1000000, time=0),
        Message('note_on', note=60, velocity=64, time=0),
        Message('note_off', note=60, velocity=64, time=480),
        MetaMessage('set_tempo', tempo=500000, time=0),
        Message('note_on', note=62, velocity=64, time=0),
        Message('note_off', note=62, velocity=64, time=240),
    ]))
    first, second = midi.tracks[0].notes
    assert (first.time, first.length, first.length_type) == (0, 1000000, NoteLength.QUARTER)
    assert (second.time, second.length, second.length_type) == (1000000, 250000, NoteLength.EIGHTH)
    assert [tc.new_tempo for tc in midi.tempo_changes] == [1000000, 500000]
    assert midi.tempo_changes[1].old_tempo == 1000000


def test_tempo_map_plain_conversion():
    tm = TempoMap(480)
    assert tm.to_microseconds(480, 500000, 0) == 500000
    assert tm.to_microseconds(0, 500000, 123) == 0
    assert tm.to_microseconds(1, 500000, 0) == 1041


def test_tempo_map_splits_across_boundary():
    tm = TempoMap(480, [TempoChange(old_tempo=500000, new_tempo=250000, time=250000)])
    assert tm.to_microseconds(480, 250000, 0) == 375000
    # starting on or after the boundary ignores it
    assert tm.to_microseconds(480, 250000, 250000) == 250000


def test_tempo_map_boundary_beyond_delta():
    tm = TempoMap(480, [TempoChange(old_tempo=500000, new_tempo=250000, time=1000000)])
    # the delta ends before the change, so it runs at the current tempo
    assert tm.to_microseconds(480, 250000, 0) == 250000


def test_later_tempo_change_from_other_track():
    midi = decode_midi(mido_file(
        [MetaMessage('set_tempo', tempo=250000, time=960)],
        [Message('note_on', note=60, velocity=64, time=0),
         Message('note_off', note=60, velocity=64, time=240),
         Message('note_on', note=62, velocity=64, time=0),
         Message('note_off', note=62, velocity=64, time=240)],
    ))
    # the change is recorded at 1000000us, after the second note has ended
    assert midi.tempo_changes == [TempoChange(old_tempo=500000, new_tempo=250000, time=1000000)]
    first, second = midi.tracks[1].notes
    assert (first.time, first.length) == (0, 250000)
    assert (second.time, second.length) == (250000, 125000)
    assert second.length_type is NoteLength.EIGHTH


def test_tempo_map_several_boundaries():
    tm = TempoMap(480, [
        TempoChange(old_tempo=500000, new_tempo=250000, time=250000),
        TempoChange(old_tempo=250000, new_tempo=1000000, time=375000),
    ])
    # 240 ticks at 500000, 240 ticks at 250000, 480 ticks at 1000000
    assert tm.to_microseconds(960, 1000000, 0) == 250000 + 125000 + 1000000


def test_played_note_serialisation():
    midi = decode_midi(smf(b'\x00\x91\x45\x50' + b'\x83\x60\x81\x45\x00' + END_OF_TRACK))
    (pn,) = midi.tracks[0].notes
    assert pn.channel == 1
    assert pn.to_dict() == {
        'time': 0, 'length': 500000, 'length_type': 'quarter', 'channel': 1,
        'number': 69, 'pitch': 'A', 'octave': 5, 'velocity': 0x50,
    }
