import pytest

from midi_timeline.byte_cursor import ByteCursor
from midi_timeline.config import DecoderConfig
from midi_timeline.event_decoder import decode_events, decode_track
from midi_timeline.exceptions import TruncatedError, UnreadableTrackError, UnrecognizedEventError
from midi_timeline.models import (
    ChannelVoiceEvent, ChannelVoiceKind, MetaEvent, MetaType, SysExEvent, UnknownEvent,
)
from midi_timeline.pitch import PitchClass, make_note

from midi_fixtures import END_OF_TRACK, track_chunk

LENIENT = DecoderConfig(strict=False)


def test_running_status_matches_repeated_status():
    explicit = decode_events(b'\x00\x90\x3c\x40' + b'\x60\x90\x3e\x40' + END_OF_TRACK)
    running = decode_events(b'\x00\x90\x3c\x40' + b'\x60\x3e\x40' + END_OF_TRACK)
    assert running == explicit
    assert running[1] == ChannelVoiceEvent(0x60, ChannelVoiceKind.NOTE_ON, 0, note=make_note(0x3e, 0x40))


def test_running_status_for_one_byte_messages():
    events = decode_events(b'\x00\xc3\x05' + b'\x10\x06' + END_OF_TRACK)
    assert [(ev.kind, ev.channel, ev.value) for ev in events[:2]] == [
        (ChannelVoiceKind.PATCH_CHANGE, 3, 5), (ChannelVoiceKind.PATCH_CHANGE, 3, 6)]
    assert events[1].delta == 0x10


def test_running_status_pitch_wheel_and_control_change():
    wheel = decode_events(b'\x00\xe1\x00\x40' + b'\x05\x7f\x01' + END_OF_TRACK)[1]
    assert (wheel.kind, wheel.channel, wheel.delta) == (ChannelVoiceKind.PITCH_WHEEL_CHANGE, 1, 5)
    # the fed-back byte is the low byte
    assert wheel.value == 0x01 * 256 + 0x7f
    cc = decode_events(b'\x00\xb2\x07\x64' + b'\x00\x0a\x20' + END_OF_TRACK)[1]
    assert cc == ChannelVoiceEvent(0, ChannelVoiceKind.CONTROL_CHANGE, 2, controller=10, value=0x20)


def test_running_status_after_meta_reads_sysex():
    text, sysex, eot = decode_events(b'\x00\xff\x01\x02hi' + b'\x00\x02\xaa\xbb' + END_OF_TRACK)
    assert text.text == 'hi'
    assert sysex == SysExEvent(0, b'\xaa\xbb')
    assert eot.meta_type is MetaType.END_OF_TRACK


def test_data_byte_without_running_status():
    with pytest.raises(UnrecognizedEventError):
        decode_events(b'\x00\x3c\x40' + END_OF_TRACK)
    with pytest.raises(UnrecognizedEventError):
        decode_events(b'\x00\x3c\x40' + END_OF_TRACK, LENIENT)


def test_channel_voice_payloads():
    body = (b'\x00\x81\x3c\x20'     # note off ch 1
            b'\x00\xa2\x3c\x11'     # key after-touch ch 2
            b'\x00\xb0\x07\x64'     # control change: volume 100
            b'\x00\xd5\x33'         # channel after-touch
            b'\x00\xe0\x00\x40'     # pitch wheel centre
            + END_OF_TRACK)
    off, touch, cc, pressure, wheel, _ = decode_events(body)
    assert off.kind is ChannelVoiceKind.NOTE_OFF and off.channel == 1
    assert off.note.number == 60 and off.note.velocity == 0x20
    assert touch.kind is ChannelVoiceKind.KEY_AFTER_TOUCH and touch.note.velocity == 0x11
    assert (cc.controller, cc.value, cc.note) == (7, 100, None)
    assert pressure.kind is ChannelVoiceKind.CHANNEL_AFTER_TOUCH and pressure.value == 0x33
    assert wheel.kind is ChannelVoiceKind.PITCH_WHEEL_CHANGE
    assert wheel.value == 0x40 * 256


def test_note_labels():
    (ev, _) = decode_events(b'\x00\x90\x3d\x7f' + END_OF_TRACK)
    assert ev.note.octave == 5
    assert ev.note.pitch_class is PitchClass.C_SHARP
    (ev, _) = decode_events(b'\x00\x90\x00\x7f' + END_OF_TRACK)
    assert ev.note.number == 0 and ev.note.octave == 0


def test_meta_events():
    body = (b'\x00\xff\x02\x03(c)'
            b'\x00\xff\x05\x02la'
            b'\x00\xff\x51\x03\x07\xa1\x20'
            b'\x00\xff\x58\x04\x04\x02\x18\x08'
            b'\x00\xff\xf8'
            b'\x00\xff\xfc'
            + END_OF_TRACK)
    copyright, lyric, tempo, time_sig, clock, stop, eot = decode_events(body)
    assert copyright.meta_type is MetaType.TEXT and copyright.text == '(c)'
    assert lyric.meta_type is MetaType.LYRIC and lyric.text == 'la'
    assert tempo.meta_type is MetaType.TEMPO and tempo.tempo == 500000
    assert time_sig.meta_type is MetaType.TIME_SIGNATURE and time_sig.data == b'\x04\x02\x18\x08'
    assert time_sig.tempo is None and time_sig.text is None
    assert clock == MetaEvent(0, MetaType.TIMING_CLOCK)
    assert stop.meta_type is MetaType.STOP_SEQUENCE
    assert eot.meta_type is MetaType.END_OF_TRACK


def test_short_tempo_payload():
    with pytest.raises(UnreadableTrackError):
        decode_events(b'\x00\xff\x51\x02\x07\xa1' + END_OF_TRACK)


def test_unknown_meta_strict_and_lenient():
    body = b'\x00\xff\x60\x02\xaa\xbb' + b'\x00\x90\x3c\x40' + END_OF_TRACK
    with pytest.raises(UnrecognizedEventError) as excinfo:
        decode_events(body)
    assert excinfo.value.subtype == 0x60
    unknown, note, _ = decode_events(body, LENIENT)
    assert unknown == UnknownEvent(0, 0xff, 0x60)
    assert note.note.number == 0x3c


@pytest.mark.parametrize('subtype', [0x21, 0x48])
def test_tolerated_meta_subtypes_in_strict_mode(subtype):
    events = decode_events(b'\x00\xff' + bytes([subtype]) + b'\x01\x00' + END_OF_TRACK)
    assert events[0] == UnknownEvent(0, 0xff, subtype)
    assert events[-1].meta_type is MetaType.END_OF_TRACK


def test_sysex():
    (ev, _) = decode_events(b'\x00\xf0\x03\x7e\x7f\xf7' + END_OF_TRACK)
    assert isinstance(ev, SysExEvent)
    assert ev.data == b'\x7e\x7f\xf7'


@pytest.mark.parametrize('config', [DecoderConfig(), LENIENT])
def test_system_statuses_are_sysex(config):
    body = b'\x00\xf1\x01\xaa' + b'\x00\x02\xbb\xcc' + END_OF_TRACK
    first, replayed, eot = decode_events(body, config)
    assert first == SysExEvent(0, b'\xaa')
    assert replayed == SysExEvent(0, b'\xbb\xcc')
    assert eot.meta_type is MetaType.END_OF_TRACK


def test_missing_end_of_track_is_truncated():
    with pytest.raises(TruncatedError):
        decode_events(b'\x00\x90\x3c\x40')
    with pytest.raises(TruncatedError):
        decode_events(b'')
    with pytest.raises(TruncatedError):
        decode_events(b'\x00\xff\x2f')


def test_bytes_after_end_of_track_are_ignored():
    events = decode_events(END_OF_TRACK + b'\x00\x90\x3c\x40')
    assert len(events) == 1


def test_decode_track_name_and_number():
    body = b'\x00\xff\x00\x02\x00\x07' + b'\x00\xff\x03\x05Piano' + END_OF_TRACK
    cursor = ByteCursor(track_chunk(body) + b'rest')
    track = decode_track(cursor, 2)
    assert track.index == 2
    assert track.name == 'Piano'
    assert track.number == 7
    assert track.length == len(body)
    assert track.data == body
    assert cursor.read_bytes(4) == b'rest'


def test_decode_track_defaults():
    track = decode_track(ByteCursor(track_chunk(END_OF_TRACK)), 3)
    assert track.name is None
    assert track.number == 3
    assert track.notes == []


def test_decode_track_bad_tag():
    with pytest.raises(UnreadableTrackError):
        decode_track(ByteCursor(b'MThd' + len(END_OF_TRACK).to_bytes(4, 'big') + END_OF_TRACK), 0)


def test_zero_tempo_is_unreadable():
    with pytest.raises(UnreadableTrackError):
        decode_events(b'\x00\xff\x51\x03\x00\x00\x00' + END_OF_TRACK)
