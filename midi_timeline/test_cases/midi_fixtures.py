"""Builders for MIDI test data: hand-made chunks and mido-written files."""
import io

from mido import MetaMessage, Message, MidiFile, MidiTrack

END_OF_TRACK = b'\x00\xff\x2f\x00'


def header_chunk(fmt=1, tracks=1, tpq=480, length=6):
    return (b'MThd' + length.to_bytes(4, 'big') + fmt.to_bytes(2, 'big')
            + tracks.to_bytes(2, 'big') + tpq.to_bytes(2, 'big'))


def track_chunk(body: bytes) -> bytes:
    return b'MTrk' + len(body).to_bytes(4, 'big') + body


def smf(*bodies: bytes, fmt=1, tpq=480) -> bytes:
    """A complete file with one track chunk per body."""
    return header_chunk(fmt=fmt, tracks=len(bodies), tpq=tpq) + b''.join(track_chunk(b) for b in bodies)


def mido_file(*tracks, ticks_per_beat=480) -> bytes:
    """Write a format 1 file with mido and return its bytes."""
    mid = MidiFile(type=1, ticks_per_beat=ticks_per_beat)
    for messages in tracks:
        mid.tracks.append(MidiTrack(messages))
    buf = io.BytesIO()
    mid.save(file=buf)
    return buf.getvalue()


def quarter_note_file() -> bytes:
    return mido_file([
        Message('note_on', note=60, velocity=64, time=0),
        Message('note_off', note=60, velocity=64, time=480),
    ])


def c_major_arpeggio() -> bytes:
    conductor = [
        MetaMessage('track_name', name='Conductor', time=0),
        MetaMessage('time_signature', numerator=4, denominator=4, time=0),
        MetaMessage('set_tempo', tempo=500000, time=0),
    ]
    piano = [
        MetaMessage('track_name', name='Piano', time=0),
        Message('program_change', program=0, time=0),
        Message('note_on', note=60, velocity=64, time=0),
        Message('note_off', note=60, velocity=64, time=480),
        Message('note_on', note=64, velocity=64, time=0),
        Message('note_off', note=64, velocity=64, time=480),
        Message('note_on', note=67, velocity=64, time=0),
        Message('note_off', note=67, velocity=64, time=480),
    ]
    return mido_file(conductor, piano)
