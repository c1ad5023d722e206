"""midi_timeline.exporter

Export decoded MIDI files to various formats (JSON, CSV, YAML, text report).
"""
import csv
import json
from typing import Any, Dict, List

import yaml

from .models import ChannelVoiceEvent, MetaEvent, MIDIFile, SysExEvent, UnknownEvent
from .validators import validate_export_format, ValidationError


class ExportError(Exception):
    """Exception raised when export fails."""
    pass


NOTE_FIELDS = ['track', 'track_name', 'time', 'length', 'length_type', 'channel',
               'number', 'pitch', 'octave', 'velocity']


def note_rows(midi: MIDIFile) -> List[Dict[str, Any]]:
    """Flatten the played notes of every track into CSV-ready rows."""
    rows = []
    for track in midi.tracks:
        for pn in track.notes:
            rows.append({'track': track.index, 'track_name': track.name or '', **pn.to_dict()})
    return rows


def export_json(midi: MIDIFile, output_path: str) -> None:
    """Export a decoded file to JSON.

    Raises:
        ExportError: If export fails
    """
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(midi.to_dict(), f, indent=2, ensure_ascii=False)
    except (OSError, TypeError, ValueError) as e:
        raise ExportError(f"Failed to export JSON: {e}") from e


def export_csv(midi: MIDIFile, output_path: str) -> None:
    """Export played notes to CSV, one row per note.

    Raises:
        ExportError: If there are no notes or writing fails
    """
    rows = note_rows(midi)
    if not rows:
        raise ExportError("No notes to export")
    try:
        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=NOTE_FIELDS)
            writer.writeheader()
            writer.writerows(rows)
    except OSError as e:
        raise ExportError(f"Failed to export CSV: {e}") from e


def export_yaml(midi: MIDIFile, output_path: str) -> None:
    """Export a decoded file to YAML.

    Raises:
        ExportError: If export fails
    """
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(midi.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    except (OSError, yaml.YAMLError) as e:
        raise ExportError(f"Failed to export YAML: {e}") from e


def _event_lines(index: int, ev) -> List[str]:
    lines = [f"Event {index}: {ev.category}", f"  Time: {ev.delta}"]
    if isinstance(ev, MetaEvent):
        lines.append(f"  Metatype: {ev.meta_type.value}")
        if ev.text is not None:
            lines.append(f"  Text: {ev.text}")
        if ev.tempo is not None:
            lines.append(f"  Tempo: {ev.tempo}")
    elif isinstance(ev, ChannelVoiceEvent):
        lines.append(f"  Miditype: {ev.kind.name}")
        lines.append(f"    Channel: {ev.channel}")
        if ev.controller is not None:
            lines.append(f"    Controller: {ev.controller}")
        if ev.value is not None:
            lines.append(f"    Value: {ev.value}")
        if ev.note is not None:
            lines.append(f"    Note: {ev.note.number}")
            lines.append(f"      Type: {ev.note.pitch_class.label}")
            lines.append(f"      Octave: {ev.note.octave}")
            lines.append(f"      Velocity: {ev.note.velocity}")
    elif isinstance(ev, SysExEvent):
        lines.append(f"  Length: {len(ev.data)}")
    elif isinstance(ev, UnknownEvent):
        subtype = '' if ev.subtype is None else f" / 0x{ev.subtype:02X}"
        lines.append(f"  Status: 0x{ev.status:02X}{subtype}")
    return lines


def render_report(midi: MIDIFile) -> str:
    """Render the human-readable report as a string."""
    header = midi.header
    lines = [
        "MIDI FILE DATA:",
        "",
        "Header",
        "======",
        f"Length: {header.length}",
        f"Format: {header.format.name}",
        f"Tracks: {header.tracks}",
        f"Delta-time: {header.ticks_per_quarter_note}",
        f"Starting tempo: {midi.tempo}",
        "",
    ]
    for track in midi.tracks:
        lines.append(f"Track #{track.index} {track.name or ''}".rstrip())
        lines.append("=========")
        for i, ev in enumerate(track.events):
            lines.extend(_event_lines(i, ev))
            lines.append("")
        lines.append("Notes:")
        lines.append("------")
        for pn in track.notes:
            lines.append(f"{pn.time}: {pn.note.number} {pn.note.name} at {pn.note.velocity} "
                         f"({pn.length}, {pn.length_type.value})")
        lines.append("")
    lines.append("Tempo changes")
    lines.append("=============")
    for tc in midi.tempo_changes:
        lines.append(f"{tc.time}: From {tc.old_tempo} ({tc.old_bpm:.2f} BPM) to {tc.new_tempo} ({tc.bpm:.2f} BPM)")
    lines.append("")
    lines.append("END OF DATA")
    return "\n".join(lines) + "\n"


def export_text(midi: MIDIFile, output_path: str) -> None:
    """Export the human-readable report to a text file.

    Raises:
        ExportError: If export fails
    """
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(render_report(midi))
    except OSError as e:
        raise ExportError(f"Failed to export text: {e}") from e


def export_midi_report(midi: MIDIFile, output_path: str, format: str = 'json') -> None:
    """Export a decoded file in the given format.

    Args:
        midi: Decoded MIDIFile
        output_path: Path to output file
        format: Export format ('json', 'csv', 'yaml', 'text')

    Raises:
        ExportError: If format is unsupported or export fails
    """
    try:
        validate_export_format(format)
    except ValidationError as e:
        raise ExportError(str(e)) from e
    format = format.lower()

    if format == 'json':
        export_json(midi, output_path)
    elif format == 'csv':
        export_csv(midi, output_path)
    elif format in ('yaml', 'yml'):
        export_yaml(midi, output_path)
    elif format == 'text' or format == 'txt':
        export_text(midi, output_path)
    else:
        raise ExportError(f"Unsupported export format: {format}. Supported formats: json, csv, yaml, text")
