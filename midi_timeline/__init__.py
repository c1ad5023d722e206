from .midi_parser import decode_midi, parse_midi, parse_header, MIDIDecoder
from .byte_cursor import ByteCursor, encode_vlq
from .event_decoder import EventDecoder, decode_events, decode_track
from .pitch import PitchClass, Note, classify_pitch, make_note
from .timeline_generator import MusicTimeline, classify_length, normalize_event
from .tempo_map import TempoMap
from .models import (
	MIDIFile, Header, Track, MIDIFormat, MetaType, ChannelVoiceKind, NoteLength,
	MetaEvent, ChannelVoiceEvent, SysExEvent, UnknownEvent, PlayedNote, TempoChange,
)
from .config import DecoderConfig, load_decoder_config
from .validators import ValidationError
from .exceptions import (
	MIDIProcessingError, MIDIParsingError, InvalidFileError, UnsupportedFileError, UnreadableTrackError,
	TruncatedError, UnrecognizedEventError, ConfigurationError, InvalidInputError,
)
from .exporter import export_midi_report, export_json, export_csv, export_yaml, export_text, ExportError

__all__ = [
	'decode_midi', 'parse_midi', 'parse_header', 'MIDIDecoder',
	'ByteCursor', 'encode_vlq',
	'EventDecoder', 'decode_events', 'decode_track',
	'PitchClass', 'Note', 'classify_pitch', 'make_note',
	'MusicTimeline', 'classify_length', 'normalize_event', 'TempoMap',
	'MIDIFile', 'Header', 'Track', 'MIDIFormat', 'MetaType', 'ChannelVoiceKind', 'NoteLength',
	'MetaEvent', 'ChannelVoiceEvent', 'SysExEvent', 'UnknownEvent', 'PlayedNote', 'TempoChange',
	'DecoderConfig', 'load_decoder_config',
	'ValidationError',
	'MIDIProcessingError', 'MIDIParsingError', 'InvalidFileError', 'UnsupportedFileError',
	'UnreadableTrackError', 'TruncatedError', 'UnrecognizedEventError', 'ConfigurationError',
	'InvalidInputError',
	'export_midi_report', 'export_json', 'export_csv', 'export_yaml', 'export_text', 'ExportError'
]
