import pathlib

import mido
import pytest

import atone.midi_utils
import atone.sequencer


def _event (tick: int, message_type: str, **fields: int) -> atone.sequencer.SequencerEvent:

	return atone.sequencer.SequencerEvent(tick=tick, order=tick, message_type=message_type, **fields)


def test_select_output_device_default (patch_midi: None) -> None:

	"""Without a name the first output is opened."""

	name, port = atone.midi_utils.select_output_device()

	assert name == "Dummy MIDI"
	assert port is not None


def test_select_output_device_by_name (patch_midi: None) -> None:

	"""A known name is opened."""

	name, port = atone.midi_utils.select_output_device("Other MIDI")

	assert name == "Other MIDI"
	assert port is not None


def test_select_output_device_unknown (patch_midi: None) -> None:

	"""An unknown name opens nothing."""

	assert atone.midi_utils.select_output_device("Missing") == (None, None)


def test_event_to_message () -> None:

	"""Each event type maps onto its mido message."""

	note_on = atone.midi_utils.event_to_message(_event(0, "note_on", channel=9, note=36, velocity=127))
	note_off = atone.midi_utils.event_to_message(_event(0, "note_off", channel=9, note=36))

	assert note_on == mido.Message("note_on", channel=9, note=36, velocity=127)
	assert note_off == mido.Message("note_off", channel=9, note=36, velocity=0)


def test_event_to_message_program () -> None:

	"""Unknown instruments select program 0."""

	event = atone.sequencer.SequencerEvent(tick=0, order=0, message_type="program_change", channel=0, instrument="Kazoo")

	assert atone.midi_utils.event_to_message(event).program == 0


def test_event_to_message_trigger_rejected () -> None:

	"""Triggers never reach the MIDI port."""

	with pytest.raises(ValueError):
		atone.midi_utils.event_to_message(_event(0, "trigger"))


def test_ticks_to_file_ticks () -> None:

	"""One beat of engine ticks is one file beat."""

	assert atone.midi_utils.ticks_to_file_ticks(600, 600) == atone.midi_utils.FILE_TICKS_PER_BEAT
	assert atone.midi_utils.ticks_to_file_ticks(300, 600) == 240


def test_write_midi_file (tmp_path: pathlib.Path) -> None:

	"""Written files carry the tempo and beat-scaled delta times."""

	path = tmp_path / "out.mid"
	events = [
		_event(0, "note_on", channel=0, note=60, velocity=80),
		_event(600, "note_off", channel=0, note=60),
		_event(600, "note_on", channel=0, note=62, velocity=80),
		_event(900, "note_off", channel=0, note=62),
	]

	atone.midi_utils.write_midi_file(events, str(path), bpm=100)

	mid = mido.MidiFile(str(path))

	assert mid.ticks_per_beat == 480
	assert len(mid.tracks) == 1

	messages = list(mid.tracks[0])
	tempo = [message for message in messages if message.type == "set_tempo"]
	notes = [message for message in messages if message.type in ("note_on", "note_off")]

	assert tempo[0].tempo == mido.bpm2tempo(100)
	assert [message.time for message in notes] == [0, 480, 0, 240]
	assert [message.note for message in notes] == [60, 60, 62, 62]
