import logging
import typing

import mido

import atone.constants
import atone.constants.gm_instruments

logger = logging.getLogger(__name__)

# Resolution of written MIDI files. Engine ticks are milliseconds and are
# rescaled to this many ticks per beat on export.
FILE_TICKS_PER_BEAT = 480


def select_output_device(device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:
    """
    Open a MIDI output port for live playback.

    A named port must exist; without a name the first port mido reports is
    used. Failures are logged rather than raised, so callers only need to
    check for ``(None, None)``.
    """
    try:
        ports = mido.get_output_names()
    except Exception as e:
        logger.error(f"Could not list MIDI outputs: {e}")
        return None, None

    logger.info(f"MIDI outputs: {ports}")

    if not ports:
        logger.error("No MIDI outputs to play on.")
        return None, None

    if device_name is None:
        device_name = ports[0]
    elif device_name not in ports:
        logger.error(f"No MIDI output called '{device_name}' (have {ports})")
        return None, None

    try:
        port = mido.open_output(device_name)
    except Exception as e:
        logger.error(f"Could not open MIDI output '{device_name}': {e}")
        return None, None

    logger.info(f"Playing on MIDI output '{device_name}'")

    return device_name, port


def event_to_message(event: typing.Any) -> mido.Message:
    """
    Convert a scheduled sequencer event to a mido message.

    Program changes carry an instrument name, resolved here to a GM program.
    """
    if event.message_type == 'note_on':
        return mido.Message('note_on', channel=event.channel, note=event.note, velocity=event.velocity)

    if event.message_type == 'note_off':
        return mido.Message('note_off', channel=event.channel, note=event.note, velocity=0)

    if event.message_type == 'program_change':
        program = atone.constants.gm_instruments.find_program(event.instrument)
        return mido.Message('program_change', channel=event.channel, program=program)

    raise ValueError(f"Event type {event.message_type!r} has no MIDI message")


def ticks_to_file_ticks(ticks: int, beat_duration: int) -> int:
    """Rescale engine ticks (milliseconds) to MIDI file ticks."""
    return round(ticks * FILE_TICKS_PER_BEAT / beat_duration)


def write_midi_file(events: typing.Sequence[typing.Any], filename: str, bpm: int) -> None:
    """
    Write dispatched sequencer events to a type 0 Standard MIDI File.

    Events must be in delivery order. The tempo is written as a meta message
    at the start of the track so the file plays back at the engine's speed.
    """
    beat_duration = atone.constants.beat_duration(bpm)

    mid = mido.MidiFile(type=0)
    mid.ticks_per_beat = FILE_TICKS_PER_BEAT
    track = mido.MidiTrack()
    mid.tracks.append(track)

    track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(bpm), time=0))

    last_ticks = 0

    for event in events:
        message = event_to_message(event)
        file_ticks = ticks_to_file_ticks(event.tick, beat_duration)

        # Rounding can never move an event before its predecessor.
        message.time = max(0, file_ticks - last_ticks)
        track.append(message)

        last_ticks = max(last_ticks, file_ticks)

    mid.save(filename)
