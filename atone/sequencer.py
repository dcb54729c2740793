import dataclasses
import heapq
import itertools
import logging
import typing

import atone.constants
import atone.midi_utils
import atone.pattern


logger = logging.getLogger(__name__)


@dataclasses.dataclass(order=True)
class SequencerEvent:

	"""
	An event waiting in the queue for its tick.

	Events at the same tick are delivered in the order they were scheduled.
	"""

	tick: int
	order: int
	message_type: str = dataclasses.field(compare=False)	# 'note_on', 'note_off', 'program_change' or 'trigger'
	channel: int = dataclasses.field(compare=False, default=0)
	note: int = dataclasses.field(compare=False, default=0)
	velocity: int = dataclasses.field(compare=False, default=0)
	instrument: str = dataclasses.field(compare=False, default="")


class Sequencer:

	"""
	Tick-ordered event scheduler with a bar-stepping time marker.

	Engines schedule note on/off pairs ahead of playback; ``dispatch()`` then
	delivers everything that has come due to the MIDI output (if any), the
	recorder (if enabled) and, for trigger events, the generation callback.
	"""

	def __init__ (
		self,
		bpm: int = 100,
		midi_out: typing.Optional[typing.Any] = None,
		record: bool = False
	) -> None:

		"""Initialize the scheduler.

		Parameters:
			bpm: Tempo used to derive the beat and bar lengths in ticks.
			midi_out: Optional open mido output port.  Due events are sent
				to it during ``dispatch()``.
			record: When True, keep every dispatched event for
				``save_recording()``.
		"""

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		self.bpm = bpm
		self.beat_duration = atone.constants.beat_duration(bpm)
		self.bar_duration = atone.constants.BEATS_PER_BAR * self.beat_duration

		if self.beat_duration <= 0:
			raise ValueError(f"BPM {bpm} is too fast for millisecond ticks")

		self.midi_out = midi_out
		self.recording = record
		self.recorded_events: typing.List[SequencerEvent] = []

		self.time_marker = 0
		self.current_tick = 0
		self.event_queue: typing.List[SequencerEvent] = []
		self._counter = itertools.count()
		self.active_notes: typing.Set[typing.Tuple[int, int]] = set()

		self._trigger: typing.Optional[typing.Callable[[int], typing.Any]] = None


	def _push (self, tick: int, message_type: str, **fields: typing.Any) -> None:

		"""
		Queue an event at an absolute tick.
		"""

		if tick < 0:
			raise ValueError("Event tick cannot be negative")

		event = SequencerEvent(
			tick = tick,
			order = next(self._counter),
			message_type = message_type,
			**fields
		)

		heapq.heappush(self.event_queue, event)


	def schedule_note_on (self, voice: int, pitch: int, tick: int, velocity: int) -> None:

		"""
		Schedule a note on at ``tick``.
		"""

		self._push(tick, 'note_on', channel=int(voice), note=pitch, velocity=velocity)


	def schedule_note_off (self, voice: int, pitch: int, tick: int) -> None:

		"""
		Schedule a note off at ``tick``.
		"""

		self._push(tick, 'note_off', channel=int(voice), note=pitch)


	def schedule_program (self, voice: int, instrument: str, tick: int) -> None:

		"""
		Schedule an instrument change for a voice.
		"""

		self._push(tick, 'program_change', channel=int(voice), instrument=instrument)


	def schedule_self (self, tick: int) -> None:

		"""
		Arm the generation trigger to fire at ``tick``.
		"""

		self._push(tick, 'trigger')


	def set_trigger (self, callback: typing.Callable[[int], typing.Any]) -> None:

		"""
		Register the callback invoked when a trigger event comes due.
		"""

		self._trigger = callback


	def schedule_note (self, event: atone.pattern.NoteEvent) -> None:

		"""
		Schedule the on/off pair of a note event.
		"""

		self.schedule_note_on(event.voice, event.pitch, event.start_tick, event.velocity)
		self.schedule_note_off(event.voice, event.pitch, event.end_tick)


	def schedule_pattern (self, pattern: atone.pattern.Pattern, start_tick: int) -> typing.List[atone.pattern.NoteEvent]:

		"""
		Schedule every note of a bar, returning the absolute note events.
		"""

		events = pattern.to_events(start_tick)

		for event in events:
			self.schedule_note(event)

		logger.debug(f"Scheduled {len(events)} notes at {start_tick}, queue size: {len(self.event_queue)}")

		return events


	def advance_bar (self) -> int:

		"""
		Move the time marker forward by one bar and return the new marker.
		"""

		self.time_marker += self.bar_duration

		return self.time_marker


	def dispatch (self, until_tick: int) -> int:

		"""Deliver every queued event with a tick at or before ``until_tick``.

		Trigger callbacks may schedule further events; any of those that are
		already due are delivered in the same call.  Returns the number of
		events delivered.
		"""

		delivered = 0

		while self.event_queue and self.event_queue[0].tick <= until_tick:

			event = heapq.heappop(self.event_queue)
			self.current_tick = max(self.current_tick, event.tick)
			delivered += 1

			if event.message_type == 'trigger':
				if self._trigger is not None:
					self._trigger(event.tick)
				continue

			if event.message_type == 'note_on' and event.velocity > 0:
				self.active_notes.add((event.channel, event.note))
			elif event.message_type == 'note_off':
				self.active_notes.discard((event.channel, event.note))

			self._send_midi(event)

			if self.recording:
				self.recorded_events.append(event)

		self.current_tick = max(self.current_tick, until_tick)

		return delivered


	def pending_ticks (self) -> typing.List[int]:

		"""
		Return the ticks of all queued events in delivery order.
		"""

		return [event.tick for event in sorted(self.event_queue)]


	def _send_midi (self, event: SequencerEvent) -> None:

		"""
		Send an event to the output port, if one is open.
		"""

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(atone.midi_utils.event_to_message(event))
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


	def save_recording (self, filename: str) -> None:

		"""
		Save the recorded events to a Standard MIDI File.
		"""

		if not self.recorded_events:
			logger.warning("Nothing recorded - MIDI file not written")
			return

		logger.info(f"Saving MIDI recording ({len(self.recorded_events)} events) to {filename}...")

		atone.midi_utils.write_midi_file(self.recorded_events, filename, self.bpm)

		logger.info(f"Saved {filename}")


	def release_notes (self, tick: int) -> int:

		"""
		Send (and record) a note off at ``tick`` for every sounding note.  Returns how many were released.
		"""

		released = sorted(self.active_notes)

		for channel, note in released:

			event = SequencerEvent(tick=tick, order=next(self._counter), message_type='note_off', channel=channel, note=note)
			self._send_midi(event)

			if self.recording:
				self.recorded_events.append(event)

		self.active_notes.clear()

		return len(released)


	def panic (self) -> None:

		"""
		Silence every sounding note and drop all queued events.
		"""

		logger.info("Panic: sending all notes off.")

		self.release_notes(self.current_tick)
		self.event_queue = []
