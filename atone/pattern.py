import dataclasses
import enum
import typing


class Voice (enum.IntEnum):

	"""
	Independent lines of the composition.  The value is the MIDI channel.
	"""

	MELODY = 0
	BASS = 1
	CHORDS = 2
	LEAD = 3
	PERCUSSION = 9


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""
	A sounding note with an absolute start tick.
	"""

	voice: Voice
	pitch: int
	velocity: int
	start_tick: int
	duration_ticks: int


	@property
	def end_tick (self) -> int:

		return self.start_tick + self.duration_ticks


@dataclasses.dataclass(frozen=True)
class ProgramEvent:

	"""
	Selects the instrument of a voice.  The instrument name is not interpreted here.
	"""

	voice: Voice
	instrument: str
	tick: int


class Pattern:

	"""
	One bar's worth of notes, positioned in ticks relative to the bar start.
	"""

	def __init__ (self, length: int) -> None:

		"""
		Initialize an empty bar of ``length`` ticks.
		"""

		if length <= 0:
			raise ValueError("Pattern length must be positive")

		self.length = length
		self.notes: typing.List[typing.Tuple[int, Voice, int, int, int]] = []


	def add_note (self, position: int, voice: Voice, pitch: int, velocity: int, duration: int) -> None:

		"""
		Add a note at a tick offset from the start of the bar.
		"""

		if position < 0:
			raise ValueError("Note position cannot be negative")

		if duration <= 0:
			raise ValueError("Note duration must be positive")

		self.notes.append((position, voice, pitch, velocity, duration))


	def add_chord (self, position: int, voice: Voice, pitches: typing.Iterable[int], velocity: int, duration: int) -> None:

		"""
		Add several simultaneous notes with the same timing.
		"""

		for pitch in pitches:
			self.add_note(position, voice, pitch, velocity, duration)


	def to_events (self, start_tick: int) -> typing.List[NoteEvent]:

		"""
		Resolve the bar's notes to absolute note events in insertion order.
		"""

		return [
			NoteEvent(
				voice = voice,
				pitch = pitch,
				velocity = velocity,
				start_tick = start_tick + position,
				duration_ticks = duration
			)
			for position, voice, pitch, velocity, duration in self.notes
		]
