"""Bass, chord and lead voices derived from automaton slots.

Each voice reads the eight slots of a bar (one per eighth note) and chooses
note-map indices from the live cells.  Strategies are closed enums chosen
once at configuration time:

Bass
	``lowest_notes`` - the lowest live cell of the bottom third, every eighth.
	``lower_eighth`` - a weighted pick within three steps of the last bass note.

Chords
	``eighth`` - a triad wherever steps ``i``, ``i + 2`` and ``i + 4`` are all live.
	``whole`` - the same, with repeated chords tied into one.

Lead
	``upper_eighth`` - weighted pick in the upper two thirds, favouring high notes.
	``lower_eighth`` - weighted pick in the lower two thirds, favouring high notes strongly.
	``upper_whole`` - weighted pick in the upper two thirds, favouring its low end, with repeated notes tied.

Weighted picks draw ``random * live % bias(index)`` for every candidate and
keep the largest; a slot only sounds when that weight is above zero.  Each
voice keeps its own last note so lines continue smoothly across bars.
"""

import enum
import logging
import random
import typing

import atone.constants
import atone.constants.velocity
import atone.pattern
import atone.sequence_utils


logger = logging.getLogger(__name__)

# Candidates lie within this many steps of the voice's last note.
SEARCH_RADIUS = 3

WEIGHT_RANGE = 1 << 16

Slot = typing.Sequence[int]
SlotNotes = typing.Optional[typing.Tuple[int, ...]]


class BassStrategy (enum.Enum):

	NONE = "none"
	LOWEST_NOTES = "lowest_notes"
	LOWER_EIGHTH = "lower_eighth"


class ChordStrategy (enum.Enum):

	NONE = "none"
	EIGHTH = "eighth"
	WHOLE = "whole"


class LeadStrategy (enum.Enum):

	NONE = "none"
	UPPER_EIGHTH = "upper_eighth"
	LOWER_EIGHTH = "lower_eighth"
	UPPER_WHOLE = "upper_whole"


class DerivedVoices:

	"""
	Turns a bar of automaton slots into bass, chord and lead notes.
	"""

	def __init__ (
		self,
		note_map: typing.Sequence[int],
		beat_duration: int,
		rng: random.Random,
		velocity: int = 80,
		bass: BassStrategy = BassStrategy.LOWEST_NOTES,
		chords: ChordStrategy = ChordStrategy.EIGHTH,
		lead: LeadStrategy = LeadStrategy.UPPER_EIGHTH
	) -> None:

		self.note_map = list(note_map)
		self.height = len(self.note_map)
		self.beat_duration = beat_duration
		self.rng = rng
		self.velocity = velocity
		self.bass = bass
		self.chords = chords
		self.lead = lead

		third = self.height // 3

		# Note-map indices, not pitches.
		self.last_bass_note = third // 2
		# Only reported in the debug log; chord roots are searched over the whole map.
		self.last_chord_root: typing.Optional[int] = None
		self.last_lead_note = (self.height + third) // 2


	def _weight (self, live: int, bias: int) -> int:

		return (self.rng.randrange(WEIGHT_RANGE) * live) % bias


	def _pick_near (self, slot: Slot, centre: int, low: int, high: int, bias: typing.Callable[[int], int]) -> typing.Optional[int]:

		"""
		Weighted pick among live cells within the search radius of ``centre``, limited to ``[low, high)``.
		"""

		centre = min(max(centre, low), high - 1)
		candidates = [j for j in range(centre - SEARCH_RADIUS, centre + SEARCH_RADIUS + 1) if low <= j < high]
		weights = [self._weight(slot[j], bias(j)) for j in candidates]

		best, weight = atone.sequence_utils.weighted_argmax(weights)

		if best < 0 or weight <= 0:
			return None

		return candidates[best]


	def _bass_notes (self, slots: typing.Sequence[Slot]) -> typing.List[SlotNotes]:

		notes: typing.List[SlotNotes] = []
		third = self.height // 3

		for slot in slots:

			index: typing.Optional[int] = None

			if self.bass is BassStrategy.LOWEST_NOTES:
				index = next((j for j in range(third) if slot[j]), None)

			elif self.bass is BassStrategy.LOWER_EIGHTH:
				index = self._pick_near(slot, self.last_bass_note, 0, third, lambda j: 2 * j + 1)

			if index is not None:
				self.last_bass_note = index

			notes.append((index,) if index is not None else None)

		return notes


	def _chord_root (self, slot: Slot) -> typing.Optional[int]:

		"""
		Weighted pick of a root whose third and fifth steps are also live.
		"""

		roots = range(self.height - 4)
		weights = [self._weight(slot[i] & slot[i + 2] & slot[i + 4], 2 * i + 1) for i in roots]

		best, weight = atone.sequence_utils.weighted_argmax(weights)

		if best < 0 or weight <= 0:
			return None

		return roots[best]


	def _chord_notes (self, slots: typing.Sequence[Slot]) -> typing.List[SlotNotes]:

		notes: typing.List[SlotNotes] = []

		for slot in slots:

			root = None if self.chords is ChordStrategy.NONE else self._chord_root(slot)

			if root is not None:
				self.last_chord_root = root

			notes.append((root, root + 2, root + 4) if root is not None else None)

		return notes


	def _lead_notes (self, slots: typing.Sequence[Slot]) -> typing.List[SlotNotes]:

		notes: typing.List[SlotNotes] = []
		third = self.height // 3
		height = self.height

		for slot in slots:

			index: typing.Optional[int] = None

			if self.lead is LeadStrategy.UPPER_EIGHTH:
				index = self._pick_near(slot, self.last_lead_note, third, height, lambda j: 2 * j + 1)

			elif self.lead is LeadStrategy.LOWER_EIGHTH:
				index = self._pick_near(slot, self.last_lead_note, 0, height - third, lambda j: 5 * j + 1)

			elif self.lead is LeadStrategy.UPPER_WHOLE:
				index = self._pick_near(slot, self.last_lead_note, third, height, lambda j: 5 * abs(height - j) + 1)

			if index is not None:
				self.last_lead_note = index

			notes.append((index,) if index is not None else None)

		return notes


	def _emit (self, pattern: atone.pattern.Pattern, voice: atone.pattern.Voice, notes: typing.Sequence[SlotNotes], velocity: int, tie: bool) -> None:

		"""
		Write per-slot notes into the pattern, optionally tying equal neighbours.
		"""

		slot_duration = atone.constants.BEATS_PER_BAR * self.beat_duration // len(notes)
		slot = 0

		while slot < len(notes):

			current = notes[slot]
			length = 1

			if tie:
				while slot + length < len(notes) and notes[slot + length] == current:
					length += 1

			if current is not None:
				pitches = [self.note_map[index] for index in current]
				pattern.add_chord(slot * slot_duration, voice, pitches, velocity, length * slot_duration)

			slot += length


	def play (self, pattern: atone.pattern.Pattern, slots: typing.Sequence[Slot]) -> None:

		"""
		Derive every enabled voice from one bar of slots.
		"""

		if self.bass is not BassStrategy.NONE:
			self._emit(
				pattern,
				atone.pattern.Voice.BASS,
				self._bass_notes(slots),
				atone.constants.velocity.scaled(self.velocity, 3, 4),
				tie = False
			)

		if self.chords is not ChordStrategy.NONE:
			self._emit(
				pattern,
				atone.pattern.Voice.CHORDS,
				self._chord_notes(slots),
				atone.constants.velocity.scaled(self.velocity, 2, 3),
				tie = self.chords is ChordStrategy.WHOLE
			)

		if self.lead is not LeadStrategy.NONE:
			self._emit(
				pattern,
				atone.pattern.Voice.LEAD,
				self._lead_notes(slots),
				self.velocity,
				tie = self.lead is LeadStrategy.UPPER_WHOLE
			)

		logger.debug(f"Voice cursors: bass {self.last_bass_note}, chord {self.last_chord_root}, lead {self.last_lead_note}")
