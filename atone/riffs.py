"""Riff engine - stitches short melodic templates into bars.

A riff is a fixed template of ``NOTES_PER_RIFF`` entries.  Each entry is a
scale degree relative to the centre of the note map (0 is the root, 7 an
octave up in a seven-note scale), ``HOLD`` to extend the previous note, or
``REST`` for silence.

Every bar the engine:

1. nudges a subdivision level so the bar holds 1, 2 or 4 riffs,
2. reads an energy level from a curve over ``numbars`` bars,
3. picks riffs whose first note lies close to the last note played, and
4. plays them, randomly thinning notes into holds and rests.  Low energy
   and weak beats (see ``BEAT_IMPORTANCE``) thin more.
"""

import logging
import random
import typing

import atone.config
import atone.constants
import atone.pattern
import atone.sequence_utils


logger = logging.getLogger(__name__)

NOTES_PER_RIFF = 8

HOLD = "H"
REST = "R"

RiffEntry = typing.Union[int, str]
Riff = typing.Tuple[RiffEntry, ...]

# Per-position bias against thinning: the downbeat is the most important,
# then the half-bar, then the quarters.
BEAT_IMPORTANCE: typing.Tuple[int, ...] = (28, 0, 7, 0, 14, 0, 7, 4)

# Distance assigned to a candidate that would repeat the last note exactly.
REPEAT_DISTANCE = 6

PICK_CANDIDATES = 3

H = HOLD
R = REST

RIFF_CATALOGS: typing.Dict[str, typing.Tuple[Riff, ...]] = {
	"classic": (
		(0, 2, 4, 2, 0, H, R, R),
		(4, 3, 2, 1, 0, H, H, R),
		(0, H, 4, H, 7, H, 4, R),
		(2, 4, 5, 4, 2, H, 0, H),
		(4, H, 5, 4, 2, H, 1, H),
		(7, 6, 5, 4, 3, 2, 1, 0),
		(0, 1, 2, 3, 4, H, H, R),
		(-3, -1, 0, H, 2, H, 0, R),
		(4, 2, 4, 5, 7, H, 5, 4),
		(2, H, 1, 0, -1, H, 0, H),
		(0, 0, 4, 4, 5, 5, 4, H),
		(3, 3, 2, 2, 1, 1, 0, H),
		(4, R, 4, R, 5, 4, 2, R),
		(0, 2, 0, -1, 0, H, R, R),
		(5, H, 4, H, 2, H, 4, H),
		(-1, 0, 1, 2, 1, 0, -1, -3),
		(7, H, 4, H, 2, 0, 2, R),
		(1, 2, 3, 4, 5, 4, 3, 2),
		(0, R, 2, R, 4, R, 7, H),
		(6, 7, 4, H, 2, 3, 4, H),
	),
	"arpeggio": (
		(0, 2, 4, 7, 4, 2, 0, H),
		(0, 4, 7, 4, 0, 4, 7, H),
		(2, 4, 6, 9, 6, 4, 2, H),
		(-3, 0, 2, 4, 2, 0, -3, H),
		(4, 7, 9, 11, 9, 7, 4, H),
		(0, 2, 4, 2, 0, 2, 4, 7),
		(-1, 1, 3, 6, 3, 1, -1, H),
		(3, 5, 7, 10, 7, 5, 3, H),
	),
}

DEFAULT_CATALOG = "classic"


def validate_riff (riff: Riff) -> None:

	"""
	Raise ValueError unless a riff has the right length and at least one note.
	"""

	if len(riff) != NOTES_PER_RIFF:
		raise ValueError(f"Riff must have {NOTES_PER_RIFF} entries, got {len(riff)}")

	for entry in riff:
		if entry not in (HOLD, REST) and not isinstance(entry, int):
			raise ValueError(f"Invalid riff entry {entry!r}")

	if all(entry in (HOLD, REST) for entry in riff):
		raise ValueError("Riff must contain at least one note")


def get_catalog (name: str, strict: bool = False) -> typing.Tuple[Riff, ...]:

	"""
	Look up a riff catalog by name.  Unknown names fall back to ``classic``.
	"""

	key = atone.config.resolve_choice("riff catalog", name, list(RIFF_CATALOGS), DEFAULT_CATALOG, strict)

	return RIFF_CATALOGS[key]


def energy_curve (i: int, numbars: int) -> int:

	"""Energy of bar ``i`` in an arc of ``numbars`` bars.

	High in the first third, falling linearly; a steady 70 in the middle
	third; rising again from 40 in the final third.  Values above 100 are
	possible near the end of the arc and simply mean no thinning.

	Example:
		```python
		energy_curve(0, 6)  # → 100
		energy_curve(1, 6)  # → 85
		energy_curve(3, 6)  # → 70
		energy_curve(5, 6)  # → 115
		```
	"""

	if numbars <= 0:
		raise ValueError("numbars must be positive")

	if 3 * i < numbars:
		return 100 - (90 * i) // numbars

	if 3 * i > 2 * numbars:
		return 40 + (90 * i) // numbars

	return 70


class RiffEngine:

	"""
	Plays one bar of stitched, perturbed riffs per call.
	"""

	def __init__ (
		self,
		note_map: typing.Sequence[int],
		beat_duration: int,
		rng: random.Random,
		catalog: typing.Sequence[Riff] = RIFF_CATALOGS[DEFAULT_CATALOG],
		numbars: int = 2,
		velocity: int = 80,
		voice: atone.pattern.Voice = atone.pattern.Voice.MELODY
	) -> None:

		"""Initialize the engine.

		Parameters:
			note_map: Shared pitch table; riff degrees are offsets from its centre.
			beat_duration: Beat length in ticks.
			rng: Random generator owned by the calling engine.
			catalog: Riff templates to choose from.
			numbars: Length of the energy arc.
			velocity: Note velocity.
			voice: Voice the riffs are played on.
		"""

		if not catalog:
			raise ValueError("Riff catalog cannot be empty")

		for riff in catalog:
			validate_riff(riff)

		if numbars <= 0:
			raise ValueError("numbars must be positive")

		self.note_map = list(note_map)
		self.beat_duration = beat_duration
		self.rng = rng
		self.catalog = list(catalog)
		self.numbars = numbars
		self.velocity = velocity
		self.voice = voice

		self.last_note: typing.Optional[int] = None


	def pitch_of (self, degree: int) -> int:

		"""
		Resolve a riff degree to a pitch through the note map.
		"""

		height = len(self.note_map)
		index = atone.sequence_utils.fold_index(height // 2 + degree, height)

		return self.note_map[index]


	def first_pitch (self, riff_index: int) -> int:

		"""
		Pitch of the first sounding entry of a riff.
		"""

		for entry in self.catalog[riff_index]:
			if entry not in (HOLD, REST):
				return self.pitch_of(typing.cast(int, entry))

		raise ValueError(f"Riff {riff_index} has no notes")


	def pick_riff (self) -> int:

		"""Choose the next riff index.

		Draws three candidates and keeps the one whose first note is closest
		to the last note played.  An exact repeat counts as distance 6 so
		the melody does not stall.  Before any note has been played the
		first candidate is taken as is.
		"""

		best_riff = -1
		best_distance = 0

		for _ in range(PICK_CANDIDATES):

			riff = self.rng.randrange(len(self.catalog))

			if self.last_note is None:
				return riff

			distance = abs(self.last_note - self.first_pitch(riff))

			if distance == 0:
				distance = REPEAT_DISTANCE

			if best_riff < 0 or distance < best_distance:
				best_riff = riff
				best_distance = distance

		return best_riff


	def _perturb (self, riff: Riff, energy: int) -> typing.List[RiffEntry]:

		"""
		Randomly turn notes into holds or rests, more often on weak beats and at low energy.
		"""

		entries: typing.List[RiffEntry] = []

		for i, entry in enumerate(riff):

			if entry not in (HOLD, REST) and self.rng.randrange(100) >= energy + BEAT_IMPORTANCE[i]:
				entry = HOLD if self.rng.random() < 0.5 else REST

			entries.append(entry)

		return entries


	def play_riff (self, pattern: atone.pattern.Pattern, riff_index: int, energy: int, note_duration: int, position: int) -> int:

		"""Write one perturbed riff into a pattern starting at ``position``.

		Holds lengthen the note before them, consecutive rests merge, and
		repeated pitches merge into a single longer note.  Returns the
		position just after the riff.
		"""

		# (pitch or None for silence, length in riff steps)
		segments: typing.List[typing.List[typing.Any]] = []

		for entry in self._perturb(self.catalog[riff_index], energy):

			if entry == HOLD and segments:
				segments[-1][1] += 1
				continue

			pitch = None if entry in (HOLD, REST) else self.pitch_of(typing.cast(int, entry))

			if segments and segments[-1][0] == pitch:
				segments[-1][1] += 1
			else:
				segments.append([pitch, 1])

		for pitch, steps in segments:

			duration = steps * note_duration

			if pitch is not None:
				pattern.add_note(position, self.voice, pitch, self.velocity, duration)
				self.last_note = pitch

			position += duration

		return position


	def generate (self, pattern: atone.pattern.Pattern) -> None:

		"""
		Fill a bar pattern with riffs.
		"""

		tempo = 1

		if tempo > self.rng.randrange(3):
			tempo -= 1
		elif tempo < self.rng.randrange(3):
			tempo += 1

		riffs_per_bar = 1 << (tempo % 3)
		bar_duration = atone.constants.BEATS_PER_BAR * self.beat_duration
		note_duration = bar_duration // (NOTES_PER_RIFF * riffs_per_bar)
		energy = energy_curve(self.rng.randrange(self.numbars), self.numbars)

		logger.debug(f"Riff bar: {riffs_per_bar} riffs, energy {energy}")

		position = 0

		for _ in range(riffs_per_bar):
			riff = self.pick_riff()
			position = self.play_riff(pattern, riff, energy, note_duration, position)
