"""Grammar (L-system) engine.

A grammar is an axiom plus up to two context-free rules, each replacing a
single trigger character with a string.  The axiom is rewritten for a number
of generations once, when the engine is built, and the result is then read
as a little melody language:

- ``F`` doubles the duration of following notes (capped at one bar)
- ``p`` / ``m`` step the pitch cursor one note-map index up / down
- ``{`` plays a note at the cursor with the current duration
- ``X`` plays a rest of the current duration
- ``}`` returns the cursor to the centre of the note map and the duration to one unit

Every other character only structures the string.  One duration unit is an
eighth note; each bar consumes eight units of the precomputed melody.

Example:
	```python
	grammar = Grammar(axiom="Y", rule1=parse_rule("Y={pY}{mY}X"), generations=3)
	symbols = rewrite(grammar, capacity=1000)
	melody = interpret(symbols, note_map)
	```
"""

import dataclasses
import logging
import typing

import atone.constants
import atone.errors
import atone.pattern
import atone.sequence_utils


logger = logging.getLogger(__name__)

MAX_DURATION_UNITS = atone.constants.EIGHTHS_PER_BAR

END_POLICIES = ("stop", "loop")


@dataclasses.dataclass(frozen=True)
class Rule:

	"""
	Replace every ``trigger`` character with ``replacement``.
	"""

	trigger: str
	replacement: str


	def __post_init__ (self) -> None:

		if len(self.trigger) != 1:
			raise atone.errors.InvalidParameter(f"Rule trigger must be a single character, got {self.trigger!r}")


def parse_rule (value: typing.Union[None, str, typing.Sequence[str]]) -> typing.Optional[Rule]:

	"""Build a rule from ``"T=replacement"`` or a ``(trigger, replacement)`` pair.

	``None`` or an empty string means no rule.

	Raises:
		InvalidParameter: If the value cannot be read as a rule.
	"""

	if value is None or value == "":
		return None

	if isinstance(value, str):
		trigger, separator, replacement = value.partition("=")

		if not separator:
			raise atone.errors.InvalidParameter(f"Rule {value!r} must be written as 'T=replacement'")

		return Rule(trigger=trigger.strip(), replacement=replacement.strip())

	if len(value) != 2:
		raise atone.errors.InvalidParameter(f"Rule {value!r} must be a (trigger, replacement) pair")

	return Rule(trigger=str(value[0]), replacement=str(value[1]))


@dataclasses.dataclass(frozen=True)
class Grammar:

	"""
	An axiom, up to two rewrite rules and the number of generations to apply them.
	"""

	axiom: str
	rule1: typing.Optional[Rule] = None
	rule2: typing.Optional[Rule] = None
	generations: int = 1


@dataclasses.dataclass(frozen=True)
class LSystemNote:

	"""
	One entry of the interpreted melody.  ``pitch`` is ``None`` for a rest.
	"""

	pitch: typing.Optional[int]
	duration_units: int


def rewrite (grammar: Grammar, capacity: int) -> str:

	"""Apply the grammar's rules for ``grammar.generations`` rounds.

	Each round scans the string left to right and replaces every trigger
	character in a single pass; replacements are not rescanned until the next
	round.  If both rules share a trigger, ``rule1`` wins.

	Raises:
		CapacityExceeded: Before any generation whose result would be longer
			than ``capacity`` symbols.

	Example:
		```python
		rewrite(Grammar("X", Rule("X", "pFm"), generations=2), capacity=64)  # → "pFm"
		```
	"""

	if capacity <= 0:
		raise atone.errors.InvalidParameter("Rewrite capacity must be positive")

	replacements: typing.Dict[str, str] = {}

	for rule in (grammar.rule2, grammar.rule1):
		if rule is not None:
			replacements[rule.trigger] = rule.replacement

	current = grammar.axiom

	if len(current) > capacity:
		raise atone.errors.CapacityExceeded(0, len(current), capacity)

	for generation in range(1, grammar.generations + 1):

		length = sum(len(replacements[symbol]) if symbol in replacements else 1 for symbol in current)

		if length > capacity:
			raise atone.errors.CapacityExceeded(generation, length, capacity)

		current = "".join(replacements.get(symbol, symbol) for symbol in current)

	return current


def interpret (symbols: str, note_map: typing.Sequence[int]) -> typing.List[LSystemNote]:

	"""
	Read a rewritten string as a sequence of notes and rests.
	"""

	height = len(note_map)
	center = height // 2

	cursor = center
	units = 1
	melody: typing.List[LSystemNote] = []

	for symbol in symbols:

		if symbol == "F":
			units = min(units * 2, MAX_DURATION_UNITS)

		elif symbol == "p":
			cursor = atone.sequence_utils.fold_index(cursor + 1, height)

		elif symbol == "m":
			cursor = atone.sequence_utils.fold_index(cursor - 1, height)

		elif symbol == "{":
			melody.append(LSystemNote(pitch=note_map[cursor], duration_units=units))

		elif symbol == "X":
			melody.append(LSystemNote(pitch=None, duration_units=units))

		elif symbol == "}":
			cursor = center
			units = 1

	return melody


class LSystemEngine:

	"""
	Streams a precomputed grammar melody, one bar per call.
	"""

	def __init__ (
		self,
		grammar: Grammar,
		note_map: typing.Sequence[int],
		beat_duration: int,
		velocity: int = 80,
		capacity: int = 65536,
		end_policy: str = "stop",
		voice: atone.pattern.Voice = atone.pattern.Voice.MELODY
	) -> None:

		"""Rewrite and interpret the grammar.

		Raises:
			CapacityExceeded: If the rewrite outgrows ``capacity``.
		"""

		if end_policy not in END_POLICIES:
			raise ValueError(f"end_policy must be one of {END_POLICIES}")

		self.grammar = grammar
		self.beat_duration = beat_duration
		self.velocity = velocity
		self.end_policy = end_policy
		self.voice = voice

		self.symbols = rewrite(grammar, capacity)
		self.melody = interpret(self.symbols, note_map)

		logger.info(f"Grammar expanded to {len(self.symbols)} symbols, {len(self.melody)} notes")

		if not self.melody:
			logger.warning("Grammar produces no notes or rests - the melody voice will stay silent")

		self.lstate = 0
		self.last_note: typing.Optional[int] = None
		self.finished = False
		self._carry_units = 0


	def _next_note (self) -> typing.Optional[LSystemNote]:

		"""
		Return the note under the cursor and advance, or None once the melody is used up.
		"""

		if self.lstate >= len(self.melody):

			if self.end_policy == "loop" and self.melody:
				self.lstate = 0

			else:
				if not self.finished:
					logger.info(f"Grammar melody finished after {len(self.melody)} notes")
				self.finished = True
				return None

		note = self.melody[self.lstate]
		self.lstate += 1

		return note


	def generate (self, pattern: atone.pattern.Pattern) -> None:

		"""Fill a bar with the next eight units of the melody.

		A note that runs past the bar line sounds in full and the overrun
		is skipped at the start of the next bar.
		"""

		bar_duration = atone.constants.BEATS_PER_BAR * self.beat_duration
		units_per_bar = atone.constants.EIGHTHS_PER_BAR

		used = self._carry_units
		self._carry_units = 0

		if self.finished:
			return

		while used < units_per_bar:

			note = self._next_note()

			if note is None:
				return

			position = bar_duration * used // units_per_bar
			duration = bar_duration * note.duration_units // units_per_bar

			if note.pitch is not None and duration > 0:
				pattern.add_note(position, self.voice, note.pitch, self.velocity, duration)
				self.last_note = note.pitch

			used += note.duration_units

		self._carry_units = used - units_per_bar
