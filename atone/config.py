"""Engine configuration.

All engine parameters live on one ``EngineConfig`` dataclass.  Numeric
parameters are checked when the config is created and raise
``InvalidParameter``; names (scale, algorithm, percussion track, strategy)
are resolved later by the component that uses them, through ``fallback()``,
so an unknown name degrades to a documented default instead of stopping
the music.

Configs can be written in YAML::

    algorithm: ca
    bpm: 96
    scale: A minor pentatonic
    rule: 110
    boundary: infinite
    lead: upper_whole
    seed: 7
"""

import dataclasses
import logging
import os
import typing

import yaml

import atone.constants
import atone.constants.velocity
import atone.errors


logger = logging.getLogger(__name__)

T = typing.TypeVar("T")

ALGORITHMS = ("riff", "lsystem", "ca")

MAX_NEIGHBOURHOOD_SIZE = 9


def fallback (field: str, value: typing.Any, default: T, strict: bool = False) -> T:

	"""Report an unknown configuration name and return its default.

	Raises:
		ConfigurationError: When ``strict`` is set.
	"""

	if strict:
		raise atone.errors.ConfigurationError(field, value, default)

	logger.warning(f"Unknown {field} {value!r} - falling back to {default!r}")

	return default


def resolve_choice (field: str, value: str, choices: typing.Sequence[str], default: str, strict: bool = False) -> str:

	"""
	Return ``value`` if it names one of ``choices``, otherwise the default.
	"""

	name = value.strip().lower()

	if name in choices:
		return name

	return fallback(field, value, default, strict)


def _check_range (name: str, value: int, low: int, high: typing.Optional[int] = None) -> None:

	"""
	Raise InvalidParameter unless ``low <= value <= high``.
	"""

	if isinstance(value, bool) or not isinstance(value, int):
		raise atone.errors.InvalidParameter(f"{name} must be an integer, got {value!r}")

	if value < low or (high is not None and value > high):
		bounds = f"{low}..{high}" if high is not None else f">= {low}"
		raise atone.errors.InvalidParameter(f"{name} must be {bounds}, got {value}")


@dataclasses.dataclass
class EngineConfig:

	"""Every parameter of an engine instance.

	Attributes:
		algorithm: ``"riff"``, ``"lsystem"`` or ``"ca"``.
		bpm: Tempo in beats per minute, at most ``atone.constants.MAX_BPM``.
		scale: Scale name, e.g. ``"C major"`` or ``"E blues"``.
		velocity: Velocity of melodic voices.
		percussion_velocity: Velocity of percussion hits.
		percussion: Name of the percussion track played every bar.
		riffs: Name of the riff catalog used by the riff engine.
		numbars: Length of the riff engine's energy arc in bars.
		axiom: Start string of the grammar.
		rule1: First rewrite rule, ``"T=replacement"``.
		rule2: Second rewrite rule, or empty for none.
		generations: Number of rewrite rounds.
		capacity: Largest string (in symbols) a rewrite may produce.
		lsystem_end: ``"stop"`` or ``"loop"`` once the grammar melody is used up.
		rule: Automaton rule number; bits beyond the rule table are ignored.
		neighbours: Neighbourhood bitmask of the automaton.
		height: Note map size, also the automaton window width.
		boundary: ``"cyclic"`` or ``"infinite"``.
		bass: Automaton bass strategy.
		chords: Automaton chord strategy.
		lead: Automaton lead strategy.
		instrument: Instrument of the riff and grammar melody.
		bass_instrument: Instrument of the automaton bass.
		chords_instrument: Instrument of the automaton chords.
		lead_instrument: Instrument of the automaton lead.
		seed: Random seed.  ``None`` draws one and logs it.
		strict: Raise ``ConfigurationError`` on unknown names instead of
			falling back.
	"""

	algorithm: str = "riff"
	bpm: int = 100
	scale: str = "C major"
	velocity: int = atone.constants.velocity.DEFAULT_VELOCITY
	percussion_velocity: int = atone.constants.velocity.DEFAULT_PERCUSSION_VELOCITY
	percussion: str = "Metronome"

	riffs: str = "classic"
	numbars: int = 2

	axiom: str = "Y"
	rule1: typing.Union[str, typing.Sequence[str]] = "Y={pY}{mY}X"
	rule2: typing.Union[str, typing.Sequence[str]] = "X=p{F}m"
	generations: int = 4
	capacity: int = 65536
	lsystem_end: str = "stop"

	rule: int = 30
	neighbours: int = 7
	height: int = 24
	boundary: str = "cyclic"
	bass: str = "lowest_notes"
	chords: str = "eighth"
	lead: str = "upper_eighth"

	instrument: str = "Trumpet"
	bass_instrument: str = "Electric Bass (finger)"
	chords_instrument: str = "Acoustic Grand Piano"
	lead_instrument: str = "Flute"

	seed: typing.Optional[int] = None
	strict: bool = False


	def __post_init__ (self) -> None:

		"""
		Validate numeric parameters.
		"""

		_check_range("bpm", self.bpm, 1, atone.constants.MAX_BPM)
		_check_range("velocity", self.velocity, 0, 127)
		_check_range("percussion_velocity", self.percussion_velocity, 0, 127)
		_check_range("numbars", self.numbars, 1, 8)
		_check_range("generations", self.generations, 0, 64)
		_check_range("capacity", self.capacity, 1)
		_check_range("height", self.height, 6, 32)
		_check_range("neighbours", self.neighbours, 1, (1 << 31) - 1)

		size = bin(self.neighbours).count("1")

		if size > MAX_NEIGHBOURHOOD_SIZE:
			raise atone.errors.InvalidParameter(
				f"neighbours mask {self.neighbours:#b} selects {size} cells, at most {MAX_NEIGHBOURHOOD_SIZE} are allowed"
			)

		_check_range("rule", self.rule, 0)

		if self.seed is not None:
			_check_range("seed", self.seed, 0)


	@classmethod
	def from_dict (cls, data: typing.Dict[str, typing.Any]) -> "EngineConfig":

		"""Build a config from a mapping, ignoring keys it does not know.

		Unknown keys are logged so a misspelt option is noticed.
		"""

		known = {field.name for field in dataclasses.fields(cls)}
		unknown = sorted(set(data) - known)

		if unknown:
			logger.warning(f"Ignoring unknown config keys: {unknown}")

		return cls(**{key: value for key, value in data.items() if key in known})


def load_config (config_path: str = "atone.yaml") -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, "r") as f:
		data = yaml.safe_load(f)

	if data is None:
		return {}

	if not isinstance(data, dict):
		raise atone.errors.InvalidParameter(f"Config file {config_path} must contain a mapping")

	return data
