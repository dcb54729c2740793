import enum
import logging
import random
import typing

import atone.automaton
import atone.config
import atone.lsystem
import atone.note_map
import atone.pattern
import atone.percussion
import atone.riffs
import atone.sequencer
import atone.voices


logger = logging.getLogger(__name__)


class Algorithm (enum.Enum):

	"""
	The generator that writes the melodic voices of each bar.
	"""

	RIFF = "riff"
	LSYSTEM = "lsystem"
	CA = "ca"


class Engine:

	"""
	A configured composition: one generator, a percussion track and a sequencer.

	The engine always keeps one bar scheduled ahead of playback.  ``start()``
	writes the instrument changes and the first bar and arms a trigger at
	the start of that bar; each time ``play_until()`` reaches a trigger the
	next bar is generated and the trigger re-armed one bar later.

	Example:
		```python
		engine = atone.Engine(atone.EngineConfig(algorithm="ca", rule=110, seed=3))
		engine.render(bars=32, filename="rule110.mid")
		```
	"""

	def __init__ (
		self,
		config: typing.Optional[atone.config.EngineConfig] = None,
		midi_out: typing.Optional[typing.Any] = None,
		record: bool = False
	) -> None:

		"""Resolve the configuration and build the selected generator.

		Parameters:
			config: Engine parameters (defaults when omitted).
			midi_out: Optional open mido output port for live playback.
			record: Keep dispatched events for ``save_recording()``.

		Raises:
			InvalidParameter: If a numeric parameter is out of range.
			ConfigurationError: If a name is unknown and ``config.strict`` is set.
			CapacityExceeded: If the grammar outgrows ``config.capacity``.
		"""

		self.config = config if config is not None else atone.config.EngineConfig()
		strict = self.config.strict

		if self.config.seed is None:
			self.seed = random.randrange(1 << 32)
			logger.info(f"No seed given, using seed {self.seed}")
		else:
			self.seed = self.config.seed

		self.rng = random.Random(self.seed)

		self.algorithm = Algorithm(atone.config.resolve_choice(
			"algorithm",
			self.config.algorithm,
			[algorithm.value for algorithm in Algorithm],
			Algorithm.RIFF.value,
			strict
		))

		self.scale = atone.note_map.parse_scale(self.config.scale, strict)
		self.note_map = atone.note_map.build_note_map(self.scale, self.config.height)

		self.sequencer = atone.sequencer.Sequencer(bpm=self.config.bpm, midi_out=midi_out, record=record)
		self.percussion = atone.percussion.get_track(self.config.percussion, strict)

		self.riff_engine: typing.Optional[atone.riffs.RiffEngine] = None
		self.lsystem_engine: typing.Optional[atone.lsystem.LSystemEngine] = None
		self.automaton: typing.Optional[atone.automaton.CellularAutomaton] = None
		self.voices: typing.Optional[atone.voices.DerivedVoices] = None

		self._build_generator()

		self.started = False
		self.bars_generated = 0

		logger.info(
			f"Engine ready: {self.algorithm.value} at {self.config.bpm} BPM, "
			f"scale {self.config.scale!r}, percussion {self.percussion.name!r}"
		)


	def _build_generator (self) -> None:

		config = self.config
		strict = config.strict
		beat_duration = self.sequencer.beat_duration

		if self.algorithm is Algorithm.RIFF:
			self.riff_engine = atone.riffs.RiffEngine(
				note_map = self.note_map,
				beat_duration = beat_duration,
				rng = self.rng,
				catalog = atone.riffs.get_catalog(config.riffs, strict),
				numbars = config.numbars,
				velocity = config.velocity
			)

		elif self.algorithm is Algorithm.LSYSTEM:
			grammar = atone.lsystem.Grammar(
				axiom = config.axiom,
				rule1 = atone.lsystem.parse_rule(config.rule1),
				rule2 = atone.lsystem.parse_rule(config.rule2),
				generations = config.generations
			)

			end_policy = atone.config.resolve_choice(
				"grammar end policy", config.lsystem_end, atone.lsystem.END_POLICIES, "stop", strict
			)

			self.lsystem_engine = atone.lsystem.LSystemEngine(
				grammar = grammar,
				note_map = self.note_map,
				beat_duration = beat_duration,
				velocity = config.velocity,
				capacity = config.capacity,
				end_policy = end_policy
			)

		elif self.algorithm is Algorithm.CA:
			boundary = atone.config.resolve_choice(
				"boundary", config.boundary, [b.value for b in atone.automaton.Boundary], "cyclic", strict
			)

			self.automaton = atone.automaton.CellularAutomaton(
				rule = config.rule,
				neighbours = config.neighbours,
				height = config.height,
				rng = self.rng,
				boundary = atone.automaton.Boundary(boundary)
			)

			self.voices = atone.voices.DerivedVoices(
				note_map = self.note_map,
				beat_duration = beat_duration,
				rng = self.rng,
				velocity = config.velocity,
				bass = atone.voices.BassStrategy(_strategy("bass", config.bass, atone.voices.BassStrategy, "lowest_notes", strict)),
				chords = atone.voices.ChordStrategy(_strategy("chords", config.chords, atone.voices.ChordStrategy, "eighth", strict)),
				lead = atone.voices.LeadStrategy(_strategy("lead", config.lead, atone.voices.LeadStrategy, "upper_eighth", strict))
			)


	def instruments (self) -> typing.List[typing.Tuple[atone.pattern.Voice, str]]:

		"""
		The instrument of each melodic voice the selected generator plays.
		"""

		if self.algorithm is not Algorithm.CA:
			return [(atone.pattern.Voice.MELODY, self.config.instrument)]

		assert self.voices is not None

		selected = [
			(self.voices.bass is not atone.voices.BassStrategy.NONE, atone.pattern.Voice.BASS, self.config.bass_instrument),
			(self.voices.chords is not atone.voices.ChordStrategy.NONE, atone.pattern.Voice.CHORDS, self.config.chords_instrument),
			(self.voices.lead is not atone.voices.LeadStrategy.NONE, atone.pattern.Voice.LEAD, self.config.lead_instrument),
		]

		return [(voice, instrument) for active, voice, instrument in selected if active]


	def program_events (self, tick: int = 0) -> typing.List[atone.pattern.ProgramEvent]:

		return [atone.pattern.ProgramEvent(voice=voice, instrument=instrument, tick=tick) for voice, instrument in self.instruments()]


	def generate_bar (self) -> typing.List[atone.pattern.NoteEvent]:

		"""Generate and schedule the bar at the time marker.

		The generator writes its voices, the percussion track is added and the
		whole bar is scheduled before the time marker moves on by one bar.
		Returns the bar's note events with absolute ticks.
		"""

		start_tick = self.sequencer.time_marker
		pattern = atone.pattern.Pattern(length=self.sequencer.bar_duration)

		if self.algorithm is Algorithm.RIFF:
			assert self.riff_engine is not None
			self.riff_engine.generate(pattern)

		elif self.algorithm is Algorithm.LSYSTEM:
			assert self.lsystem_engine is not None
			self.lsystem_engine.generate(pattern)

		elif self.algorithm is Algorithm.CA:
			assert self.automaton is not None and self.voices is not None
			self.voices.play(pattern, self.automaton.advance_bar())

		atone.percussion.add_percussion(pattern, self.percussion, self.sequencer.beat_duration, self.config.percussion_velocity)

		events = self.sequencer.schedule_pattern(pattern, start_tick)
		self.sequencer.advance_bar()
		self.bars_generated += 1

		logger.debug(f"Bar {self.bars_generated} at tick {start_tick}: {len(events)} notes")

		return events


	def start (self) -> None:

		"""
		Schedule the instrument changes and the first bar, and arm the generation trigger.
		"""

		if self.started:
			raise RuntimeError("Engine already started")

		tick = self.sequencer.time_marker

		for event in self.program_events(tick):
			self.sequencer.schedule_program(event.voice, event.instrument, event.tick)

		self.sequencer.set_trigger(self._on_trigger)
		self.generate_bar()
		self.sequencer.schedule_self(tick)

		self.started = True


	def _on_trigger (self, tick: int) -> None:

		"""
		Generate the next bar while the current one plays, then re-arm for the next bar line.
		"""

		self.generate_bar()
		self.sequencer.schedule_self(tick + self.sequencer.bar_duration)


	def play_until (self, tick: int) -> int:

		"""
		Deliver every event due by ``tick``, generating bars as triggers come due.
		"""

		if not self.started:
			self.start()

		return self.sequencer.dispatch(tick)


	def render (self, bars: int = 16, filename: str = "atone.mid") -> None:

		"""Render ``bars`` bars to a Standard MIDI File without real-time playback.

		Notes still sounding at the last bar line are cut there.

		Raises:
			ValueError: If ``bars`` is not positive.
			RuntimeError: If the engine has already started playing.
		"""

		if bars <= 0:
			raise ValueError("render() needs a positive number of bars")

		if self.started:
			raise RuntimeError("render() must run on an engine that has not started")

		self.sequencer.recording = True

		end_tick = self.sequencer.time_marker + bars * self.sequencer.bar_duration

		logger.info(f"Rendering {bars} bars to {filename}")

		# Events at the final bar line belong to the next bar.
		self.play_until(end_tick - 1)
		self.sequencer.release_notes(end_tick)

		self.sequencer.save_recording(filename)


def _strategy (field: str, value: str, strategies: typing.Type[enum.Enum], default: str, strict: bool) -> str:

	return atone.config.resolve_choice(field, value, [strategy.value for strategy in strategies], default, strict)
