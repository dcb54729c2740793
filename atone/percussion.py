"""Percussion accompaniment.

Every engine plays one percussion track per bar underneath its melodic
voices.  A track is a list of steps; each step names a beat division (4 =
quarter note, 8 = eighth note, 12 = eighth-note triplet...) and up to three
drums struck together at the start of the step.  A step with no drums is a
rest.  Step lengths in a track add up to exactly one bar.
"""

import dataclasses
import typing

import atone.config
import atone.constants
import atone.constants.gm_drums as gm_drums
import atone.pattern


MAX_DRUMS_PER_STEP = 3

PercussionStep = typing.Tuple[int, typing.Tuple[int, ...]]

K = gm_drums.KICK
S = gm_drums.SNARE
H = gm_drums.HI_HAT_CLOSED
O = gm_drums.HI_HAT_OPEN


@dataclasses.dataclass(frozen=True)
class PercussionTrack:

	"""
	A named one-bar percussion pattern.
	"""

	name: str
	steps: typing.Tuple[PercussionStep, ...]


	def __post_init__ (self) -> None:

		total = 0.0

		for division, drums in self.steps:

			if division <= 0:
				raise ValueError(f"Track {self.name!r}: beat division must be positive")

			if len(drums) > MAX_DRUMS_PER_STEP:
				raise ValueError(f"Track {self.name!r}: at most {MAX_DRUMS_PER_STEP} drums per step")

			total += 1.0 / division

		if abs(total - 1.0) > 1e-9:
			raise ValueError(f"Track {self.name!r} spans {total:.3f} bars, expected 1")


def _track (name: str, *steps: PercussionStep) -> PercussionTrack:

	return PercussionTrack(name=name, steps=tuple(steps))


TRACKS: typing.Dict[str, PercussionTrack] = {track.name.lower(): track for track in (
	_track("Metronome",
		(4, (gm_drums.METRONOME_BELL,)), (4, (gm_drums.METRONOME_CLICK,)),
		(4, (gm_drums.METRONOME_CLICK,)), (4, (gm_drums.METRONOME_CLICK,))),
	_track("Rock",
		(8, (K, H)), (8, (H,)), (8, (S, H)), (8, (H,)),
		(8, (K, H)), (8, (K, H)), (8, (S, H)), (8, (H,))),
	_track("Pop",
		(8, (K, H)), (8, (H,)), (8, (S, H)), (8, (K, H)),
		(8, (H,)), (8, (K, H)), (8, (S, H)), (8, (O,))),
	_track("Disco",
		(8, (K,)), (8, (O,)), (8, (K, S)), (8, (O,)),
		(8, (K,)), (8, (O,)), (8, (K, S)), (8, (O,))),
	_track("Shuffle",
		(6, (K, H)), (12, (H,)), (6, (S, H)), (12, (H,)),
		(6, (K, H)), (12, (H,)), (6, (S, H)), (12, (H,))),
	_track("Funk",
		(16, (K, H)), (16, ()), (16, (H,)), (16, (K,)),
		(16, (S, H)), (16, ()), (16, (H,)), (16, (S,)),
		(16, (H,)), (16, (K,)), (16, (K, H)), (16, ()),
		(16, (S, H)), (16, ()), (16, (O,)), (16, ())),
	_track("Bossa Nova",
		(8, (K, gm_drums.SIDE_STICK)), (8, (H,)), (8, (H,)), (8, (K, gm_drums.SIDE_STICK)),
		(8, (K, H)), (8, (H, gm_drums.SIDE_STICK)), (8, (H,)), (8, (K, H))),
	_track("Reggae",
		(4, (H,)), (4, (K, gm_drums.SIDE_STICK, H)),
		(4, (H,)), (4, (K, gm_drums.SIDE_STICK, H))),
	_track("March",
		(8, (K, S)), (16, (S,)), (16, (S,)), (8, (S,)), (8, (S,)),
		(8, (K, S)), (8, (S,)), (4, (gm_drums.CRASH, K))),
	_track("Techno",
		(8, (K,)), (8, (O,)), (8, (K, gm_drums.HAND_CLAP)), (8, (O,)),
		(8, (K,)), (8, (O,)), (8, (K, gm_drums.HAND_CLAP)), (8, (O,))),
	_track("Latin",
		(8, (gm_drums.CLAVES, gm_drums.LOW_CONGA)), (8, (gm_drums.MUTE_HIGH_CONGA,)),
		(8, (gm_drums.OPEN_HIGH_CONGA,)), (8, (gm_drums.CLAVES, gm_drums.LOW_CONGA)),
		(8, (gm_drums.MUTE_HIGH_CONGA,)), (8, (gm_drums.CLAVES, gm_drums.OPEN_HIGH_CONGA)),
		(8, (gm_drums.CLAVES,)), (8, (gm_drums.LOW_CONGA,))),
	_track("Silence", (1, ())),
)}

DEFAULT_TRACK = "metronome"


def get_track (name: str, strict: bool = False) -> PercussionTrack:

	"""Look up a percussion track by name, ignoring case.

	Unknown names fall back to the metronome.
	"""

	key = atone.config.resolve_choice("percussion track", name, list(TRACKS), DEFAULT_TRACK, strict)

	return TRACKS[key]


def add_percussion (pattern: atone.pattern.Pattern, track: PercussionTrack, beat_duration: int, velocity: int) -> None:

	"""Write one bar of a percussion track into a pattern.

	Each step lasts ``4 * beat_duration // division`` ticks and its drums
	sound for the whole step on the percussion voice.
	"""

	position = 0

	for division, drums in track.steps:

		duration = atone.constants.BEATS_PER_BAR * beat_duration // division

		if duration > 0:
			pattern.add_chord(position, atone.pattern.Voice.PERCUSSION, drums, velocity, duration)

		position += duration
