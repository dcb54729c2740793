"""Scale names and note maps.

A note map is the shared pitch lookup table of every engine: index ``i``
holds the absolute MIDI pitch of the ``i``-th scale step, counting upward
from the bottom of the table.  The middle index (``height // 2``) holds the
scale root in octave 4, and the rest of the table tiles the scale's
intervals outward one octave (12 semitones) at a time.

Scale names are written as a root letter, an optional accidental and a
quality, e.g. ``"C major"``, ``"F# harmonic minor"``, ``"Bb_blues"`` or
``"A minor-pentatonic"``.
"""

import dataclasses
import logging
import re
import typing

import atone.config
import atone.errors
import atone.intervals


logger = logging.getLogger(__name__)

CENTER_OCTAVE = 4

_SCALE_NAME_PATTERN = re.compile(r"^\s*([A-Ga-g])([#b]?)[\s_-]*(.*?)\s*$")


@dataclasses.dataclass(frozen=True)
class Scale:

	"""
	A resolved scale: root pitch class plus one octave of intervals.
	"""

	root_pc: int
	quality: str
	intervals: typing.Tuple[int, ...]


	@property
	def root_pitch (self) -> int:

		"""
		MIDI pitch of the root in the centre octave.
		"""

		return 12 * (CENTER_OCTAVE + 1) + self.root_pc


def parse_scale (name: str, strict: bool = False) -> Scale:

	"""Resolve a scale name into a ``Scale``.

	Unknown qualities fall back to the major scale and an unparseable root
	falls back to C.  Both fallbacks log a warning, or raise
	``ConfigurationError`` when ``strict`` is set.

	Example:
		```python
		parse_scale("D dorian")         # unknown quality → D major, warning
		parse_scale("G minor pentatonic").intervals  # → (0, 3, 5, 7, 10)
		```
	"""

	match = _SCALE_NAME_PATTERN.match(name)

	if match is None:
		atone.config.fallback("scale", name, "C major", strict)
		letter, accidental, token = "C", "", ""

	else:
		letter, accidental, token = match.groups()

	root_pc = atone.intervals.key_name_to_pc(letter, accidental)
	quality = atone.intervals.normalize_quality(token)

	if quality not in atone.intervals.SCALE_INTERVALS:
		quality = atone.config.fallback("scale quality", token, atone.intervals.DEFAULT_SCALE_QUALITY, strict)

	return Scale(
		root_pc = root_pc,
		quality = quality,
		intervals = tuple(atone.intervals.get_intervals(quality))
	)


def build_note_map (scale: Scale, height: int) -> typing.List[int]:

	"""Expand a scale across octaves into a table of ``height`` pitches.

	Index ``height // 2`` is the root in octave 4.  Moving one index up or
	down moves one scale step; every ``len(scale.intervals)`` steps is one
	octave.

	Raises:
		InvalidParameter: If ``height`` is not positive or the table would
			leave the MIDI pitch range.

	Example:
		```python
		build_note_map(parse_scale("C major"), 5)  # → [57, 59, 60, 62, 64]
		```
	"""

	if height <= 0:
		raise atone.errors.InvalidParameter(f"Note map height must be positive, got {height}")

	degrees = len(scale.intervals)
	center = height // 2
	note_map: typing.List[int] = []

	for index in range(height):
		octave, degree = divmod(index - center, degrees)
		pitch = scale.root_pitch + 12 * octave + scale.intervals[degree]

		if not 0 <= pitch <= 127:
			raise atone.errors.InvalidParameter(f"Note map height {height} leaves the MIDI range (pitch {pitch})")

		note_map.append(pitch)

	logger.debug(f"Note map {scale.quality} root {scale.root_pc}: {note_map}")

	return note_map
