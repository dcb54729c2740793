"""Scale interval definitions and root-name lookup.

Only the scale qualities the engine can build note maps from are listed.
Each entry is the ascending semitone offsets of one octave, starting at the
root.
"""

import typing


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 2, 4, 5, 7, 9, 11],
	"natural_minor": [0, 2, 3, 5, 7, 8, 10],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"major_pentatonic": [0, 2, 4, 7, 9],
	"minor_pentatonic": [0, 3, 5, 7, 10],
	"blues": [0, 3, 5, 6, 7, 10],
}

# Spellings accepted for the qualities above.
SCALE_ALIASES: typing.Dict[str, str] = {
	"": "major",
	"ionian": "major",
	"minor": "natural_minor",
	"aeolian": "natural_minor",
	"pentatonic": "major_pentatonic",
	"minor_blues": "blues",
}

DEFAULT_SCALE_QUALITY = "major"

NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"D": 2,
	"E": 4,
	"F": 5,
	"G": 7,
	"A": 9,
	"B": 11,
}

ACCIDENTALS: typing.Dict[str, int] = {
	"": 0,
	"#": 1,
	"b": -1,
}


def key_name_to_pc (letter: str, accidental: str = "") -> int:

	"""Return the pitch class (0-11) of a root letter and accidental.

	Raises:
		ValueError: If the letter or accidental is not recognised.

	Example:
		```python
		key_name_to_pc("F", "#")  # → 6
		key_name_to_pc("C", "b")  # → 11
		```
	"""

	letter = letter.upper()

	if letter not in NOTE_NAME_TO_PC:
		raise ValueError(f"Unknown root letter {letter!r}. Available: {sorted(NOTE_NAME_TO_PC)}")

	if accidental not in ACCIDENTALS:
		raise ValueError(f"Unknown accidental {accidental!r}")

	return (NOTE_NAME_TO_PC[letter] + ACCIDENTALS[accidental]) % 12


def normalize_quality (token: str) -> str:

	"""
	Lower-case a quality token and join its words with underscores.
	"""

	words = token.replace("-", " ").replace("_", " ").lower().split()
	quality = "_".join(words)

	return SCALE_ALIASES.get(quality, quality)


def get_intervals (quality: str) -> typing.List[int]:

	"""
	Return the interval list for a normalised scale quality.
	"""

	if quality not in SCALE_INTERVALS:
		raise ValueError(f"Unknown scale quality: {quality}")

	return list(SCALE_INTERVALS[quality])
