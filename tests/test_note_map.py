import logging

import pytest

import atone.errors
import atone.note_map


def test_parse_scale_root_and_quality () -> None:

	"""Root letter, accidental and quality are all read."""

	scale = atone.note_map.parse_scale("F# harmonic minor")

	assert scale.root_pc == 6
	assert scale.quality == "harmonic_minor"
	assert scale.intervals == (0, 2, 3, 5, 7, 8, 11)


def test_parse_scale_separators () -> None:

	"""Underscores and hyphens separate words like spaces."""

	assert atone.note_map.parse_scale("Bb_blues").quality == "blues"
	assert atone.note_map.parse_scale("Bb_blues").root_pc == 10
	assert atone.note_map.parse_scale("A minor-pentatonic").intervals == (0, 3, 5, 7, 10)


def test_parse_scale_unknown_quality_falls_back_to_major (caplog: pytest.LogCaptureFixture) -> None:

	"""An unknown quality keeps the root, uses major and warns."""

	with caplog.at_level(logging.WARNING):
		scale = atone.note_map.parse_scale("D dorian")

	assert scale.root_pc == 2
	assert scale.quality == "major"
	assert "dorian" in caplog.text


def test_parse_scale_strict_raises () -> None:

	"""Strict parsing refuses unknown qualities."""

	with pytest.raises(atone.errors.ConfigurationError):
		atone.note_map.parse_scale("D dorian", strict=True)


def test_parse_scale_unreadable_name_falls_back_to_c () -> None:

	"""A name without a root letter becomes C major."""

	scale = atone.note_map.parse_scale("???")

	assert scale.root_pc == 0
	assert scale.quality == "major"


def test_build_note_map_small () -> None:

	"""The middle entry is the root in octave 4."""

	note_map = atone.note_map.build_note_map(atone.note_map.parse_scale("C major"), 5)

	assert note_map == [57, 59, 60, 62, 64]


def test_build_note_map_octaves () -> None:

	"""One scale length up is one octave up."""

	scale = atone.note_map.parse_scale("E natural minor")
	note_map = atone.note_map.build_note_map(scale, 24)

	assert note_map[12] == 64
	assert note_map == sorted(note_map)
	assert len(set(note_map)) == 24

	for i in range(24 - 7):
		assert note_map[i + 7] == note_map[i] + 12


def test_build_note_map_pentatonic_octaves () -> None:

	"""Five-note scales tile every five steps."""

	note_map = atone.note_map.build_note_map(atone.note_map.parse_scale("G major pentatonic"), 20)

	assert note_map[10] == 67

	for i in range(20 - 5):
		assert note_map[i + 5] == note_map[i] + 12


def test_build_note_map_rejects_bad_height () -> None:

	"""Zero height is an invalid parameter."""

	with pytest.raises(atone.errors.InvalidParameter):
		atone.note_map.build_note_map(atone.note_map.parse_scale("C major"), 0)
