import random
import typing

import pytest

import atone.note_map
import atone.pattern
import atone.voices


Voice = atone.pattern.Voice
Bass = atone.voices.BassStrategy
Chords = atone.voices.ChordStrategy
Lead = atone.voices.LeadStrategy

HEIGHT = 24
THIRD = HEIGHT // 3


@pytest.fixture
def note_map () -> typing.List[int]:

	"""C major, 24 steps."""

	return atone.note_map.build_note_map(atone.note_map.parse_scale("C major"), HEIGHT)


def _slot (*live: int) -> typing.List[int]:

	return [1 if i in live else 0 for i in range(HEIGHT)]


def _random_slots (seed: int) -> typing.List[typing.List[int]]:

	rng = random.Random(seed)

	return [[rng.randrange(2) for _ in range(HEIGHT)] for _ in range(8)]


def _play (note_map: typing.List[int], slots: typing.Sequence[typing.Sequence[int]], seed: int = 1, **strategies: typing.Any) -> typing.Tuple[atone.voices.DerivedVoices, atone.pattern.Pattern]:

	voices = atone.voices.DerivedVoices(note_map, beat_duration=600, rng=random.Random(seed), velocity=80, **strategies)
	pattern = atone.pattern.Pattern(length=2400)
	voices.play(pattern, slots)

	return voices, pattern


def _notes (pattern: atone.pattern.Pattern, voice: Voice) -> typing.List[typing.Tuple[int, int, int, int]]:

	return [(position, pitch, velocity, duration) for position, v, pitch, velocity, duration in pattern.notes if v == voice]


# ---------------------------------------------------------------------------
# bass
# ---------------------------------------------------------------------------

def test_lowest_notes_plays_lowest_live_cell (note_map: typing.List[int]) -> None:

	"""Every eighth plays the lowest live step of the bottom third at three quarters velocity."""

	voices, pattern = _play(note_map, [_slot(3, 5, 10)] * 8, bass=Bass.LOWEST_NOTES, chords=Chords.NONE, lead=Lead.NONE)

	assert _notes(pattern, Voice.BASS) == [(slot * 300, note_map[3], 60, 300) for slot in range(8)]
	assert voices.last_bass_note == 3


def test_lowest_notes_ignores_upper_cells (note_map: typing.List[int]) -> None:

	"""Cells above the bottom third never reach the bass."""

	_, pattern = _play(note_map, [_slot(THIRD, 20)] * 8, bass=Bass.LOWEST_NOTES, chords=Chords.NONE, lead=Lead.NONE)

	assert _notes(pattern, Voice.BASS) == []


def test_lower_eighth_stays_low_and_close (note_map: typing.List[int]) -> None:

	"""Weighted bass picks are live, low and within three steps of the last."""

	for seed in range(20):
		slots = _random_slots(seed)
		voices = atone.voices.DerivedVoices(note_map, 600, random.Random(seed), bass=Bass.LOWER_EIGHTH, chords=Chords.NONE, lead=Lead.NONE)
		previous = voices.last_bass_note
		pattern = atone.pattern.Pattern(length=2400)

		voices.play(pattern, slots)

		for position, pitch, _, _ in _notes(pattern, Voice.BASS):
			index = note_map.index(pitch)

			assert index < THIRD
			assert slots[position // 300][index] == 1
			assert abs(index - previous) <= atone.voices.SEARCH_RADIUS
			previous = index


# ---------------------------------------------------------------------------
# chords
# ---------------------------------------------------------------------------

def test_eighth_chords_need_stacked_thirds (note_map: typing.List[int]) -> None:

	"""Only a root with live third and fifth steps sounds, at two thirds velocity."""

	_, pattern = _play(note_map, [_slot(5, 6, 7, 9, 20)] * 8, bass=Bass.NONE, chords=Chords.EIGHTH, lead=Lead.NONE)
	chords = _notes(pattern, Voice.CHORDS)

	assert chords
	assert {pitch for _, pitch, _, _ in chords} == {note_map[5], note_map[7], note_map[9]}
	assert all(velocity == 53 and duration == 300 for _, _, velocity, duration in chords)

	starts = sorted({position for position, _, _, _ in chords})

	for start in starts:
		assert sorted(pitch for position, pitch, _, _ in chords if position == start) == [note_map[5], note_map[7], note_map[9]]


def test_no_triad_no_chord (note_map: typing.List[int]) -> None:

	"""Live cells without a triad shape stay silent."""

	_, pattern = _play(note_map, [_slot(0, 1, 2, 3)] * 8, bass=Bass.NONE, chords=Chords.EIGHTH, lead=Lead.NONE)

	assert _notes(pattern, Voice.CHORDS) == []


def test_whole_chords_tie_repeats (note_map: typing.List[int]) -> None:

	"""Repeated roots in neighbouring eighths become one longer chord."""

	for seed in range(10):
		voices, pattern = _play(note_map, [_slot(5, 7, 9)] * 8, seed=seed, bass=Bass.NONE, chords=Chords.WHOLE, lead=Lead.NONE)
		chords = _notes(pattern, Voice.CHORDS)
		spans = sorted({(position, duration) for position, _, _, duration in chords})

		assert spans
		assert voices.last_chord_root == 5

		for (start, duration), (next_start, _) in zip(spans, spans[1:]):
			assert start + duration < next_start


# ---------------------------------------------------------------------------
# lead
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("strategy, low, high", [
	(Lead.UPPER_EIGHTH, THIRD, HEIGHT),
	(Lead.LOWER_EIGHTH, 0, HEIGHT - THIRD),
	(Lead.UPPER_WHOLE, THIRD, HEIGHT),
])
def test_lead_stays_in_region (note_map: typing.List[int], strategy: Lead, low: int, high: int) -> None:

	"""Each lead variant keeps to its two thirds of the table."""

	for seed in range(20):
		slots = _random_slots(seed)
		voices, pattern = _play(note_map, slots, seed=seed, bass=Bass.NONE, chords=Chords.NONE, lead=strategy)

		for position, pitch, velocity, _ in _notes(pattern, Voice.LEAD):
			index = note_map.index(pitch)

			assert low <= index < high
			assert slots[position // 300][index] == 1
			assert velocity == 80


def test_lead_moves_stepwise (note_map: typing.List[int]) -> None:

	"""Consecutive lead notes are at most three steps apart."""

	full = [[1] * HEIGHT for _ in range(8)]

	for seed in range(20):
		voices, pattern = _play(note_map, full, seed=seed, bass=Bass.NONE, chords=Chords.NONE, lead=Lead.UPPER_EIGHTH)
		indices = [note_map.index(pitch) for _, pitch, _, _ in _notes(pattern, Voice.LEAD)]

		for a, b in zip(indices, indices[1:]):
			assert abs(a - b) <= atone.voices.SEARCH_RADIUS

		if indices:
			assert voices.last_lead_note == indices[-1]


def test_upper_whole_ties_repeated_pitches (note_map: typing.List[int]) -> None:

	"""No lead note is followed directly by the same pitch."""

	full = [[1] * HEIGHT for _ in range(8)]

	for seed in range(20):
		_, pattern = _play(note_map, full, seed=seed, bass=Bass.NONE, chords=Chords.NONE, lead=Lead.UPPER_WHOLE)
		lead = _notes(pattern, Voice.LEAD)

		for (start, pitch, _, duration), (next_start, next_pitch, _, _) in zip(lead, lead[1:]):
			assert not (start + duration == next_start and pitch == next_pitch)


# ---------------------------------------------------------------------------
# general
# ---------------------------------------------------------------------------

def test_silent_slots_play_nothing (note_map: typing.List[int]) -> None:

	"""No live cells, no notes."""

	_, pattern = _play(note_map, [_slot()] * 8)

	assert pattern.notes == []


def test_none_strategies_play_nothing (note_map: typing.List[int]) -> None:

	"""Disabled voices stay silent even on a full field."""

	full = [[1] * HEIGHT for _ in range(8)]
	_, pattern = _play(note_map, full, bass=Bass.NONE, chords=Chords.NONE, lead=Lead.NONE)

	assert pattern.notes == []


def test_voices_use_their_channels (note_map: typing.List[int]) -> None:

	"""Bass, chords and lead land on their own voices."""

	full = [[1] * HEIGHT for _ in range(8)]
	_, pattern = _play(note_map, full)

	assert {voice for _, voice, _, _, _ in pattern.notes} <= {Voice.BASS, Voice.CHORDS, Voice.LEAD}
	assert _notes(pattern, Voice.BASS)


def test_voices_are_deterministic (note_map: typing.List[int]) -> None:

	"""Equal seeds and slots give equal notes."""

	slots = _random_slots(3)

	_, first = _play(note_map, slots, seed=7)
	_, second = _play(note_map, slots, seed=7)

	assert first.notes == second.notes
