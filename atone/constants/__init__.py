"""Constants for atone.

Time is measured in **ticks** of one millisecond, so a beat lasts
``TICKS_PER_MINUTE // bpm`` ticks and a bar lasts ``BEATS_PER_BAR`` beats.

- ``atone.constants.velocity`` - default velocities for melodic and percussion voices
- ``atone.constants.gm_drums`` - General MIDI percussion note numbers
- ``atone.constants.gm_instruments`` - General MIDI program names
"""

TICKS_PER_MINUTE = 60000
BEATS_PER_BAR = 4

# Sub-beat slots per bar used by the grammar and automaton engines.
EIGHTHS_PER_BAR = 8

# Shortest note any engine writes: a 32nd (four riffs of eight notes in a bar).
FINEST_SUBDIVISION = 32

# Fastest tempo at which that note still lasts one tick.
MAX_BPM = TICKS_PER_MINUTE // (FINEST_SUBDIVISION // BEATS_PER_BAR)

# GM reserves channel 10 (index 9) for percussion.
PERCUSSION_CHANNEL = 9


def beat_duration (bpm: int) -> int:

	"""
	Return the length of one beat in ticks.
	"""

	return TICKS_PER_MINUTE // bpm
