"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127).  Derived voices of the
automaton engine play at fixed fractions of the melodic velocity.
"""

DEFAULT_VELOCITY = 80
DEFAULT_PERCUSSION_VELOCITY = 127

MIN_VELOCITY = 0
MAX_VELOCITY = 127


def scaled (velocity: int, numerator: int, denominator: int) -> int:

	"""
	Scale a velocity by a fraction, staying inside the MIDI range.
	"""

	return max(MIN_VELOCITY, min(MAX_VELOCITY, (velocity * numerator) // denominator))
