import random
import typing


def wrap_index (index: int, size: int) -> int:

	"""Wrap an index cyclically into ``[0, size)``.

	Uses Python's floored modulo, so negative indices wrap from the end:
	``wrap_index(-1, 32) == 31``.  This is the addressing used for automaton
	cells on a ring.

	Parameters:
		index: Any integer position.
		size: Length of the ring (must be positive).
	"""

	if size <= 0:
		raise ValueError("Size must be positive")

	return index % size


def fold_index (index: int, size: int) -> int:

	"""Fold an out-of-range note-map index back by half the table.

	Stepping past the top of a note map drops the cursor by ``size // 2``
	(roughly an octave or more for the usual table sizes) and stepping below
	the bottom raises it by the same amount, so a melody that keeps climbing
	re-enters the middle of the range instead of jumping to the opposite
	extreme.  In-range indices are returned unchanged.

	Example:
		```python
		fold_index(24, 24)  # → 12
		fold_index(-1, 24)  # → 11
		fold_index(5, 24)   # → 5
		```
	"""

	if size < 2:
		raise ValueError("Size must be at least 2")

	half = size // 2

	while index >= size:
		index -= half

	while index < 0:
		index += half

	return index


def coin (probability: float, rng: random.Random) -> int:

	"""Return 1 with the given probability, otherwise 0."""

	return 1 if rng.random() < probability else 0


def weighted_argmax (weights: typing.Sequence[int]) -> typing.Tuple[int, int]:

	"""Return ``(index, weight)`` of the largest weight.

	Ties go to the highest index.  An empty sequence returns ``(-1, 0)``.
	"""

	best_index = -1
	best_weight = 0

	for i, weight in enumerate(weights):
		if best_index < 0 or weight >= best_weight:
			best_index = i
			best_weight = weight

	return best_index, best_weight


def bits_to_list (value: int, count: int) -> typing.List[int]:

	"""Unpack the low ``count`` bits of an integer, least significant first.

	Example:
		```python
		bits_to_list(0b110, 4)  # → [0, 1, 1, 0]
		```
	"""

	return [(value >> i) & 1 for i in range(count)]
