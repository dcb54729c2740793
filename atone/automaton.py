"""One-dimensional binary cellular automaton.

The automaton has ``CELLS`` cells on a line.  A neighbourhood bitmask
chooses which relative offsets a cell consults: bit ``k`` selects offset
``ceil(k / 2)`` with alternating sign - bit 0 is the cell itself, bit 1 its
left neighbour, bit 2 its right neighbour, bit 3 two to the left and so on.
Mask ``0b111`` is the classic three-cell neighbourhood.

Offsets are ordered from the rightmost to the leftmost, and offset ``j``
contributes bit ``j`` of the rule-table index.  With three cells this is
Wolfram's numbering, so rule 30, 90 and 110 behave as usual and rule 204 is
the identity.

At the edges the automaton is either ``cyclic`` (a ring) or ``infinite``:
missing neighbours are invented by a coin flip weighted with the rule's
average output.  This approximates an unbounded field of the same density.

Each bar runs one generation per eighth note and keeps the centre
``height`` cells of every generation as that eighth's slot.  Slot index
``i`` lines up with note-map index ``i``.
"""

import enum
import logging
import random
import typing

import atone.constants
import atone.errors
import atone.sequence_utils


logger = logging.getLogger(__name__)

CELLS = 32
SLOTS = atone.constants.EIGHTHS_PER_BAR


class Boundary (enum.Enum):

	"""
	Edge handling of the cell line.
	"""

	CYCLIC = "cyclic"
	INFINITE = "infinite"


def decode_neighbours (mask: int) -> typing.List[int]:

	"""Decode a neighbourhood bitmask into signed offsets, rightmost first.

	Raises:
		InvalidParameter: If the mask selects no cells or reaches past half the line.

	Example:
		```python
		decode_neighbours(0b111)    # → [1, 0, -1]
		decode_neighbours(0b11011)  # → [2, 0, -1, -2]
		```
	"""

	if mask <= 0:
		raise atone.errors.InvalidParameter(f"Neighbourhood mask must select at least one cell, got {mask}")

	offsets: typing.List[int] = []

	for k in range(mask.bit_length()):

		if not (mask >> k) & 1:
			continue

		magnitude = (k + 1) // 2
		offsets.append(-magnitude if k % 2 else magnitude)

	if max(abs(offset) for offset in offsets) >= CELLS // 2:
		raise atone.errors.InvalidParameter(f"Neighbourhood mask {mask:#b} reaches beyond half of {CELLS} cells")

	return sorted(offsets, reverse=True)


def decode_rule (rule: int, size: int) -> typing.List[int]:

	"""Decode a rule number into a table of ``2 ** size`` next-state bits.

	Entry ``i`` is bit ``i`` of the rule number.  Bits beyond the table are
	ignored, so one rule number can be tried against any neighbourhood.

	Raises:
		InvalidParameter: If the rule is negative.

	Example:
		```python
		decode_rule(30, 1)  # → [0, 1]
		```
	"""

	if rule < 0:
		raise atone.errors.InvalidParameter(f"Rule must not be negative, got {rule}")

	entries = 1 << size

	if rule >> entries:
		logger.debug(f"Rule {rule} truncated to {entries} entries for a {size}-cell neighbourhood")

	return atone.sequence_utils.bits_to_list(rule, entries)


class CellularAutomaton:

	"""
	Cell line, rule table and the per-bar slot snapshots.
	"""

	def __init__ (
		self,
		rule: int,
		neighbours: int,
		height: int,
		rng: random.Random,
		boundary: Boundary = Boundary.CYCLIC,
		cells: typing.Optional[typing.Sequence[int]] = None
	) -> None:

		"""Decode the rule and seed the cells.

		Parameters:
			rule: Rule number, decoded against the neighbourhood size.
			neighbours: Neighbourhood bitmask.
			height: Width of the centre window copied into each slot.
			rng: Random generator, used for the seed and infinite edges.
			boundary: Edge handling.
			cells: Explicit initial cells; random when omitted.
		"""

		if not 1 <= height <= CELLS:
			raise atone.errors.InvalidParameter(f"Height must be 1..{CELLS}, got {height}")

		self.offsets = decode_neighbours(neighbours)
		self.rule_table = decode_rule(rule, len(self.offsets))
		self.height = height
		self.rng = rng
		self.boundary = boundary

		# Probability of a live cell beyond the edges of an infinite field.
		self.density = sum(self.rule_table) / len(self.rule_table)

		if cells is None:
			self.cells = atone.sequence_utils.bits_to_list(rng.getrandbits(CELLS), CELLS)
		else:
			if len(cells) != CELLS:
				raise ValueError(f"Expected {CELLS} cells, got {len(cells)}")
			self.cells = [1 if cell else 0 for cell in cells]

		self.slots: typing.List[typing.List[int]] = [[0] * height for _ in range(SLOTS)]

		logger.debug(f"Automaton rule {rule}, offsets {self.offsets}, boundary {boundary.value}")


	def _cell (self, position: int) -> int:

		"""
		Read a cell, applying the boundary policy outside the line.
		"""

		if 0 <= position < CELLS:
			return self.cells[position]

		if self.boundary is Boundary.CYCLIC:
			return self.cells[atone.sequence_utils.wrap_index(position, CELLS)]

		return atone.sequence_utils.coin(self.density, self.rng)


	def step (self) -> typing.List[int]:

		"""
		Advance every cell by one generation and return the new cells.
		"""

		next_cells: typing.List[int] = []

		for i in range(CELLS):

			index = 0

			for j, offset in enumerate(self.offsets):
				index |= self._cell(i + offset) << j

			next_cells.append(self.rule_table[index])

		self.cells = next_cells

		return self.cells


	def window (self) -> typing.List[int]:

		"""
		The centre ``height`` cells.
		"""

		start = (CELLS - self.height) // 2

		return self.cells[start:start + self.height]


	def advance_bar (self) -> typing.List[typing.List[int]]:

		"""
		Run one generation per slot, snapshotting the window after each.
		"""

		for slot in range(SLOTS):
			self.step()
			self.slots[slot] = self.window()

		return self.slots
