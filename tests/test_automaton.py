import random

import pytest

import atone.automaton
import atone.errors


CELLS = atone.automaton.CELLS


def _single (position: int) -> list:

	cells = [0] * CELLS
	cells[position] = 1

	return cells


# ---------------------------------------------------------------------------
# decoding
# ---------------------------------------------------------------------------

def test_decode_three_cell_neighbourhood () -> None:

	"""Mask 0b111 is right, centre, left."""

	assert atone.automaton.decode_neighbours(0b111) == [1, 0, -1]


def test_decode_wider_neighbourhoods () -> None:

	"""Bit k selects ceil(k / 2) cells away, odd bits to the left."""

	assert atone.automaton.decode_neighbours(0b1) == [0]
	assert atone.automaton.decode_neighbours(0b110) == [1, -1]
	assert atone.automaton.decode_neighbours(0b11011) == [2, 0, -1, -2]
	assert atone.automaton.decode_neighbours(0b111111111) == [4, 3, 2, 1, 0, -1, -2, -3, -4]


def test_decode_neighbourhood_rejects_empty_mask () -> None:

	"""A neighbourhood of zero cells is invalid."""

	with pytest.raises(atone.errors.InvalidParameter):
		atone.automaton.decode_neighbours(0)


def test_decode_rule_digits () -> None:

	"""Entry i is bit i of the rule number."""

	for rule in (0, 30, 90, 110, 204, 255):
		table = atone.automaton.decode_rule(rule, 3)

		assert len(table) == 8
		assert table == [(rule >> i) & 1 for i in range(8)]


def test_decode_rule_larger_neighbourhood () -> None:

	"""Five cells give 32 entries."""

	table = atone.automaton.decode_rule(0xDEADBEEF, 5)

	assert len(table) == 32
	assert sum(bit << i for i, bit in enumerate(table)) == 0xDEADBEEF


def test_decode_rule_negative () -> None:

	"""Negative rules are rejected."""

	with pytest.raises(atone.errors.InvalidParameter):
		atone.automaton.decode_rule(-1, 3)


def test_decode_rule_truncates_to_table () -> None:

	"""Bits above the table are dropped rather than rejected."""

	assert atone.automaton.decode_rule(30, 1) == [0, 1]
	assert atone.automaton.decode_rule(30, 2) == [0, 1, 1, 1]
	assert atone.automaton.decode_rule(256 + 204, 3) == atone.automaton.decode_rule(204, 3)


def test_identity_rule_keeps_cells () -> None:

	"""Rule 204 copies the centre cell, so a cyclic step changes nothing."""

	for seed in range(200):
		ca = atone.automaton.CellularAutomaton(rule=204, neighbours=0b111, height=24, rng=random.Random(seed))
		before = list(ca.cells)

		assert ca.step() == before


def test_identity_rule_extreme_seeds () -> None:

	"""All-zero and all-one lines are kept too."""

	for cells in ([0] * CELLS, [1] * CELLS, [i % 2 for i in range(CELLS)]):
		ca = atone.automaton.CellularAutomaton(204, 0b111, 24, random.Random(0), cells=cells)

		assert ca.step() == cells


def test_rightmost_offset_is_lowest_bit () -> None:

	"""Rule 170 copies the right neighbour, shifting the pattern left."""

	ca = atone.automaton.CellularAutomaton(170, 0b111, 24, random.Random(0), cells=_single(10))

	assert ca.step() == _single(9)


def test_rule_90_spreads_both_ways () -> None:

	"""A single live cell in rule 90 becomes its two neighbours."""

	ca = atone.automaton.CellularAutomaton(90, 0b111, 24, random.Random(0), cells=_single(16))
	cells = ca.step()

	assert [i for i, cell in enumerate(cells) if cell] == [15, 17]


def test_cyclic_boundary_wraps () -> None:

	"""Shifting past cell 0 re-enters at the far end."""

	ca = atone.automaton.CellularAutomaton(170, 0b111, 24, random.Random(0), cells=_single(0))

	assert ca.step() == _single(CELLS - 1)


def test_infinite_boundary_uses_rule_density () -> None:

	"""Beyond the edges, rule 255 is all live and rule 0 all dead."""

	ca = atone.automaton.CellularAutomaton(170, 0b111, 24, random.Random(0), boundary=atone.automaton.Boundary.INFINITE, cells=_single(0))

	assert ca.density == 0.5

	full = atone.automaton.CellularAutomaton(255, 0b111, 24, random.Random(0), boundary=atone.automaton.Boundary.INFINITE)
	empty = atone.automaton.CellularAutomaton(0, 0b111, 24, random.Random(0), boundary=atone.automaton.Boundary.INFINITE)

	assert full.step() == [1] * CELLS
	assert empty.step() == [0] * CELLS


def test_infinite_boundary_last_cell_reads_coin () -> None:

	"""With a copy-the-right rule the last cell comes from beyond the edge."""

	ca = atone.automaton.CellularAutomaton(0b11101010, 0b111, 24, random.Random(0), boundary=atone.automaton.Boundary.INFINITE, cells=[0] * CELLS)

	# Density 5/8; over many steps the edge cell turns on at least once.
	assert any(ca.step()[CELLS - 1] for _ in range(50))


def test_seed_is_deterministic () -> None:

	"""The random seed decides the starting cells."""

	a = atone.automaton.CellularAutomaton(30, 0b111, 24, random.Random(5))
	b = atone.automaton.CellularAutomaton(30, 0b111, 24, random.Random(5))

	assert a.cells == b.cells
	assert len(a.cells) == CELLS
	assert set(a.cells) <= {0, 1}


# ---------------------------------------------------------------------------
# slots
# ---------------------------------------------------------------------------

def test_advance_bar_snapshots_centre_window () -> None:

	"""Eight generations per bar, each windowed to the centre cells."""

	ca = atone.automaton.CellularAutomaton(170, 0b111, 24, random.Random(0), cells=_single(20))
	slots = ca.advance_bar()

	assert len(slots) == 8
	assert all(len(slot) == 24 for slot in slots)

	# The window starts at cell 4; the live cell walks left from 19 to 12.
	for step, slot in enumerate(slots):
		assert slot.index(1) == 20 - step - 1 - 4


def test_window_width_matches_height () -> None:

	"""Odd heights centre with the extra cell on the right."""

	ca = atone.automaton.CellularAutomaton(30, 0b111, 7, random.Random(0), cells=list(range(CELLS)))

	assert len(ca.window()) == 7


def test_bad_height_rejected () -> None:

	"""The window cannot be wider than the line."""

	with pytest.raises(atone.errors.InvalidParameter):
		atone.automaton.CellularAutomaton(30, 0b111, 33, random.Random(0))


def test_explicit_cells_length_checked () -> None:

	"""Explicit cells must cover the line."""

	with pytest.raises(ValueError):
		atone.automaton.CellularAutomaton(30, 0b111, 24, random.Random(0), cells=[1, 0, 1])
