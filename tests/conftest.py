import typing

import mido
import pytest


class FakeMidiOut:

	"""Minimal MIDI output stub for tests that keeps what it was sent."""

	def __init__ (self) -> None:

		self.messages: typing.List[mido.Message] = []


	def send (self, message: mido.Message) -> None:

		"""Store outgoing MIDI messages."""

		self.messages.append(message)


	def close (self) -> None:

		"""No-op close for the fake device."""

		return None


class BrokenMidiOut:

	"""MIDI output stub whose port has gone away."""

	def send (self, message: mido.Message) -> None:

		raise IOError("device disconnected")


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI", "Other MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	return FakeMidiOut()


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use fake MIDI outputs for all tests that need it."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def midi_out () -> FakeMidiOut:

	"""A fresh fake output port."""

	return FakeMidiOut()
