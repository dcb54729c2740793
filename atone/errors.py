"""Exceptions raised by the composition engine.

Three kinds of failure are distinguished:

- ``ConfigurationError`` - a name (scale, rule set, boundary, strategy) was
  not recognised.  Normally recoverable: the engine logs a warning and falls
  back to a documented default.  Raised only when the configuration is
  ``strict``.
- ``InvalidParameter`` - a numeric parameter is out of range.  Construction
  fails.
- ``CapacityExceeded`` - a grammar rewrite would outgrow its working buffer.
  Fatal to the engine that owns the grammar.
"""

import typing


class ConfigurationError (ValueError):

	"""
	An unknown name was given for a configurable choice.
	"""

	def __init__ (self, field: str, value: typing.Any, default: typing.Any) -> None:

		self.field = field
		self.value = value
		self.default = default

		super().__init__(f"Unknown {field} {value!r} (default is {default!r})")


class InvalidParameter (ValueError):

	"""
	A numeric configuration parameter is outside its allowed range.
	"""


class CapacityExceeded (RuntimeError):

	"""
	A grammar generation expanded beyond the configured buffer capacity.
	"""

	def __init__ (self, generation: int, length: int, capacity: int) -> None:

		self.generation = generation
		self.length = length
		self.capacity = capacity

		super().__init__(
			f"Generation {generation} expands to {length} symbols, "
			f"exceeding the buffer capacity of {capacity}"
		)
