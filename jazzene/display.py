"""Live terminal status line for playback.

Shows the transport state, time display, measure, current chord, key and
tempo on one persistent line of stderr, refreshed on every player frame::

	> 0:03 / 0:16  Measure 2/8  Chord: F7  Key: Bb  120 BPM  Loop 0:03-0:06

Log messages scroll above the status line without disruption.

```python
display = jazzene.display.Display(transport)
display.start()
player.events.on("frame", display.update)
```
"""

import logging
import sys
import typing

import jazzene.surface
import jazzene.time_format

if typing.TYPE_CHECKING:
	import jazzene.transport


_PLAYING_GLYPH = ">"
_STOPPED_GLYPH = "■"


class DisplayLogHandler (logging.Handler):

	"""Logging handler that clears and redraws the status line around log output.

	Installed by ``Display.start()`` and removed by ``Display.stop()``.
	"""

	def __init__ (self, display: "Display") -> None:

		super().__init__()
		self._display = display

	def emit (self, record: logging.LogRecord) -> None:

		"""Clear the status line, write the log message, then redraw."""

		try:
			self._display.clear_line()

			msg = self.format(record)
			sys.stderr.write(msg + "\n")
			sys.stderr.flush()

			self._display.draw()

		except Exception:
			self.handleError(record)


class Display:

	"""Persistent one-line playback dashboard on stderr.

	Reads the snapshot produced each frame by the player, plus the key and
	tempo of the transport's current sequence.
	"""

	def __init__ (self, transport: "jazzene.transport.Transport") -> None:

		self._transport = transport
		self._active: bool = False
		self._handler: typing.Optional[DisplayLogHandler] = None
		self._saved_handlers: typing.List[logging.Handler] = []
		self._last_line: str = ""

	@property
	def active (self) -> bool:
		return self._active

	def start (self) -> None:

		"""Install the log handler and activate the display.

		Existing root logger handlers are set aside and restored by ``stop()``.
		"""

		if self._active:
			return

		self._active = True

		root_logger = logging.getLogger()
		self._saved_handlers = list(root_logger.handlers)

		self._handler = DisplayLogHandler(self)

		if self._saved_handlers and self._saved_handlers[0].formatter:
			self._handler.setFormatter(self._saved_handlers[0].formatter)
		else:
			self._handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))

		root_logger.handlers.clear()
		root_logger.addHandler(self._handler)

	def stop (self) -> None:

		"""Clear the status line and restore original log handlers."""

		if not self._active:
			return

		self.clear_line()
		self._active = False

		root_logger = logging.getLogger()
		root_logger.handlers.clear()

		for handler in self._saved_handlers:
			root_logger.addHandler(handler)

		self._saved_handlers = []
		self._handler = None

	def update (self, snapshot: typing.Optional[typing.Dict[str, typing.Any]] = None) -> None:

		"""Redraw from a frame snapshot; called on the player's ``"frame"`` event."""

		if not self._active:
			return

		if snapshot is None:
			snapshot = jazzene.surface.snapshot(self._transport)

		self._last_line = self.format_status(snapshot)
		self.draw()

	def draw (self) -> None:

		"""Write the current status line to the terminal."""

		if not self._active or not self._last_line:
			return

		sys.stderr.write(f"\r\033[K{self._last_line}")
		sys.stderr.flush()

	def clear_line (self) -> None:

		"""Erase the status line."""

		if not self._active:
			return

		sys.stderr.write("\r\033[K")
		sys.stderr.flush()

	def format_status (self, snapshot: typing.Dict[str, typing.Any]) -> str:

		"""Build the status string from a surface snapshot."""

		visualization = snapshot[jazzene.surface.VISUALIZATION]
		sequence = self._transport.sequence

		parts: typing.List[str] = []

		glyph = _PLAYING_GLYPH if visualization["playing"] else _STOPPED_GLYPH
		parts.append(f"{glyph} {snapshot[jazzene.surface.TIME_DISPLAY]}")

		current = [m for m in snapshot[jazzene.surface.LEAD_SHEET] if m["current"]]
		if current:
			parts.append(f"Measure {current[0]['measure'] + 1}/{sequence.measures}")

		if visualization["chord"]:
			parts.append(f"Chord: {visualization['chord']}")

		if sequence.key is not None:
			parts.append(f"Key: {sequence.key.name()}")

		parts.append(f"{sequence.tempo:g} BPM")

		loop = visualization["loop"]
		if loop["enabled"]:
			a = jazzene.time_format.format_clock(loop["a"])
			b = jazzene.time_format.format_clock(loop["b"])
			parts.append(f"Loop {a}-{b}")

		return "  ".join(parts)
