"""A-B loop window.

A :class:`LoopWindow` is validated once, when it is configured, against the
current total duration. A window that cannot be honoured (A at or after B,
negative or non-finite bounds) comes back disabled instead of raising.

While enabled, :func:`wrap` is consulted by the clock on every tick: when a
tick carries the position from at or before B to past B, playback continues
from A plus the overshoot. A position that is already beyond B (the user
seeked past the window) plays on normally.
"""

import dataclasses
import fractions
import logging
import math
import typing

import jazzene.sequence_utils

if typing.TYPE_CHECKING:
	import jazzene.generator


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class LoopWindow:

	"""
	Loop bounds in seconds. ``a <= b`` whenever ``enabled`` is True.
	"""

	enabled: bool = False
	a: float = 0.0
	b: float = 0.0

	@property
	def length (self) -> float:
		return self.b - self.a

	def contains (self, position: float) -> bool:
		return self.enabled and self.a <= position <= self.b


def configure (enabled: bool, a: float, b: float, total: float) -> LoopWindow:

	"""Validate a loop configuration against the total duration.

	Bounds are clamped into ``[0, total]``. Invalid configurations disable
	the loop (and are logged) rather than raising.

	Parameters:
		enabled: Whether looping is requested.
		a: Loop start in seconds.
		b: Loop end in seconds.
		total: Total duration of the current sequence in seconds.

	Returns:
		The resulting window. Disabled windows keep their (sanitised) bounds
		so a settings panel can show them.

	Example:
		```python
		configure(True, 3.0, 6.0, total=16.0)   # → LoopWindow(enabled=True, a=3.0, b=6.0)
		configure(True, 6.0, 3.0, total=16.0)   # → LoopWindow(enabled=False, a=6.0, b=3.0)
		configure(True, 3.0, 60.0, total=16.0)  # → LoopWindow(enabled=True, a=3.0, b=16.0)
		```
	"""

	if not (math.isfinite(a) and math.isfinite(b)):
		logger.warning(f"Loop disabled: non-finite bounds ({a}, {b})")
		return LoopWindow(enabled=False)

	if a < 0 or b < 0:
		logger.warning(f"Loop disabled: negative bounds ({a}, {b})")
		return LoopWindow(enabled=False, a=max(0.0, a), b=max(0.0, b))

	total = max(0.0, total)
	a = float(jazzene.sequence_utils.clamp(a, 0.0, total))
	b = float(jazzene.sequence_utils.clamp(b, 0.0, total))

	if not enabled:
		return LoopWindow(enabled=False, a=a, b=b)

	if a > b:
		logger.warning(f"Loop disabled: A ({a:.2f}s) is after B ({b:.2f}s)")
		return LoopWindow(enabled=False, a=a, b=b)

	if total <= 0:
		return LoopWindow(enabled=False, a=a, b=b)

	if a == b:
		logger.warning(f"Loop disabled: A and B are both at {a:.2f}s")
		return LoopWindow(enabled=False, a=a, b=b)

	return LoopWindow(enabled=True, a=a, b=b)


def wrap (window: LoopWindow, previous: float, raw: float) -> typing.Optional[float]:

	"""Return the wrapped position for a tick, or None when no wrap applies.

	Parameters:
		window: The active loop window.
		previous: Position after the previous tick.
		raw: Unclamped position this tick would reach.

	Returns:
		``a + overshoot`` (modulo the window length), or ``None`` when the
		tick does not cross B from inside or the window is empty.

	Example:
		```python
		window = LoopWindow(enabled=True, a=3.0, b=6.0)
		wrap(window, previous=5.9, raw=6.2)   # → 3.2 (approximately)
		wrap(window, previous=5.0, raw=5.5)   # → None
		```
	"""

	if not window.enabled:
		return None

	if previous > window.b or raw <= window.b:
		return None

	if window.length <= 0:
		return None

	overshoot = raw - window.b

	return window.a + math.fmod(overshoot, window.length)


def truncate_for_wrap (
	notes: typing.Sequence["jazzene.generator.NoteEvent"],
	window: LoopWindow,
	sequence: "jazzene.generator.GeneratedSequence",
) -> typing.List["jazzene.generator.NoteEvent"]:

	"""Clip notes at the loop end for rendering.

	Notes that start before B but ring past it are shortened to end at B;
	notes starting at or after B are dropped. With the loop disabled the
	notes are returned unchanged.
	"""

	if not window.enabled:
		return list(notes)

	end_beat = fractions.Fraction(sequence.seconds_to_beats(window.b))
	clipped: typing.List["jazzene.generator.NoteEvent"] = []

	for note in notes:

		if note.start >= end_beat:
			continue

		if note.end > end_beat:
			note = dataclasses.replace(note, duration=end_beat - note.start)

		clipped.append(note)

	return clipped
