"""Seek control mapping.

The seek control works in a normalized domain of ``[0, 100]`` mapped
linearly onto ``[0, total]`` seconds. Seeking while playing re-anchors the
clock so ticks continue smoothly from the new position; seeking while
stopped leaves a preview point that renderers can draw a static snapshot
from.
"""

import dataclasses
import math
import typing

import jazzene.clock

if typing.TYPE_CHECKING:
	import jazzene.generator


NORMALIZED_MAX = 100.0


def to_position (value: float, total: float) -> float:

	"""Map a control value in ``[0, 100]`` to seconds. Out-of-range values clamp."""

	if total <= 0 or not math.isfinite(value) or value <= 0:
		return 0.0

	if value >= NORMALIZED_MAX:
		return total

	return total * value / NORMALIZED_MAX


def to_normalized (position: float, total: float) -> float:

	"""Map seconds to a control value in ``[0, 100]`` (the inverse of :func:`to_position`)."""

	if total <= 0 or not math.isfinite(position) or position <= 0:
		return 0.0

	if position >= total:
		return NORMALIZED_MAX

	return position / total * NORMALIZED_MAX


def seek (state: jazzene.clock.PlaybackState, position: float, now: float) -> jazzene.clock.PlaybackState:

	"""Move to an absolute position in seconds, clamped, keeping the play flag."""

	if not math.isfinite(position):
		position = 0.0

	return jazzene.clock.reanchor(state, position, now)


def set_normalized (state: jazzene.clock.PlaybackState, value: float, now: float) -> jazzene.clock.PlaybackState:

	"""Seek from a control value in ``[0, 100]``.

	The clamped control value is remembered on the state, so
	:func:`get_normalized` reads it back exactly until the position moves.
	"""

	moved = seek(state, to_position(value, state.total), now)

	if moved.total <= 0 or not math.isfinite(value):
		value = 0.0

	value = max(0.0, min(NORMALIZED_MAX, value))

	return dataclasses.replace(moved, normalized_hint=value)


def get_normalized (state: jazzene.clock.PlaybackState) -> float:

	"""Return the control value for the current position."""

	if state.normalized_hint is not None:
		return state.normalized_hint

	return to_normalized(state.position, state.total)


def seek_measure (
	state: jazzene.clock.PlaybackState,
	sequence: "jazzene.generator.GeneratedSequence",
	measure: int,
	now: float,
) -> jazzene.clock.PlaybackState:

	"""Seek to the start of a zero-based measure of ``sequence``."""

	return seek(state, sequence.measure_start_seconds(measure), now)
