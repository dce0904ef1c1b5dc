"""Playback clock.

The clock is a set of pure transition functions over an immutable
:class:`PlaybackState`. Each returns a new state; nothing is mutated in
place, so a caller can never observe a half-applied transition.

Position is measured in seconds and derived from wall-clock *deltas*: while
playing, the state remembers the instant and position it was last anchored
at, and every tick recomputes ``anchor_position + (now - anchor_instant)``.
Tick cadence therefore has no effect on accuracy, and no error accumulates
from one tick to the next.

Stop behaviour is a policy. ``StopPolicy.PRESERVE`` (the default) freezes the
position so the next ``play`` resumes; ``StopPolicy.REWIND`` returns to zero.
Either way, ``play`` after playback ran to the end starts again from zero.
"""

import dataclasses
import enum
import logging
import typing

import jazzene.loop


logger = logging.getLogger(__name__)


class StopPolicy (enum.Enum):

	"""What ``stop`` does with the position."""

	PRESERVE = "preserve"
	REWIND = "rewind"


@dataclasses.dataclass(frozen=True)
class PlaybackState:

	"""Transport state. Invariant: ``0 <= position <= total``.

	``anchor_instant`` and ``anchor_position`` are the wall-clock instant and
	position the clock was last anchored at (by play, seek or loop wrap).

	``normalized_hint`` is the exact control value of the last normalized
	seek. It is reported back until the position next moves, since the
	float round trip through seconds is not exact.
	"""

	total: float = 0.0
	position: float = 0.0
	playing: bool = False
	anchor_instant: float = 0.0
	anchor_position: float = 0.0
	loop: jazzene.loop.LoopWindow = jazzene.loop.LoopWindow()
	normalized_hint: typing.Optional[float] = None

	@property
	def at_end (self) -> bool:
		return self.total > 0 and self.position >= self.total


def initial_state (total: float = 0.0) -> PlaybackState:

	"""Return a stopped state at position zero."""

	return PlaybackState(total=max(0.0, total))


def reanchor (state: PlaybackState, position: float, now: float) -> PlaybackState:

	"""Move to ``position`` (clamped) and anchor the clock there at ``now``."""

	position = max(0.0, min(state.total, position))

	return dataclasses.replace(state, position=position, anchor_instant=now, anchor_position=position, normalized_hint=None)


def play (state: PlaybackState, now: float) -> PlaybackState:

	"""Start playback from the held position.

	A held position at the very end rewinds to zero first. With nothing to
	play (total zero) the state is returned unchanged.
	"""

	if state.playing or state.total <= 0:
		return state

	position = 0.0 if state.at_end else state.position
	hint = state.normalized_hint if position == state.position else None

	return dataclasses.replace(reanchor(state, position, now), playing=True, normalized_hint=hint)


def tick (state: PlaybackState, now: float) -> PlaybackState:

	"""Advance the position to wall-clock instant ``now``.

	Loop wrap takes priority; otherwise reaching the total stops playback
	with the position pinned at the end.
	"""

	if not state.playing:
		return state

	raw = state.anchor_position + max(0.0, now - state.anchor_instant)

	wrapped = jazzene.loop.wrap(state.loop, state.position, raw)

	if wrapped is not None:
		return reanchor(state, wrapped, now)

	if raw >= state.total:
		return dataclasses.replace(reanchor(state, state.total, now), playing=False)

	hint = state.normalized_hint if raw == state.position else None

	return dataclasses.replace(state, position=raw, normalized_hint=hint)


def stop (state: PlaybackState, now: float, policy: StopPolicy = StopPolicy.PRESERVE) -> PlaybackState:

	"""Stop playback, freezing the instantaneous position (or rewinding, per policy)."""

	if not state.playing:
		return state

	current = tick(state, now)
	position = 0.0 if policy is StopPolicy.REWIND else current.position

	return dataclasses.replace(reanchor(current, position, now), playing=False)


def retotal (state: PlaybackState, total: float, now: float) -> PlaybackState:

	"""Install a new total duration after regeneration.

	The position is clamped into the new bounds and the loop window is
	revalidated. An empty sequence (total zero) stops playback.

	While playing, the position is first brought up to ``now`` so the time
	since the last tick is kept.
	"""

	state = tick(state, now)

	total = max(0.0, total)
	loop = jazzene.loop.configure(state.loop.enabled, state.loop.a, state.loop.b, total)
	resized = dataclasses.replace(state, total=total, loop=loop)
	current = reanchor(resized, state.position, now)

	if total <= 0:
		return dataclasses.replace(current, playing=False)

	return current


def set_loop (state: PlaybackState, enabled: bool, a: float, b: float) -> PlaybackState:

	"""Replace the loop window, validated against the current total."""

	return dataclasses.replace(state, loop=jazzene.loop.configure(enabled, a, b, state.total))


def beats (state: PlaybackState, tempo: float) -> float:

	"""Return the position in beats at ``tempo``."""

	return state.position * tempo / 60.0
