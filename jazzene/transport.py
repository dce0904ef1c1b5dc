"""Thread-safe playback transport.

The :class:`Transport` is the single owner of the authoritative
:class:`~jazzene.clock.PlaybackState` and of the sequence being played.
Every user action and every clock tick is expressed as a small event value
and folded into the state by :func:`transition`, always under one lock, so
overlapping actions from different threads (a seek arriving while the
refresh loop ticks, a regeneration landing mid-playback) are applied one at
a time and in order.

Listeners subscribe through ``transport.events`` (an
:class:`~jazzene.event_emitter.EventEmitter`):

- ``"play"`` / ``"stop"`` - with the position in seconds.
- ``"seek"`` - with the new position.
- ``"wrap"`` - loop wraparound, with the position before and after.
- ``"complete"`` - playback reached the end of the sequence.
- ``"sequence"`` - a new sequence was installed, with the sequence.

Events are emitted after the lock is released, so listeners may call back
into the transport.

Example:
	```python
	transport = jazzene.transport.Transport()
	transport.load_sequence(sequence)
	transport.events.on("complete", lambda position: print("done"))
	transport.play()
	```
"""

import dataclasses
import logging
import threading
import time
import typing

import jazzene.clock
import jazzene.event_emitter
import jazzene.generator
import jazzene.loop
import jazzene.seek
import jazzene.time_format


logger = logging.getLogger(__name__)


ClockFn = typing.Callable[[], float]


@dataclasses.dataclass(frozen=True)
class Play:
	now: float


@dataclasses.dataclass(frozen=True)
class Stop:
	now: float
	policy: jazzene.clock.StopPolicy = jazzene.clock.StopPolicy.PRESERVE


@dataclasses.dataclass(frozen=True)
class Toggle:
	now: float
	policy: jazzene.clock.StopPolicy = jazzene.clock.StopPolicy.PRESERVE


@dataclasses.dataclass(frozen=True)
class Tick:
	now: float


@dataclasses.dataclass(frozen=True)
class Seek:
	position: float
	now: float


@dataclasses.dataclass(frozen=True)
class SeekNormalized:
	value: float
	now: float


@dataclasses.dataclass(frozen=True)
class Retotal:
	total: float
	now: float


@dataclasses.dataclass(frozen=True)
class ConfigureLoop:
	enabled: bool
	a: float
	b: float


TransportEvent = typing.Union[Play, Stop, Toggle, Tick, Seek, SeekNormalized, Retotal, ConfigureLoop]


def transition (state: jazzene.clock.PlaybackState, event: TransportEvent) -> jazzene.clock.PlaybackState:

	"""Apply one event to a state and return the resulting state.

	This is the only place transport events are interpreted; it is a pure
	function, so any sequence of events can be replayed against a state to
	reproduce what the transport did.

	Raises:
		TypeError: For an object that is not a transport event.
	"""

	if isinstance(event, Tick):
		return jazzene.clock.tick(state, event.now)

	if isinstance(event, Play):
		return jazzene.clock.play(state, event.now)

	if isinstance(event, Stop):
		return jazzene.clock.stop(state, event.now, event.policy)

	if isinstance(event, Toggle):
		if state.playing:
			return jazzene.clock.stop(state, event.now, event.policy)
		return jazzene.clock.play(state, event.now)

	if isinstance(event, Seek):
		return jazzene.seek.seek(state, event.position, event.now)

	if isinstance(event, SeekNormalized):
		return jazzene.seek.set_normalized(state, event.value, event.now)

	if isinstance(event, Retotal):
		return jazzene.clock.retotal(state, event.total, event.now)

	if isinstance(event, ConfigureLoop):
		return jazzene.clock.set_loop(state, event.enabled, event.a, event.b)

	raise TypeError(f"Not a transport event: {event!r}")


class Transport:

	"""Owns the playback state and the current sequence.

	All public methods are safe to call from any thread.
	"""

	def __init__ (
		self,
		sequence: typing.Optional[jazzene.generator.GeneratedSequence] = None,
		stop_policy: jazzene.clock.StopPolicy = jazzene.clock.StopPolicy.PRESERVE,
		clock: ClockFn = time.perf_counter,
	) -> None:

		"""Create a stopped transport.

		Parameters:
			sequence: Initial sequence. Defaults to an empty one (playback is a
				no-op until a sequence with notes is loaded).
			stop_policy: What ``stop()`` does with the position.
			clock: Monotonic wall clock in seconds. Tests inject a fake.
		"""

		if sequence is None:
			sequence = jazzene.generator.empty_sequence(120, jazzene.generator.TimeSignature())

		self._lock = threading.Lock()
		self._clock = clock
		self._sequence = sequence
		self._state = jazzene.clock.initial_state(sequence.total_seconds)
		self.stop_policy = stop_policy
		self.events = jazzene.event_emitter.EventEmitter()


	@property
	def state (self) -> jazzene.clock.PlaybackState:
		return self._state


	@property
	def sequence (self) -> jazzene.generator.GeneratedSequence:
		return self._sequence


	@property
	def position (self) -> float:
		return self._state.position


	@property
	def playing (self) -> bool:
		return self._state.playing


	@property
	def total (self) -> float:
		return self._state.total


	def read (self) -> typing.Tuple[jazzene.clock.PlaybackState, jazzene.generator.GeneratedSequence]:

		"""Return the state and the sequence it belongs to, read together."""

		with self._lock:
			return self._state, self._sequence


	def _apply (self, event: TransportEvent) -> typing.Tuple[jazzene.clock.PlaybackState, jazzene.clock.PlaybackState]:

		with self._lock:
			before = self._state
			self._state = transition(before, event)
			return before, self._state


	def play (self) -> None:

		"""Start playback (from zero if the position is at the end)."""

		before, after = self._apply(Play(self._clock()))

		if after.playing and not before.playing:
			logger.debug(f"Play from {after.position:.3f}s")
			self.events.emit_sync("play", after.position)


	def stop (self) -> None:

		"""Stop playback, keeping or rewinding the position per ``stop_policy``."""

		before, after = self._apply(Stop(self._clock(), self.stop_policy))

		if before.playing and not after.playing:
			logger.debug(f"Stop at {after.position:.3f}s")
			self.events.emit_sync("stop", after.position)


	def toggle (self) -> None:

		"""Play when stopped, stop when playing, decided under the lock."""

		before, after = self._apply(Toggle(self._clock(), self.stop_policy))

		if after.playing and not before.playing:
			logger.debug(f"Play from {after.position:.3f}s")
			self.events.emit_sync("play", after.position)

		elif before.playing and not after.playing:
			logger.debug(f"Stop at {after.position:.3f}s")
			self.events.emit_sync("stop", after.position)


	def tick (self) -> jazzene.clock.PlaybackState:

		"""Advance the position to the current wall-clock time and return the new state."""

		before, after = self._apply(Tick(self._clock()))

		if before.playing and after.playing and after.position < before.position:
			self.events.emit_sync("wrap", before.position, after.position)

		elif before.playing and not after.playing:
			logger.info("Playback complete")
			self.events.emit_sync("complete", after.position)

		return after


	def seek (self, position: float) -> None:

		"""Seek to an absolute position in seconds (clamped)."""

		_, after = self._apply(Seek(position, self._clock()))
		self.events.emit_sync("seek", after.position)


	def set_normalized (self, value: float) -> None:

		"""Seek from a ``[0, 100]`` control value."""

		_, after = self._apply(SeekNormalized(value, self._clock()))
		self.events.emit_sync("seek", after.position)


	@property
	def normalized (self) -> float:

		"""The ``[0, 100]`` control value for the current position."""

		return jazzene.seek.get_normalized(self._state)


	def click_measure (self, measure: int) -> None:

		"""Seek to the start of a zero-based measure of the current sequence."""

		with self._lock:
			position = self._sequence.measure_start_seconds(measure)

		self.seek(position)


	def configure_loop (self, enabled: bool, a: float, b: float) -> jazzene.loop.LoopWindow:

		"""Set the A-B loop window (in seconds). Returns the validated window."""

		_, after = self._apply(ConfigureLoop(enabled, a, b))

		return after.loop


	def load_sequence (self, sequence: jazzene.generator.GeneratedSequence) -> None:

		"""Install a regenerated sequence.

		The position persists, clamped into the new duration, and the loop
		window is revalidated against it.
		"""

		with self._lock:
			self._sequence = sequence
			before = self._state
			self._state = transition(before, Retotal(sequence.total_seconds, self._clock()))
			after = self._state

		logger.debug(f"Loaded sequence: {len(sequence)} notes, {sequence.total_seconds:.2f}s")

		self.events.emit_sync("sequence", sequence)

		if before.playing and not after.playing:
			self.events.emit_sync("stop", after.position)


	def display_time (self) -> str:

		"""Return the ``"M:SS / M:SS"`` time display text."""

		state = self._state

		return jazzene.time_format.format_time(state.position, state.total)
