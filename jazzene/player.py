"""Cooperative refresh loop.

The :class:`Player` drives the transport from an asyncio task: every frame
it ticks the clock, takes a snapshot of the labeled surface and emits it as
a ``"frame"`` event for the display, the MIDI output and the web bridge.

The clock itself is wall-clock based, so a late frame never makes playback
drift; it only delays when listeners see the new position.
"""

import asyncio
import logging
import time
import typing

import jazzene.event_emitter
import jazzene.surface

if typing.TYPE_CHECKING:
	import jazzene.transport


logger = logging.getLogger(__name__)


DEFAULT_REFRESH_RATE = 30.0


class Player:

	"""Ticks a transport at a fixed refresh rate.

	Parameters:
		transport: The transport to drive.
		refresh_rate: Frames per second.
		exit_on_complete: When True the loop ends once playback reaches the
			end of the sequence (used by the command line ``play``).

	Example:
		```python
		player = jazzene.player.Player(transport)
		player.events.on("frame", display.update)
		transport.play()
		await player.run()
		```
	"""

	def __init__ (
		self,
		transport: "jazzene.transport.Transport",
		refresh_rate: float = DEFAULT_REFRESH_RATE,
		exit_on_complete: bool = False,
	) -> None:

		if refresh_rate <= 0:
			raise ValueError("Refresh rate must be positive")

		self.transport = transport
		self.frame_interval = 1.0 / refresh_rate
		self.exit_on_complete = exit_on_complete
		self.events = jazzene.event_emitter.EventEmitter()
		self.running = False
		self.task: typing.Optional[asyncio.Task] = None
		self.frame_count = 0
		self._completed = False

		self.transport.events.on("complete", self._on_complete)


	def _on_complete (self, position: float) -> None:
		self._completed = True


	async def step (self) -> typing.Dict[str, typing.Any]:

		"""Render one frame: tick, snapshot, emit ``"frame"``. Returns the snapshot."""

		self.transport.tick()
		snapshot = jazzene.surface.snapshot(self.transport)
		self.frame_count += 1

		await self.events.emit_async("frame", snapshot)

		return snapshot


	async def start (self) -> None:

		"""Start the refresh loop in a separate asyncio task."""

		if self.running:
			return

		self.running = True
		self._completed = False
		self.task = asyncio.create_task(self._run_loop())

		logger.debug(f"Player started ({1.0 / self.frame_interval:.0f} fps)")


	async def stop (self) -> None:

		"""Stop the refresh loop and wait for it to finish."""

		if not self.running:
			return

		self.running = False

		if self.task:
			await self.task

		self.task = None


	async def run (self) -> None:

		"""Start the loop and wait for it to end (on completion or :meth:`stop`)."""

		await self.start()

		try:
			if self.task:
				await self.task
		except asyncio.CancelledError:
			pass
		finally:
			await self.stop()


	async def _run_loop (self) -> None:

		next_frame_time = time.perf_counter()

		while self.running:

			await self.step()

			if self.exit_on_complete and self._completed:
				logger.info("Sequence complete.")
				self.running = False
				break

			next_frame_time += self.frame_interval
			sleep_time = next_frame_time - time.perf_counter()

			if sleep_time > 0:
				await asyncio.sleep(sleep_time)
			else:
				# Fell behind; skip the missed frames rather than bursting to catch up.
				next_frame_time = time.perf_counter()
				await asyncio.sleep(0)
