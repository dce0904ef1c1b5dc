"""Named-event callbacks shared by the transport and the player.

The transport emits ``play``, ``stop``, ``seek``, ``wrap``, ``complete``
and ``sequence`` synchronously, on whichever thread made the call. The
player's refresh loop emits ``frame`` asynchronously, once per refresh with
the surface snapshot, so coroutine listeners can be awaited.
"""

import asyncio
import inspect
import typing


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	Listeners for transport and player events, keyed by event name.

	Example:
		```python
		transport.events.on("wrap", lambda before, after: print(f"looped {before:.2f} -> {after:.2f}"))
		player.events.on("frame", display.update)
		```
	"""

	def __init__ (self) -> None:

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Subscribe ``callback`` to ``event_name``. Subscribing twice means two calls per emit.
		"""

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Drop one subscription of ``callback`` (a display closing, a client leaving).

		Raises ``ValueError`` when ``callback`` has no subscription to ``event_name``.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def listener_count (self, event_name: str) -> int:
		return len(self._listeners.get(event_name, []))


	def emit_sync (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for a transport event before returning.

		Transport events fire from arbitrary threads, so coroutine listeners
		cannot be awaited here and raise ``ValueError``. Subscribe those to
		the player's ``frame`` event instead.
		"""

		# Copy so a listener may unregister itself while being called.
		for callback in list(self._listeners.get(event_name, [])):

			if inspect.iscoroutinefunction(callback):
				raise ValueError(f"Async callback registered for synchronous event {event_name!r}")

			callback(*args, **kwargs)


	async def emit_async (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call plain listeners in order, then await the coroutine listeners together.
		"""

		tasks: typing.List[typing.Awaitable[typing.Any]] = []

		for callback in list(self._listeners.get(event_name, [])):

			if inspect.iscoroutinefunction(callback):
				tasks.append(callback(*args, **kwargs))

			else:
				callback(*args, **kwargs)

		if tasks:
			await asyncio.gather(*tasks)
