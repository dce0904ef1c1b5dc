"""WebSocket bridge for a browser front end.

Connected clients receive the surface snapshot (see :mod:`jazzene.surface`)
about ten times a second, plus the current settings, as JSON. They drive
playback by sending JSON commands:

- ``{"command": "play"}``, ``"stop"``, ``"toggle"``
- ``{"command": "seek", "value": 42.5}`` (``[0, 100]`` control value)
- ``{"command": "measure", "number": 3}`` (one-based, as labeled)
- ``{"command": "loop", "enabled": true, "a": 2.0, "b": 6.0}``
- ``{"command": "chords", "text": "Dm7 G7 Cmaj7"}``
- ``{"command": "settings", "options": {"bpm": 160, "seed": 7}}``

Chord and settings changes regenerate through the
:class:`~jazzene.worker.GenerationWorker`, so a burst of edits only ever
installs the result of the last one.
"""

import asyncio
import dataclasses
import json
import logging
import typing

import websockets
import websockets.asyncio.server
import websockets.exceptions

import jazzene.config
import jazzene.surface

if typing.TYPE_CHECKING:
	import jazzene.transport
	import jazzene.worker


logger = logging.getLogger(__name__)


class WebUI:

	"""Serves playback state to WebSocket clients and applies their commands.

	Parameters:
		transport: The transport to report on and control.
		worker: Regenerates sequences for chord and settings changes.
		settings: The settings the current sequence was generated from.
		host: Interface to listen on.
		ws_port: WebSocket port.
	"""

	def __init__ (
		self,
		transport: "jazzene.transport.Transport",
		worker: "jazzene.worker.GenerationWorker",
		settings: jazzene.config.Settings,
		host: str = "0.0.0.0",
		ws_port: int = 8765,
		broadcast_interval: float = 0.1,
	) -> None:

		self.transport = transport
		self.worker = worker
		self.settings = settings
		self.host = host
		self.ws_port = ws_port
		self.broadcast_interval = broadcast_interval
		self._ws_server: typing.Optional[websockets.asyncio.server.Server] = None
		self._broadcast_task: typing.Optional[asyncio.Task] = None
		self._generation_tasks: typing.Set[asyncio.Task] = set()
		self._clients: typing.Set[websockets.asyncio.server.ServerConnection] = set()


	async def start (self) -> None:

		"""Open the WebSocket server and start broadcasting."""

		try:
			self._ws_server = await websockets.asyncio.server.serve(self._handle_client, self.host, self.ws_port)
		except OSError as e:
			logger.error(f"WebSocket server error: {e}")
			return

		self._broadcast_task = asyncio.create_task(self._broadcast_loop())
		logger.info(f"WebSocket bridge listening on ws://{self.host}:{self.ws_port}")


	def get_state (self) -> typing.Dict[str, typing.Any]:

		"""Return the message broadcast to clients."""

		state = jazzene.surface.snapshot(self.transport)
		state["settings"] = self.settings.to_mapping()

		return state


	async def handle_message (self, message: typing.Union[str, bytes]) -> bool:

		"""Decode and apply one client message. Returns True if a command was applied."""

		try:
			data = json.loads(message)
		except ValueError:
			logger.warning(f"Ignoring malformed message: {message!r}")
			return False

		if not isinstance(data, dict):
			logger.warning(f"Ignoring message that is not a JSON object: {message!r}")
			return False

		return await self.handle_command(data)


	async def handle_command (self, data: typing.Dict[str, typing.Any]) -> bool:

		"""Apply one decoded command. Returns True if it was recognised and valid."""

		command = data.get("command")

		try:
			if command == "play":
				self.transport.play()

			elif command == "stop":
				self.transport.stop()

			elif command == "toggle":
				self.transport.toggle()

			elif command == "seek":
				self.transport.set_normalized(float(data["value"]))

			elif command == "measure":
				jazzene.surface.click_measure(self.transport, int(data["number"]))

			elif command == "loop":
				window = self.transport.configure_loop(bool(data.get("enabled", True)), float(data["a"]), float(data["b"]))
				self.settings = dataclasses.replace(self.settings, loop=window.enabled, loop_a=window.a, loop_b=window.b)

			elif command == "chords":
				self.settings = dataclasses.replace(self.settings, chords=str(data["text"]))
				self._regenerate()

			elif command == "settings":
				self.settings = jazzene.config.Settings.from_mapping(data.get("options") or {}, base=self.settings)
				self.transport.stop_policy = self.settings.stop
				self._regenerate()

			else:
				logger.warning(f"Unknown command {command!r}")
				return False

		except (KeyError, TypeError, ValueError) as e:
			logger.warning(f"Invalid {command!r} command {data!r}: {e}")
			return False

		return True


	def _regenerate (self) -> None:

		task = asyncio.create_task(self._request_and_apply(self.settings))
		self._generation_tasks.add(task)
		task.add_done_callback(self._generation_tasks.discard)


	async def _request_and_apply (self, settings: jazzene.config.Settings) -> None:

		sequence = await self.worker.request(settings)

		if sequence is not None:
			self.transport.configure_loop(settings.loop, settings.loop_a, settings.loop_b)


	async def _handle_client (self, websocket: websockets.asyncio.server.ServerConnection) -> None:

		self._clients.add(websocket)

		try:
			await websocket.send(json.dumps(self.get_state()))

			async for message in websocket:
				await self.handle_message(message)

		except websockets.exceptions.ConnectionClosed:
			pass

		finally:
			self._clients.discard(websocket)


	async def _broadcast_loop (self) -> None:

		while True:

			await asyncio.sleep(self.broadcast_interval)

			if not self._clients:
				continue

			websockets.broadcast(self._clients, json.dumps(self.get_state()))


	def stop (self) -> None:

		"""Stop broadcasting and close the server."""

		if self._broadcast_task:
			self._broadcast_task.cancel()
			self._broadcast_task = None

		for task in list(self._generation_tasks):
			task.cancel()

		if self._ws_server:
			self._ws_server.close()
			self._ws_server = None
