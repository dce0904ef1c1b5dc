"""Cancellable background generation.

Generation runs in an executor so the event loop keeps refreshing the
display and answering commands. Every request takes the next value of a
monotonically increasing token. When a result arrives it is applied only if
its token is still the latest one; anything older was superseded by a later
request (or by :meth:`GenerationWorker.cancel`) and is dropped.
"""

import asyncio
import concurrent.futures
import logging
import typing

import jazzene.generator

if typing.TYPE_CHECKING:
	import jazzene.config
	import jazzene.transport


logger = logging.getLogger(__name__)


GenerateFn = typing.Callable[["jazzene.config.Settings"], jazzene.generator.GeneratedSequence]


class GenerationWorker:

	"""Runs generation off the event loop and applies only the latest result.

	Parameters:
		transport: Receives each accepted sequence via ``load_sequence``.
		generate: The generation function. Defaults to
			:func:`jazzene.generator.generate_from_settings`.
		executor: Executor to run generation in. ``None`` uses the event
			loop's default thread pool.

	Example:
		```python
		worker = jazzene.worker.GenerationWorker(transport)
		sequence = await worker.request(settings)
		if sequence is None:
			pass  # superseded by a newer request
		```
	"""

	def __init__ (
		self,
		transport: "jazzene.transport.Transport",
		generate: typing.Optional[GenerateFn] = None,
		executor: typing.Optional[concurrent.futures.Executor] = None,
	) -> None:

		self._transport = transport
		self._generate: GenerateFn = generate or jazzene.generator.generate_from_settings
		self._executor = executor
		self._token = 0


	@property
	def latest_token (self) -> int:
		return self._token


	def is_current (self, token: int) -> bool:
		return token == self._token


	def cancel (self) -> None:

		"""Invalidate any in-flight request. Its result will be discarded."""

		self._token += 1
		logger.debug(f"Generation cancelled (token now {self._token})")


	async def request (self, settings: "jazzene.config.Settings") -> typing.Optional[jazzene.generator.GeneratedSequence]:

		"""Generate a sequence for ``settings`` and install it on the transport.

		Returns:
			The installed sequence, or ``None`` when the result was stale.
		"""

		self._token += 1
		token = self._token

		loop = asyncio.get_running_loop()
		sequence = await loop.run_in_executor(self._executor, self._generate, settings)

		if not self.is_current(token):
			logger.debug(f"Discarding stale generation result (token {token}, latest {self._token})")
			return None

		self._transport.load_sequence(sequence)

		return sequence
