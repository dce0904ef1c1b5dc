"""Live MIDI output of the playing sequence.

:class:`NoteOutput` turns consecutive playhead positions into note on/off
messages on a ``mido`` output port, so a hardware or software synth can
sound the solo in time with the transport.
"""

import logging
import typing

import mido

if typing.TYPE_CHECKING:
	import jazzene.generator


logger = logging.getLogger(__name__)


# Largest forward move between updates still treated as continuous playback.
# Anything further is a seek, and the notes in between are not sounded.
MAX_STEP_SECONDS = 0.25


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""Open a MIDI output port.

	Parameters:
		device_name: Port to open. When omitted, the first available port is
			used (with a note of the alternatives in the log).

	Returns:
		``(name, port)``, or ``(None, None)`` when no port could be opened.
	"""

	try:
		outputs = mido.get_output_names()

	except Exception as e:
		logger.error(f"Could not list MIDI outputs: {e}")
		return None, None

	if not outputs:
		logger.error("No MIDI output devices found.")
		return None, None

	if device_name is None:
		device_name = outputs[0]

		if len(outputs) > 1:
			logger.info(f"Using MIDI output '{device_name}'. Pass --midi-out to choose from: {outputs}")

	elif device_name not in outputs:
		logger.error(f"MIDI output device '{device_name}' not found. Available devices: {outputs}")
		return None, None

	try:
		port = mido.open_output(device_name)

	except Exception as e:
		logger.error(f"Failed to open MIDI output '{device_name}': {e}")
		return None, None

	logger.info(f"Opened MIDI output: {device_name}")

	return device_name, port


class NoteOutput:

	"""Sends the notes the playhead crosses to a MIDI port.

	Call :meth:`update` once per refresh with the current position. Notes
	whose onset was crossed since the previous update are started; notes
	whose end has been reached are released. A jump backwards (loop wrap or
	seek) or more than ``max_step`` seconds forwards (seek, measure click)
	releases everything and restarts from the new position.

	Example:
		```python
		name, port = jazzene.midi_out.select_output_device()
		output = jazzene.midi_out.NoteOutput(port)
		player.events.on("frame", lambda snapshot: output.update(transport.sequence, transport.position, transport.playing))
		```
	"""

	def __init__ (self, port: typing.Any, channel: int = 0, max_step: float = MAX_STEP_SECONDS) -> None:

		if not 0 <= channel <= 15:
			raise ValueError("MIDI channel must be between 0 and 15")

		if max_step <= 0:
			raise ValueError("max_step must be positive")

		self.port = port
		self.channel = channel
		self.max_step = max_step
		self._sounding: typing.Dict[int, float] = {}
		self._last_position: typing.Optional[float] = None


	@property
	def sounding (self) -> typing.List[int]:

		"""Pitches currently held on, lowest first."""

		return sorted(self._sounding)


	def _send (self, message_type: str, pitch: int, velocity: int = 0) -> None:

		try:
			self.port.send(mido.Message(message_type, channel=self.channel, note=pitch, velocity=velocity))
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")


	def release_all (self) -> None:

		"""Send note off for every sounding note."""

		for pitch in list(self._sounding):
			self._send('note_off', pitch)

		self._sounding.clear()


	def update (self, sequence: "jazzene.generator.GeneratedSequence", position: float, playing: bool) -> None:

		"""Bring the port up to date with the playhead.

		Parameters:
			sequence: The sequence being played.
			position: Current position in seconds.
			playing: Whether the transport is playing. When False everything
				is released and the next update starts afresh.
		"""

		if not playing:
			self.release_all()
			self._last_position = None
			return

		restart = (
			self._last_position is None
			or position < self._last_position
			or position - self._last_position > self.max_step
		)

		if restart:
			self.release_all()
			starting = sequence.notes_starting_between(position, position, inclusive=True)
		else:
			starting = sequence.notes_starting_between(self._last_position, position)

		for pitch, end in list(self._sounding.items()):
			if end <= position:
				self._send('note_off', pitch)
				del self._sounding[pitch]

		for note in starting:

			if note.pitch in self._sounding:
				self._send('note_off', note.pitch)

			self._send('note_on', note.pitch, note.velocity)
			self._sounding[note.pitch] = sequence.beats_to_seconds(note.end)

		self._last_position = position


	def close (self) -> None:

		"""Release all notes and close the port."""

		self.release_all()

		try:
			self.port.close()
		except Exception:
			logger.exception("Failed to close MIDI output")
