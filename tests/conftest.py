import fractions
import typing

import mido
import pytest

import jazzene.config
import jazzene.generator


class FakeClock:

	"""Manually advanced wall clock for transport tests."""

	def __init__ (self, start: float = 100.0) -> None:

		self.now = start

	def __call__ (self) -> float:

		return self.now

	def advance (self, seconds: float) -> None:

		"""Move the clock forward by ``seconds``."""

		self.now += seconds


class FakeMidiOut:

	"""MIDI output stub that records what was sent."""

	def __init__ (self) -> None:

		self.messages: typing.List[mido.Message] = []
		self.closed = False

	def send (self, message: mido.Message) -> None:

		"""Keep outgoing MIDI messages for inspection."""

		self.messages.append(message)

	def close (self) -> None:

		"""Mark the fake device closed."""

		self.closed = True


# Module-level reference so tests can reach the most recently opened FakeMidiOut.
_current_fake_output: typing.Optional[FakeMidiOut] = None


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI", "Other MIDI"]


def _fake_open_output (name: str) -> FakeMidiOut:

	"""Return a fake MIDI output regardless of the name."""

	global _current_fake_output
	_current_fake_output = FakeMidiOut()
	return _current_fake_output


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> None:

	"""Patch mido to use fake MIDI outputs."""

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", _fake_open_output)


@pytest.fixture
def clock () -> FakeClock:

	"""A fake wall clock starting at 100 seconds."""

	return FakeClock()


@pytest.fixture
def midi_out () -> FakeMidiOut:

	"""A recording MIDI port."""

	return FakeMidiOut()


@pytest.fixture
def default_settings () -> jazzene.config.Settings:

	"""Defaults: C, 4/4, 120 BPM, seed 42, 8 measures of Cm7 F7 Bbmaj7 Ebmaj7."""

	return jazzene.config.Settings()


@pytest.fixture
def default_sequence (default_settings: jazzene.config.Settings) -> jazzene.generator.GeneratedSequence:

	"""The sequence generated from the default settings (16 seconds long)."""

	return jazzene.generator.generate_from_settings(default_settings)


def make_sequence (
	notes: typing.Sequence[typing.Tuple[float, int, float]],
	measures: int = 4,
	tempo: float = 120,
) -> jazzene.generator.GeneratedSequence:

	"""Build a 4/4 sequence by hand from ``(start_beat, pitch, duration_beats)`` triples."""

	events = tuple(
		jazzene.generator.NoteEvent(start=fractions.Fraction(start), pitch=pitch, duration=fractions.Fraction(duration))
		for start, pitch, duration in notes
	)

	return jazzene.generator.GeneratedSequence(
		notes = events,
		total_beats = fractions.Fraction(measures * 4),
		tempo = tempo,
		time_signature = jazzene.generator.TimeSignature(4, 4),
		measures = measures,
	)


@pytest.fixture
def sequence_factory () -> typing.Callable[..., jazzene.generator.GeneratedSequence]:

	"""Expose :func:`make_sequence` to tests."""

	return make_sequence
