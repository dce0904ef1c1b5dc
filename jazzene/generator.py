"""Deterministic improvisation generator.

:func:`generate` is a pure function of ``(progression, key, tempo,
time_signature, measures, seed)``. The only randomness comes from a
``random.Random`` seeded with the explicit ``seed`` and threaded through the
call, so identical arguments always produce identical notes.

For every measure the generator:

1. picks a rhythm template (:mod:`jazzene.rhythm`) by weighted choice,
2. lays its onsets across the measure with exact ``Fraction`` beat positions,
3. for each onset, looks up the chord sounding at that beat, builds its tone
   palette (:func:`jazzene.intervals.chord_palette`) and asks the
   :class:`~jazzene.melodic_state.ImprovisingVoice` for a pitch.

Example:
	```python
	import jazzene.chords
	import jazzene.generator
	import jazzene.progression

	key = jazzene.chords.parse_key("Bb")
	prog = jazzene.progression.parse_progression("Cm7 F7 Bbmaj7 Ebmaj7", key, measures=8)
	seq = jazzene.generator.generate(prog, key, 120, jazzene.generator.TimeSignature(4, 4), 8, seed=42)
	seq.total_seconds   # → 16.0
	```
"""

from __future__ import annotations

import bisect
import dataclasses
import fractions
import logging
import random
import re
import typing

import jazzene.chords
import jazzene.constants.register
import jazzene.constants.velocity
import jazzene.intervals
import jazzene.melodic_state
import jazzene.progression
import jazzene.rhythm

if typing.TYPE_CHECKING:
	import jazzene.config


logger = logging.getLogger(__name__)


_TIME_SIGNATURE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")
_BEAT_UNITS = (1, 2, 4, 8, 16)


@dataclasses.dataclass(frozen=True)
class TimeSignature:

	"""
	Beats per measure and the note value that gets one beat.
	"""

	beats_per_measure: int = 4
	beat_unit: int = 4

	def __post_init__ (self) -> None:
		if self.beats_per_measure <= 0:
			raise ValueError("beats_per_measure must be positive")
		if self.beat_unit not in _BEAT_UNITS:
			raise ValueError(f"beat_unit must be one of {_BEAT_UNITS}")

	@staticmethod
	def parse (text: str) -> "TimeSignature":

		"""Parse ``"3/4"`` style text. Raises ``ValueError`` for anything else."""

		match = _TIME_SIGNATURE_PATTERN.match(text or "")

		if match is None:
			raise ValueError(f"Invalid time signature: {text!r}. Expected e.g. '4/4' or '3/4'.")

		return TimeSignature(int(match.group(1)), int(match.group(2)))

	def __str__ (self) -> str:
		return f"{self.beats_per_measure}/{self.beat_unit}"


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""
	One generated note. Sequences keep notes ordered by start beat, then ascending pitch.
	"""

	start: fractions.Fraction
	pitch: int
	duration: fractions.Fraction
	velocity: int = jazzene.constants.velocity.NORMAL_VELOCITY
	emphasis: str = "normal"
	measure: int = 0

	@property
	def end (self) -> fractions.Fraction:
		return self.start + self.duration


@dataclasses.dataclass(frozen=True)
class GeneratedSequence:

	"""An immutable generated solo plus the timing needed to play it.

	``total_beats`` is ``measures * beats_per_measure`` (zero for an empty
	sequence). Positions in seconds derive from ``tempo``.
	"""

	notes: typing.Tuple[NoteEvent, ...]
	total_beats: fractions.Fraction
	tempo: float
	time_signature: TimeSignature
	measures: int
	key: typing.Optional[jazzene.chords.Key] = None
	spans: typing.Tuple[jazzene.progression.ChordSpan, ...] = ()


	def __len__ (self) -> int:
		return len(self.notes)


	def is_empty (self) -> bool:
		return not self.notes


	@property
	def seconds_per_beat (self) -> float:
		return 60.0 / self.tempo


	@property
	def total_seconds (self) -> float:
		return self.beats_to_seconds(self.total_beats)


	def beats_to_seconds (self, beats: typing.Union[float, fractions.Fraction]) -> float:

		"""Convert a beat position to seconds at this sequence's tempo."""

		return float(beats) * 60.0 / self.tempo


	def seconds_to_beats (self, seconds: float) -> float:

		"""Convert seconds to a beat position at this sequence's tempo."""

		return seconds * self.tempo / 60.0


	def measure_start_beat (self, measure: int) -> fractions.Fraction:

		"""Start beat of a zero-based measure, clamped to the sequence."""

		if self.measures <= 0:
			return fractions.Fraction(0)

		measure = max(0, min(self.measures - 1, measure))

		return fractions.Fraction(measure * self.time_signature.beats_per_measure)


	def measure_start_seconds (self, measure: int) -> float:

		"""Start time in seconds of a zero-based measure, clamped to the sequence."""

		return self.beats_to_seconds(self.measure_start_beat(measure))


	def measure_at (self, seconds: float) -> int:

		"""Zero-based measure containing a position (the last measure at the very end)."""

		if self.measures <= 0:
			return 0

		beat = self.seconds_to_beats(max(0.0, seconds))
		measure = int(beat // self.time_signature.beats_per_measure)

		return min(measure, self.measures - 1)


	def chord_at (self, seconds: float) -> typing.Optional[jazzene.chords.Chord]:

		"""Return the chord sounding at a position, or None for an empty sequence."""

		span = _span_at(self.spans, fractions.Fraction(self.seconds_to_beats(max(0.0, seconds))))

		return span.chord if span is not None else None


	def notes_between (self, start_seconds: float, end_seconds: float) -> typing.List[NoteEvent]:

		"""Return notes sounding at any point within ``[start_seconds, end_seconds)``."""

		start_beat = self.seconds_to_beats(start_seconds)
		end_beat = self.seconds_to_beats(end_seconds)

		return [n for n in self.notes if n.start < end_beat and n.end > start_beat]


	def notes_starting_between (self, after_seconds: float, until_seconds: float, inclusive: bool = False) -> typing.List[NoteEvent]:

		"""Return notes whose onset lies in ``(after_seconds, until_seconds]``.

		With ``inclusive`` the lower bound is closed as well, so a note
		starting exactly at ``after_seconds`` is included.
		"""

		after_beat = self.seconds_to_beats(after_seconds)
		until_beat = self.seconds_to_beats(until_seconds)

		if inclusive:
			return [n for n in self.notes if after_beat <= n.start <= until_beat]

		return [n for n in self.notes if after_beat < n.start <= until_beat]


def empty_sequence (tempo: float, time_signature: TimeSignature, key: typing.Optional[jazzene.chords.Key] = None) -> GeneratedSequence:

	"""Return a sequence with no notes and zero duration."""

	return GeneratedSequence(
		notes = (),
		total_beats = fractions.Fraction(0),
		tempo = tempo,
		time_signature = time_signature,
		measures = 0,
		key = key
	)


def _span_at (
	spans: typing.Sequence[jazzene.progression.ChordSpan],
	beat: fractions.Fraction
) -> typing.Optional[jazzene.progression.ChordSpan]:

	if not spans:
		return None

	starts = [span.start for span in spans]
	index = bisect.bisect_right(starts, beat) - 1

	return spans[max(0, min(len(spans) - 1, index))]


def _start_pitch (key: jazzene.chords.Key, reference: int) -> int:

	"""Return the tonic nearest to ``reference``."""

	offset = (key.tonic_pc - reference) % 12
	if offset > 6:
		offset -= 12

	return reference + offset


def generate (
	progression: jazzene.progression.Progression,
	key: jazzene.chords.Key,
	tempo: float,
	time_signature: TimeSignature,
	measures: int,
	seed: int,
) -> GeneratedSequence:

	"""Generate an improvised line over a progression.

	Parameters:
		progression: Parsed chords (see :func:`jazzene.progression.parse_progression`).
		key: Tonal center; the solo starts on the tonic nearest G4.
		tempo: Beats per minute, must be positive.
		time_signature: Meter of each measure.
		measures: Number of measures to fill; zero yields an empty sequence.
		seed: Determinism key. Equal arguments give equal output.

	Returns:
		The generated sequence. Empty (total zero) when the progression is
		empty or ``measures`` is zero.

	Raises:
		ValueError: If ``tempo`` is not positive or ``measures`` is negative.
	"""

	if tempo <= 0:
		raise ValueError("Tempo must be positive")

	if measures < 0:
		raise ValueError("Measure count cannot be negative")

	if progression.is_empty() or measures == 0:
		logger.debug("Nothing to generate (empty progression or zero measures)")
		return empty_sequence(tempo, time_signature, key)

	rng = random.Random(seed)
	beats_per_measure = time_signature.beats_per_measure
	total_beats = fractions.Fraction(measures * beats_per_measure)

	spans = progression.chord_spans(measures, beats_per_measure)
	palettes: typing.Dict[jazzene.chords.Chord, jazzene.intervals.Palette] = {}

	reference = jazzene.constants.register.SOLO_START
	voice = jazzene.melodic_state.ImprovisingVoice(start=_start_pitch(key, reference))

	notes: typing.List[NoteEvent] = []

	for measure in range(measures):

		template = jazzene.rhythm.choose_template(rng, measure)
		measure_start = fractions.Fraction(measure * beats_per_measure)

		for onset in jazzene.rhythm.layout_measure(template, beats_per_measure):

			start = measure_start + onset.offset
			span = _span_at(spans, start)

			if span is None:
				continue

			if span.chord not in palettes:
				palettes[span.chord] = jazzene.intervals.chord_palette(span.chord)

			pitch = voice.choose_next(palettes[span.chord], rng, onset.emphasis)

			base_velocity = jazzene.constants.velocity.EMPHASIS_VELOCITY[onset.emphasis]
			velocity = max(1, min(jazzene.constants.velocity.MAX_VELOCITY, base_velocity + rng.randint(-4, 4)))

			notes.append(NoteEvent(
				start = start,
				pitch = pitch,
				duration = min(onset.duration, total_beats - start),
				velocity = velocity,
				emphasis = onset.emphasis,
				measure = measure
			))

	notes.sort(key=lambda n: (n.start, n.pitch))

	logger.debug(f"Generated {len(notes)} notes over {measures} measures (seed {seed})")

	return GeneratedSequence(
		notes = tuple(notes),
		total_beats = total_beats,
		tempo = float(tempo),
		time_signature = time_signature,
		measures = measures,
		key = key,
		spans = tuple(spans)
	)


def generate_from_settings (settings: "jazzene.config.Settings") -> GeneratedSequence:

	"""Parse the settings' chord text and generate with its parameters."""

	progression = jazzene.progression.parse_progression(settings.chords, settings.key, settings.measures)

	return generate(
		progression,
		settings.key,
		settings.bpm,
		settings.time_signature,
		settings.measures,
		settings.seed
	)
