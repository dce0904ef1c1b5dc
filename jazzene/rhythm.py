"""Rhythmic templates for improvised lines.

A template is a cycle of one-beat *cells*. Each cell lists the onsets that
fall inside that beat (offset and duration in beats, plus an emphasis tag).
To fill a measure the cells are repeated beat by beat, so the same template
works in 3/4, 4/4 or 5/4. Durations may run past the end of their beat (a
held note), but never past the end of the measure.

The generator picks one template per measure by weighted choice; phrase
endings get a heavier weight on the last measure of each four-bar phrase.
"""

import dataclasses
import fractions
import random
import typing

import jazzene.constants.durations as dur
import jazzene.sequence_utils


@dataclasses.dataclass(frozen=True)
class Onset:

	"""
	A note onset within a beat (or, after layout, within a measure).
	"""

	offset: fractions.Fraction
	duration: fractions.Fraction
	emphasis: str = "normal"


Cell = typing.Tuple[Onset, ...]


@dataclasses.dataclass(frozen=True)
class RhythmTemplate:

	"""
	A named, weighted cycle of one-beat cells.
	"""

	name: str
	weight: float
	cells: typing.Tuple[Cell, ...]
	phrase_weight: typing.Optional[float] = None


	def weight_for (self, phrase_end: bool) -> float:

		"""Selection weight, using ``phrase_weight`` on phrase-ending measures when set."""

		if phrase_end and self.phrase_weight is not None:
			return self.phrase_weight

		return self.weight


def swing_pair (swing_ratio: float = 2.0) -> typing.Tuple[fractions.Fraction, fractions.Fraction]:

	"""Return the (long, short) durations of a swung eighth pair within one beat.

	A ratio of 1.0 is straight, 2.0 is triplet swing, 3.0 is a dotted-eighth
	shuffle. The pair always sums to exactly one beat.

	Parameters:
		swing_ratio: Long-to-short duration ratio; must be positive.
	"""

	if swing_ratio <= 0:
		raise ValueError("Swing ratio must be positive")

	ratio = fractions.Fraction(swing_ratio).limit_denominator(96)
	long = dur.QUARTER * ratio / (ratio + 1)

	return long, dur.QUARTER - long


_LONG, _SHORT = swing_pair(2.0)

_SWUNG_PAIR: Cell = (
	Onset(fractions.Fraction(0), _LONG, "normal"),
	Onset(_LONG, _SHORT, "ghost"),
)

_TRIPLET: Cell = (
	Onset(fractions.Fraction(0), dur.TRIPLET_EIGHTH, "normal"),
	Onset(dur.TRIPLET_EIGHTH, dur.TRIPLET_EIGHTH, "ghost"),
	Onset(dur.TRIPLET_QUARTER, dur.TRIPLET_EIGHTH, "ghost"),
)

_QUARTER: Cell = (
	Onset(fractions.Fraction(0), dur.QUARTER, "normal"),
)

# Rest on the beat, push into the next one from the swung upbeat.
_PUSH: Cell = (
	Onset(_LONG, _SHORT + dur.QUARTER, "accent"),
)

_HELD: Cell = (
	Onset(fractions.Fraction(0), dur.HALF, "accent"),
)

_REST: Cell = ()


RHYTHM_TEMPLATES: typing.Tuple[RhythmTemplate, ...] = (
	RhythmTemplate("swung_eighths", 5.0, (_SWUNG_PAIR,)),
	RhythmTemplate("triplet_figure", 2.0, (_SWUNG_PAIR, _TRIPLET)),
	RhythmTemplate("quarter_walk", 1.5, (_QUARTER,)),
	RhythmTemplate("mixed", 3.0, (_SWUNG_PAIR, _QUARTER)),
	RhythmTemplate("anticipation", 1.0, (_SWUNG_PAIR, _SWUNG_PAIR, _PUSH, _REST)),
	RhythmTemplate("phrase_ending", 0.5, (_SWUNG_PAIR, _SWUNG_PAIR, _HELD, _REST), phrase_weight=6.0),
)


def is_phrase_end (measure: int, phrase_length: int = 4) -> bool:

	"""Return True for the last measure of each ``phrase_length``-measure phrase."""

	return phrase_length > 0 and (measure + 1) % phrase_length == 0


def choose_template (
	rng: random.Random,
	measure: int,
	templates: typing.Sequence[RhythmTemplate] = RHYTHM_TEMPLATES
) -> RhythmTemplate:

	"""Pick a rhythm template for a measure by weighted random choice.

	Parameters:
		rng: The generator's seeded random source.
		measure: Zero-based measure index (phrase endings reweight the choice).
		templates: Candidate templates.
	"""

	phrase_end = is_phrase_end(measure)

	return jazzene.sequence_utils.weighted_choice(
		[(template, template.weight_for(phrase_end)) for template in templates],
		rng
	)


def layout_measure (template: RhythmTemplate, beats_per_measure: int) -> typing.List[Onset]:

	"""Lay a template's cells across one measure.

	Cells repeat beat by beat. The first onset on beat one is promoted to an
	accent. Durations are cut at the end of the measure.

	Parameters:
		template: The template to lay out.
		beats_per_measure: Number of beats in the measure.

	Returns:
		Onsets with offsets relative to the start of the measure, in time order.

	Example:
		```python
		template = RHYTHM_TEMPLATES[0]          # swung eighths
		onsets = layout_measure(template, 3)    # 6 onsets for a 3/4 bar
		onsets[1].offset                        # → Fraction(2, 3)
		```
	"""

	measure_length = fractions.Fraction(beats_per_measure)
	onsets: typing.List[Onset] = []

	if not template.cells:
		return onsets

	for beat in range(beats_per_measure):

		cell = template.cells[beat % len(template.cells)]

		for onset in cell:

			offset = beat + onset.offset

			if offset >= measure_length:
				continue

			duration = min(onset.duration, measure_length - offset)
			emphasis = onset.emphasis

			if offset == 0:
				emphasis = "accent"

			onsets.append(Onset(offset=offset, duration=duration, emphasis=emphasis))

	onsets.sort(key=lambda o: o.offset)

	# A held note is cut short by the next onset.
	for i in range(len(onsets) - 1):
		gap = onsets[i + 1].offset - onsets[i].offset
		if onsets[i].duration > gap:
			onsets[i] = dataclasses.replace(onsets[i], duration=gap)

	return onsets
