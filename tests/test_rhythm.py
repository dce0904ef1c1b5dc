import collections
import fractions
import random

import pytest

import jazzene.rhythm


F = fractions.Fraction


def _template (name: str) -> jazzene.rhythm.RhythmTemplate:

	"""Look up a built-in template by name."""

	return next(t for t in jazzene.rhythm.RHYTHM_TEMPLATES if t.name == name)


def test_swing_pair_ratios () -> None:

	"""Swing ratios split one beat exactly."""

	assert jazzene.rhythm.swing_pair(2.0) == (F(2, 3), F(1, 3))
	assert jazzene.rhythm.swing_pair(1.0) == (F(1, 2), F(1, 2))
	assert sum(jazzene.rhythm.swing_pair(3.0)) == 1


def test_swing_pair_rejects_non_positive () -> None:

	"""A zero or negative ratio raises ValueError."""

	with pytest.raises(ValueError):
		jazzene.rhythm.swing_pair(0)


def test_swung_eighths_layout () -> None:

	"""Swung eighths give long-short pairs on every beat, accent on one."""

	onsets = jazzene.rhythm.layout_measure(_template("swung_eighths"), 4)

	assert [o.offset for o in onsets] == [0, F(2, 3), 1, F(5, 3), 2, F(8, 3), 3, F(11, 3)]
	assert onsets[0].emphasis == "accent"
	assert onsets[1].emphasis == "ghost"
	assert onsets[2].emphasis == "normal"


def test_layout_adapts_to_meter () -> None:

	"""The same template fills a 3/4 measure."""

	onsets = jazzene.rhythm.layout_measure(_template("swung_eighths"), 3)

	assert len(onsets) == 6
	assert onsets[1].offset == F(2, 3)


def test_held_note_cut_at_measure_end () -> None:

	"""A half note on the last beat of a 3/4 bar is shortened to one beat."""

	onsets = jazzene.rhythm.layout_measure(_template("phrase_ending"), 3)

	assert onsets[-1].offset == 2
	assert onsets[-1].duration == 1


def test_phrase_ending_holds_to_bar_end () -> None:

	"""In 4/4 the phrase ending holds its last note through the bar."""

	onsets = jazzene.rhythm.layout_measure(_template("phrase_ending"), 4)

	assert onsets[-1].offset == 2
	assert onsets[-1].offset + onsets[-1].duration == 4
	assert onsets[-1].emphasis == "accent"


@pytest.mark.parametrize("beats", [1, 2, 3, 4, 5, 7])
def test_every_template_stays_inside_measure (beats: int) -> None:

	"""Onsets are ordered, non-overlapping and end by the bar line, in any meter."""

	for template in jazzene.rhythm.RHYTHM_TEMPLATES:

		onsets = jazzene.rhythm.layout_measure(template, beats)

		assert onsets, template.name
		assert onsets[0].offset == 0
		assert onsets[0].emphasis == "accent"

		for onset in onsets:
			assert onset.duration > 0
			assert onset.offset + onset.duration <= beats

		for current, following in zip(onsets, onsets[1:]):
			assert current.offset < following.offset
			assert current.offset + current.duration <= following.offset


def test_empty_template_lays_out_nothing () -> None:

	"""A template with no cells yields no onsets."""

	template = jazzene.rhythm.RhythmTemplate("silence", 1.0, ())

	assert jazzene.rhythm.layout_measure(template, 4) == []


def test_is_phrase_end () -> None:

	"""The last measure of every four-bar phrase is a phrase end."""

	assert [m for m in range(12) if jazzene.rhythm.is_phrase_end(m)] == [3, 7, 11]
	assert not jazzene.rhythm.is_phrase_end(3, phrase_length=0)


def test_choose_template_is_deterministic () -> None:

	"""Equal seeds choose equal templates."""

	first = [jazzene.rhythm.choose_template(random.Random(7), m).name for m in range(16)]
	second = [jazzene.rhythm.choose_template(random.Random(7), m).name for m in range(16)]

	assert first == second


def test_phrase_end_favours_phrase_ending () -> None:

	"""The phrase-ending template is far more likely on a phrase end."""

	rng = random.Random(1)

	inside = collections.Counter(jazzene.rhythm.choose_template(rng, 0).name for _ in range(1000))
	ending = collections.Counter(jazzene.rhythm.choose_template(rng, 3).name for _ in range(1000))

	assert ending["phrase_ending"] > 3 * inside["phrase_ending"]
