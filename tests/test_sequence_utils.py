import collections
import random

import pytest

import jazzene.sequence_utils


def test_weighted_choice_is_deterministic () -> None:

	"""Equal seeds give equal picks."""

	options = [("a", 1.0), ("b", 2.0), ("c", 3.0)]

	first = [jazzene.sequence_utils.weighted_choice(options, random.Random(3)) for _ in range(5)]
	second = [jazzene.sequence_utils.weighted_choice(options, random.Random(3)) for _ in range(5)]

	assert first == second


def test_weighted_choice_never_picks_zero_weight () -> None:

	"""Zero-weight options are never chosen."""

	rng = random.Random(0)
	options = [("never", 0.0), ("always", 1.0), ("also_never", 0.0)]

	assert {jazzene.sequence_utils.weighted_choice(options, rng) for _ in range(200)} == {"always"}


def test_weighted_choice_follows_weights () -> None:

	"""Heavier options are picked more often."""

	rng = random.Random(5)
	counts = collections.Counter(jazzene.sequence_utils.weighted_choice([("light", 1.0), ("heavy", 9.0)], rng) for _ in range(2000))

	assert counts["heavy"] > 5 * counts["light"]


def test_weighted_choice_rejects_bad_input () -> None:

	"""Empty options or no positive weight raise ValueError."""

	rng = random.Random(0)

	with pytest.raises(ValueError):
		jazzene.sequence_utils.weighted_choice([], rng)

	with pytest.raises(ValueError):
		jazzene.sequence_utils.weighted_choice([("a", 0.0)], rng)


def test_clamp () -> None:

	"""Values are held inside the bounds."""

	assert jazzene.sequence_utils.clamp(5, 0, 10) == 5
	assert jazzene.sequence_utils.clamp(-1, 0, 10) == 0
	assert jazzene.sequence_utils.clamp(11, 0, 10) == 10
