import random
import typing

T = typing.TypeVar("T")


def weighted_choice (options: typing.Sequence[typing.Tuple[T, float]], rng: random.Random) -> T:

	"""Pick one item from a list of (value, weight) pairs.

	Weights are relative - they don't need to sum to 1.0. Higher weight means
	higher probability of selection. Zero-weight options are never chosen.

	Parameters:
		options: List of `(value, weight)` tuples
		rng: Random number generator instance

	Example:
		```python
		template = jazzene.sequence_utils.weighted_choice([
			("swung_eighths", 0.5),
			("triplet_figure", 0.3),
			("quarter_walk", 0.2),
		], rng)
		```
	"""

	if not options:
		raise ValueError("Options list cannot be empty")

	total = sum(weight for _, weight in options)

	if total <= 0:
		raise ValueError("Total weight must be positive")

	threshold = rng.random() * total
	cumulative = 0.0

	for value, weight in options:
		if weight <= 0:
			continue
		cumulative += weight
		if cumulative > threshold:
			return value

	return next(value for value, weight in reversed(options) if weight > 0)


def clamp (value: float, low: float, high: float) -> float:

	"""Clamp a value into ``[low, high]``."""

	return max(low, min(high, value))
