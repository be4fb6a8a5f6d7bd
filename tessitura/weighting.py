"""Weighted random selection.

Every model funnels its sampling through these helpers so that an empty or
all-zero candidate set surfaces as :class:`~tessitura.errors.MissingContext`
instead of a crash deep inside a loop.
"""

import math
import random
import typing

import tessitura.errors


T = typing.TypeVar("T")


def weighted_index (weights: typing.Sequence[float], rng: random.Random, what: str = "choices") -> int:

	"""Pick an index with probability proportional to its weight.

	Weights are relative and need not sum to 1.0. Zero-weight entries are
	never chosen.

	Raises:
		MissingContext: If there are no weights, any weight is negative or
			not finite, or all weights are zero.
	"""

	if not weights:
		raise tessitura.errors.MissingContext(f"No {what} to choose from.")

	total = 0.0

	for weight in weights:
		if weight < 0 or not math.isfinite(weight):
			raise tessitura.errors.MissingContext(f"Invalid weight {weight!r} among {what}.")
		total += weight

	if total <= 0:
		raise tessitura.errors.MissingContext(f"All {what} have zero weight.")

	threshold = rng.random() * total
	cumulative = 0.0
	last_positive = 0

	for index, weight in enumerate(weights):

		if weight <= 0:
			continue

		cumulative += weight
		last_positive = index

		if cumulative > threshold:
			return index

	# Floating-point shortfall: the roll landed past the accumulated total.
	return last_positive


def choose_weighted (options: typing.Sequence[typing.Tuple[T, float]], rng: random.Random, what: str = "choices") -> T:

	"""Pick one item from a list of ``(value, weight)`` pairs.

	Example:
		```python
		hit = choose_weighted([("kick", 1), ("hat", 8)], rng)
		```
	"""

	index = weighted_index([weight for _, weight in options], rng, what)

	return options[index][0]
