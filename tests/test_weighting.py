import collections
import math
import random

import pytest

import tessitura.errors
import tessitura.weighting


def test_single_option_always_chosen () -> None:

	assert tessitura.weighting.choose_weighted([("only", 3.0)], random.Random(1)) == "only"


def test_zero_weights_never_chosen () -> None:

	rng = random.Random(5)
	options = [("a", 0.0), ("b", 1.0), ("c", 0.0)]

	assert {tessitura.weighting.choose_weighted(options, rng) for _ in range(200)} == {"b"}


def test_sampling_converges_to_normalised_weights () -> None:

	"""Observed frequencies should approach weight / total."""

	weights = [1.0, 1.0, 8.0, 4.0]
	rng = random.Random(1234)
	trials = 40000
	counts = collections.Counter(tessitura.weighting.weighted_index(weights, rng) for _ in range(trials))

	total = sum(weights)

	for index, weight in enumerate(weights):
		assert counts[index] / trials == pytest.approx(weight / total, abs=0.01)


def test_same_seed_same_choices () -> None:

	weights = [0.2, 0.5, 0.3]
	first = [tessitura.weighting.weighted_index(weights, random.Random(9)) for _ in range(5)]
	second = [tessitura.weighting.weighted_index(weights, random.Random(9)) for _ in range(5)]

	assert first == second


@pytest.mark.parametrize("weights", [
	[],
	[0.0, 0.0],
	[1.0, -0.5],
	[1.0, math.inf],
	[math.nan],
])
def test_unusable_weights_raise_missing_context (weights: list) -> None:

	with pytest.raises(tessitura.errors.MissingContext):
		tessitura.weighting.weighted_index(weights, random.Random(1))


def test_missing_context_reason_names_what () -> None:

	with pytest.raises(tessitura.errors.MissingContext) as info:
		tessitura.weighting.choose_weighted([], random.Random(1), "drum hits")

	assert "drum hits" in info.value.reason
