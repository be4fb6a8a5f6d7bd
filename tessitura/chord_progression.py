"""Chord progressions from a weighted random walk over a key's triads.

High level:

1. Weigh every triad in the key as a successor of the latest chord
   (:func:`transition_weight`).
2. Discard candidates below the echelon percentile and choose one of the rest
   by weight.
3. Repeat until ``max_chords`` chords are chosen, noting at every length from
   ``min_chords`` on how well the latest chord leads back to the first
   (its *cyclability*).
4. Choose where to cut the progression by sampling the squared
   cyclabilities, so strong loop points are strongly preferred.
5. Give the retained chords a balanced rhythm.

The transition weight combines three forces:

- **Root change**: staying on the same root is damped to 10%.
- **Voice leading**: each semitone the candidate's tones must move to reach
  the current chord multiplies the weight by 0.6.
- **Harmonic compatibility**: how consonant the candidate is in itself, with
  the key's tonic, and with the current chord's root, measured with the
  harmonic-series presence table.
"""

import dataclasses
import itertools
import logging
import math
import random
import typing

import tessitura.chords
import tessitura.context
import tessitura.errors
import tessitura.intervals
import tessitura.key
import tessitura.rhythm
import tessitura.timing
import tessitura.tree
import tessitura.weighting


logger = logging.getLogger(__name__)


SAME_ROOT_FACTOR = 0.1
VOICE_LEADING_DECAY = 0.6

# Approximate sum of each simple interval's occurrences in the harmonic series.
HARMONIC_SERIES_PRESENCE: typing.Dict[int, float] = {
	0: 2.0,         # P1
	1: 0.059375,    # m2
	2: 0.18,        # M2
	3: 0.06125,     # m3
	4: 0.37625,     # M3
	5: 0.044375,    # P4
	6: 0.140625,    # TT
	7: 1.0,         # P5
	8: 0.15625,     # m6
	9: 0.05875,     # M6
	10: 0.345625,   # m7
	11: 0.199375,   # M7
}


def harmonic_presence (interval: int) -> float:

	"""Return an interval's harmonic-series strength on a 0.0 to 1.0 scale.

	The raw table is normalised by the unison value and square-rooted, which
	gives a more linear perceptual curve.
	"""

	return math.sqrt(HARMONIC_SERIES_PRESENCE[interval % 12] / HARMONIC_SERIES_PRESENCE[0])


def harmony_from_focal_pitch (chord: tessitura.chords.Chord, focal_pc: int) -> float:

	"""
	Return how well a chord's tones sit against a focal pitch class, averaged per tone.
	"""

	pitch_classes = chord.pitch_classes()
	total = 0.0

	for pc in pitch_classes:
		from_root = harmonic_presence(tessitura.intervals.interval_up(chord.root_pc, pc))
		against_focal = min(
			harmonic_presence(tessitura.intervals.interval_up(focal_pc, pc)),
			harmonic_presence(tessitura.intervals.interval_up(pc, focal_pc))
		)
		total += from_root * against_focal

	return total / len(pitch_classes)


def voice_leading_steps (current: tessitura.chords.Chord, candidate: tessitura.chords.Chord) -> int:

	"""
	Return the semitones the candidate's tones sit from their nearest current-chord tones, summed.
	"""

	current_pcs = current.pitch_classes()

	return sum(tessitura.intervals.nearest_distance(pc, current_pcs) for pc in candidate.pitch_classes())


def transition_weight (
	key: tessitura.key.Key,
	current: typing.Optional[tessitura.chords.Chord],
	candidate: tessitura.chords.Chord
) -> float:

	"""Return the (strictly positive) weight of moving from ``current`` to ``candidate``.

	With no current chord the candidate is weighed as a successor of itself,
	which is how the opening chord is chosen.
	"""

	if current is None:
		current = candidate

	base = SAME_ROOT_FACTOR if current.root_pc == candidate.root_pc else 1.0

	steps = voice_leading_steps(current, candidate)

	key_harmony = harmony_from_focal_pitch(candidate, key.root())
	current_harmony = harmony_from_focal_pitch(candidate, current.root_pc)
	own_harmony = harmony_from_focal_pitch(candidate, candidate.root_pc)

	return base * (VOICE_LEADING_DECAY ** steps) * own_harmony * (0.5 * key_harmony + 0.5 * current_harmony)


@dataclasses.dataclass(frozen=True)
class ChordProgression:

	"""
	An ordered, loopable chord sequence with its rhythm.

	The rhythm's sounding slots are paired with the chords in order and the
	whole thing repeats across whatever span it is laid over.
	"""

	chords: typing.Tuple[tessitura.chords.Chord, ...]
	rhythm: tessitura.rhythm.Rhythm

	def timed_chords (self, span: tessitura.timing.Span) -> typing.List[typing.Tuple[tessitura.chords.Chord, tessitura.timing.Span]]:

		"""Return ``(chord, span)`` pairs covering ``span``, cycling the progression."""

		if not self.chords:
			return []

		slots = self.rhythm.sounding(span)

		return [(chord, slot.span()) for chord, slot in zip(itertools.cycle(self.chords), slots)]


@dataclasses.dataclass(frozen=True)
class RandomChordProgression:

	"""Placeholder element that renders into a :class:`ChordProgression`."""


@dataclasses.dataclass(frozen=True)
class ChordMarkers:

	"""Placeholder element that renders the section's progression as timed :class:`~tessitura.chords.Chord` elements."""


class ChordProgressionGenerator:

	"""Chooses chord progressions for a key."""

	def __init__ (
		self,
		min_chords: int = 2,
		max_chords: int = 6,
		echelon_range: typing.Tuple[float, float] = (0.2, 1.0),
		progression_bars: int = 4
	) -> None:

		"""
		Parameters:
			min_chords: Shortest progression to return.
			max_chords: Longest progression to return.
			echelon_range: Range the per-progression echelon is drawn from.
				Higher echelons admit fewer, stronger candidates.
			progression_bars: Length of one pass through the progression.
		"""

		if min_chords < 1:
			raise ValueError("min_chords must be at least 1")

		if min_chords > max_chords:
			raise ValueError(f"min_chords ({min_chords}) must not exceed max_chords ({max_chords})")

		low, high = echelon_range

		if not 0.0 <= low < high <= 1.0:
			raise ValueError("echelon_range must satisfy 0 <= low < high <= 1")

		if progression_bars < 1:
			raise ValueError("progression_bars must be at least 1")

		self.min_chords = min_chords
		self.max_chords = max_chords
		self.echelon_range = echelon_range
		self.progression_bars = progression_bars


	def draw_echelon (self, rng: random.Random) -> float:

		"""
		Return an echelon in ``[low, high)``.
		"""

		low, high = self.echelon_range

		return low + (high - low) * rng.random()


	@staticmethod
	def rank (
		key: tessitura.key.Key,
		latest: typing.Optional[tessitura.chords.Chord],
		candidates: typing.Sequence[tessitura.chords.Chord]
	) -> typing.List[typing.Tuple[tessitura.chords.Chord, float]]:

		"""
		Return ``(candidate, weight)`` pairs sorted by ascending weight.
		"""

		weighted = [(candidate, transition_weight(key, latest, candidate)) for candidate in candidates]

		return sorted(weighted, key=lambda pair: pair[1])


	@staticmethod
	def admissible (
		ranked: typing.Sequence[typing.Tuple[tessitura.chords.Chord, float]],
		echelon: float
	) -> typing.List[typing.Tuple[tessitura.chords.Chord, float]]:

		"""
		Return the ranked candidates whose weight reaches the echelon percentile.
		"""

		if not ranked:
			return []

		index = min(len(ranked) - 1, int(math.floor(len(ranked) * echelon)))
		threshold = ranked[index][1]

		return [pair for pair in ranked if pair[1] >= threshold]


	def choose_chords (
		self,
		key: tessitura.key.Key,
		rng: random.Random,
		echelon: typing.Optional[float] = None
	) -> typing.List[tessitura.chords.Chord]:

		"""Walk the key's triads and return the retained chord sequence.

		Raises:
			MissingContext: If the key yields no triads or no loop point can be chosen.
		"""

		if echelon is None:
			echelon = self.draw_echelon(rng)

		candidates = key.triads()

		if not candidates:
			raise tessitura.errors.MissingContext("No candidate chords.")

		chosen: typing.List[tessitura.chords.Chord] = []
		cyclability: typing.List[float] = []
		latest: typing.Optional[tessitura.chords.Chord] = None

		while len(chosen) < self.max_chords:

			top_choices = self.admissible(self.rank(key, latest, candidates), echelon)
			latest = tessitura.weighting.choose_weighted(top_choices, rng, "next chords")
			chosen.append(latest)

			if len(chosen) >= self.min_chords:
				# Weight of looping from this chord back to the opening chord.
				cyclability.append(transition_weight(key, latest, chosen[0]))

		# Polarize the loop weights to favour a strong return to the opening chord.
		cycle_index = tessitura.weighting.weighted_index([w ** 2 for w in cyclability], rng, "cycle points")

		return chosen[:self.min_chords + cycle_index]


	def generate (
		self,
		key: tessitura.key.Key,
		ts: tessitura.timing.TimeSignature,
		rng: random.Random
	) -> ChordProgression:

		"""
		Choose chords for ``key`` and give them a balanced rhythm.
		"""

		chords = self.choose_chords(key, rng)
		rhythm = tessitura.rhythm.Rhythm.balanced_timing(ts.bars(self.progression_bars), len(chords), ts, rng)

		logger.debug(f"Progression in {key.name()}: {' '.join(key.roman(c) for c in chords)}")

		return ChordProgression(chords=tuple(chords), rhythm=rhythm)


	def render_progression (
		self,
		element: RandomChordProgression,
		span: tessitura.timing.Span,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.tree.Segment]:

		"""
		Renderer for :class:`RandomChordProgression`.
		"""

		during = tessitura.timing.TimingRelation.DURING
		ts = context.find(tessitura.timing.TimeSignature).with_timing(during, span).require().element
		key = context.find(tessitura.key.Key).with_timing(during, span).require().element

		progression = self.generate(key, ts, context.rng())

		return [tessitura.tree.Segment(progression, span)]


	@staticmethod
	def render_markers (
		element: ChordMarkers,
		span: tessitura.timing.Span,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.tree.Segment]:

		"""
		Renderer for :class:`ChordMarkers`: lay the progression's chords over the span.
		"""

		progression = (
			context.find(ChordProgression)
			.with_timing(tessitura.timing.TimingRelation.DURING, span)
			.require()
			.element
		)

		return [tessitura.tree.Segment(chord, chord_span) for chord, chord_span in progression.timed_chords(span)]


	def renderers (self) -> typing.List[typing.Tuple[type, typing.Callable]]:

		"""
		Return this model's renderer registrations.
		"""

		return [
			(RandomChordProgression, self.render_progression),
			(ChordMarkers, self.render_markers),
		]
