"""Drum patterns per phrase length.

Dividers of equal duration share one pattern, so a section's groove repeats
phrase by phrase. Only the first hit of each divider varies: a bass drum on
bar lines, otherwise a snare or bass drum picked by a sub-RNG keyed by the
divider's position. The downbeat can therefore change without the shared
body changing.
"""

import dataclasses
import enum
import logging
import random
import typing

import tessitura.arrangement
import tessitura.constants.gm_drums
import tessitura.constants.velocity
import tessitura.context
import tessitura.rhythm
import tessitura.timing
import tessitura.tree
import tessitura.weighting


logger = logging.getLogger(__name__)


class DrumHitType (enum.Enum):

	"""Kit pieces the percussion model plays, valued by General MIDI note."""

	BASS_DRUM = tessitura.constants.gm_drums.KICK_2
	SNARE = tessitura.constants.gm_drums.SNARE_1
	CLOSED_HAT = tessitura.constants.gm_drums.HI_HAT_CLOSED
	PEDAL_HAT = tessitura.constants.gm_drums.HI_HAT_PEDAL


DEFAULT_HIT_WEIGHTS: typing.Tuple[typing.Tuple[DrumHitType, float], ...] = (
	(DrumHitType.BASS_DRUM, 1),
	(DrumHitType.SNARE, 1),
	(DrumHitType.CLOSED_HAT, 8),
	(DrumHitType.PEDAL_HAT, 4),
)

# Hits a non-bar-line downbeat alternates between.
DOWNBEAT_ALTERNATIVES: typing.Tuple[DrumHitType, ...] = (DrumHitType.SNARE, DrumHitType.BASS_DRUM)


@dataclasses.dataclass(frozen=True)
class DrumHit:

	"""One drum hit. The note number comes from the hit type."""

	hit: DrumHitType
	velocity: int

	@property
	def note (self) -> int:
		return self.hit.value


@dataclasses.dataclass(frozen=True)
class DrumLine:

	"""Placeholder element that renders the drum hits of a drum part."""


@dataclasses.dataclass(frozen=True)
class DrumPattern:

	"""
	A rhythm with one hit type per subdivision. Rest slots keep a hit type
	so the first slot can be forced to sound.
	"""

	rhythm: tessitura.rhythm.Rhythm
	hits: typing.Tuple[DrumHitType, ...]

	def __post_init__ (self) -> None:
		if len(self.hits) != len(self.rhythm):
			raise ValueError("A drum pattern needs one hit type per subdivision")

	def with_downbeat (self, hit: DrumHitType) -> "DrumPattern":

		"""Return a copy whose first slot sounds and plays ``hit``."""

		if not self.hits:
			return self

		return DrumPattern(self.rhythm.with_first_sounding(), (hit,) + self.hits[1:])

	def lay_over (self, span: tessitura.timing.Span) -> typing.List[typing.Tuple[DrumHitType, tessitura.timing.Span]]:

		"""Return the sounding ``(hit, span)`` pairs of the pattern cycled over ``span``."""

		count = len(self.rhythm)
		slots = self.rhythm.iter_over(span)

		return [(self.hits[i % count], slot.span()) for i, slot in enumerate(slots) if not slot.is_rest]


class PercussionModel:

	"""Builds and places drum patterns over phrase dividers."""

	def __init__ (
		self,
		hit_weights: typing.Sequence[typing.Tuple[DrumHitType, float]] = DEFAULT_HIT_WEIGHTS,
		power: float = 0.1,
		rest_probability_range: typing.Tuple[float, float] = (0.3, 0.9),
		velocity_range: typing.Tuple[int, int] = tessitura.constants.velocity.DRUM_VELOCITY_BAND
	) -> None:

		"""
		Parameters:
			hit_weights: Categorical weights for the hit type of each body slot.
			power: Shape of the density curve. Small values keep density high
				for all but the shortest slots.
			rest_probability_range: Range the per-part rest level is drawn from.
			velocity_range: Inclusive velocity range of every hit.
		"""

		if not hit_weights or any(weight < 0 for _, weight in hit_weights):
			raise ValueError("hit_weights must be a non-empty list of non-negative weights")

		if sum(weight for _, weight in hit_weights) <= 0:
			raise ValueError("hit_weights must not all be zero")

		if power <= 0:
			raise ValueError("power must be positive")

		low, high = rest_probability_range

		if not 0.0 <= low <= high <= 1.0:
			raise ValueError("rest_probability_range must satisfy 0 <= low <= high <= 1")

		v_low, v_high = velocity_range

		if not tessitura.constants.velocity.MIN_VELOCITY <= v_low <= v_high <= tessitura.constants.velocity.MAX_VELOCITY:
			raise ValueError(f"Invalid velocity range {velocity_range}")

		self.hit_weights = tuple(hit_weights)
		self.power = power
		self.rest_probability_range = rest_probability_range
		self.velocity_range = velocity_range


	def density (self, length: int, ts: tessitura.timing.TimeSignature) -> float:

		"""Return the density curve value for a slot of ``length`` pulses.

		Zero at one quantum (a quarter beat), rising to 1.0 at a quantum plus a beat.
		"""

		quantum = ts.quarter_beat()
		fraction = min(max((length - quantum) / ts.beat(), 0.0), 1.0)

		return fraction ** self.power


	def draw_rest_level (self, rng: random.Random) -> float:

		low, high = self.rest_probability_range

		return rng.uniform(low, high)


	def pattern (
		self,
		length: int,
		ts: tessitura.timing.TimeSignature,
		rest_level: float,
		rng: random.Random
	) -> DrumPattern:

		"""Build a pattern of ``length`` pulses.

		The first slot is always one quantum long, followed by a random
		subdivision of the remainder.
		"""

		quantum = ts.quarter_beat()

		if length <= quantum:
			rhythm = tessitura.rhythm.Rhythm.from_durations([length])

		else:
			body = tessitura.rhythm.Rhythm.random(
				length - quantum,
				quantum,
				lambda n: self.density(n, ts),
				lambda n: rest_level * self.density(n, ts),
				rng
			)
			rhythm = tessitura.rhythm.Rhythm.from_durations([quantum]) + body

		hits = tuple(
			tessitura.weighting.choose_weighted(self.hit_weights, rng, "drum hits") for _ in rhythm
		)

		return DrumPattern(rhythm, hits)


	def patterns (
		self,
		lengths: typing.Iterable[int],
		ts: tessitura.timing.TimeSignature,
		rng: random.Random
	) -> typing.Dict[int, DrumPattern]:

		"""
		Return one pattern per distinct length, built shortest first.
		"""

		rest_level = self.draw_rest_level(rng)

		return {length: self.pattern(length, ts, rest_level, rng) for length in sorted(set(lengths))}


	@staticmethod
	def downbeat (
		divider: tessitura.timing.Span,
		part_start: int,
		ts: tessitura.timing.TimeSignature,
		rng: random.Random
	) -> DrumHitType:

		"""
		Return the forced first hit of a divider: a bass drum on bar lines, otherwise snare or bass drum.
		"""

		if (divider.start - part_start) % ts.bar() == 0:
			return DrumHitType.BASS_DRUM

		return DOWNBEAT_ALTERNATIVES[rng.randint(0, len(DOWNBEAT_ALTERNATIVES) - 1)]


	def place (
		self,
		dividers: typing.Sequence[tessitura.timing.Span],
		part_start: int,
		ts: tessitura.timing.TimeSignature,
		rng: random.Random,
		downbeat_rng: typing.Callable[[int], random.Random]
	) -> typing.List[typing.Tuple[DrumHit, tessitura.timing.Span]]:

		"""Place hits over every divider.

		Parameters:
			dividers: Phrase divider spans, in order.
			part_start: Start of the drum part; bar lines are measured from here.
			rng: Seeded RNG for patterns and velocities.
			downbeat_rng: Returns the independent RNG for the divider at an index.
		"""

		patterns = self.patterns((d.length for d in dividers), ts, rng)
		low, high = self.velocity_range
		placed: typing.List[typing.Tuple[DrumHit, tessitura.timing.Span]] = []

		for index, divider in enumerate(dividers):

			forced = self.downbeat(divider, part_start, ts, downbeat_rng(index))
			pattern = patterns[divider.length].with_downbeat(forced)

			for hit, span in pattern.lay_over(divider):
				placed.append((DrumHit(hit=hit, velocity=rng.randint(low, high)), span))

		return placed


	def render_line (
		self,
		element: DrumLine,
		span: tessitura.timing.Span,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.tree.Segment]:

		"""
		Renderer for :class:`DrumLine`: requires the time signature and a divider over the part.

		Hits are placed over the dividers that begin in the part; a part covered
		only by a divider that began earlier stays silent.
		"""

		ts = (
			context.find(tessitura.timing.TimeSignature)
			.with_timing(tessitura.timing.TimingRelation.DURING, span)
			.require()
			.element
		)

		# Some divider must cover the part even if none begins inside it.
		context.find(tessitura.arrangement.PhraseDivider).with_timing(tessitura.timing.TimingRelation.OVERLAPPING, span).require()

		dividers = (
			context.find(tessitura.arrangement.PhraseDivider)
			.with_timing(tessitura.timing.TimingRelation.BEGINNING_WITHIN, span)
			.get_all()
		)

		if not dividers:
			return []

		placed = self.place([d.span for d in dividers], span.start, ts, context.rng(), context.rng_with_seed)

		logger.debug(f"Drum line {span.start}-{span.end}: {len(placed)} hits over {len(dividers)} dividers")

		return [tessitura.tree.Segment(hit, hit_span) for hit, hit_span in placed]


	def renderers (self) -> typing.List[typing.Tuple[type, typing.Callable]]:
		return [(DrumLine, self.render_line)]
