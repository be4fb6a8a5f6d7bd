"""Rhythms: sequences of sounding or resting subdivisions.

A :class:`Rhythm` is a contiguous run of :class:`Subdivision` objects with
positions relative to 0. ``iter_over()`` lays it over an absolute span,
cycling it as often as needed. The static constructors are the three ways
the models subdivide time:

- :meth:`Rhythm.balanced_timing`: ``count`` near-equal parts on a musical grid.
- :meth:`Rhythm.random_with_subdivision_weights`: weighted choice among
  groups of durations until the length is filled.
- :meth:`Rhythm.random`: recursive binary splitting shaped by caller-supplied
  split and rest probability curves.
"""

import dataclasses
import random
import typing

import tessitura.timing
import tessitura.weighting


@dataclasses.dataclass(frozen=True)
class Subdivision:

	"""
	One slot of a rhythm.
	"""

	start: int
	end: int
	is_rest: bool = False

	@property
	def length (self) -> int:
		return self.end - self.start

	def span (self) -> tessitura.timing.Span:

		"""Return the slot as a :class:`~tessitura.timing.Span`."""

		return tessitura.timing.Span(self.start, self.end)


@dataclasses.dataclass(frozen=True)
class Rhythm:

	"""
	An immutable sequence of contiguous subdivisions starting at 0.
	"""

	subdivisions: typing.Tuple[Subdivision, ...] = ()

	@classmethod
	def from_durations (cls, durations: typing.Iterable[int]) -> "Rhythm":

		"""Build a rhythm of sounding slots from a list of durations."""

		subdivisions: typing.List[Subdivision] = []
		position = 0

		for duration in durations:
			if duration <= 0:
				raise ValueError("Durations must be positive")
			subdivisions.append(Subdivision(position, position + duration))
			position += duration

		return cls(tuple(subdivisions))

	@property
	def length (self) -> int:

		"""Return the total length in pulses."""

		if not self.subdivisions:
			return 0

		return self.subdivisions[-1].end

	def __len__ (self) -> int:
		return len(self.subdivisions)

	def __iter__ (self) -> typing.Iterator[Subdivision]:
		return iter(self.subdivisions)

	def __add__ (self, other: "Rhythm") -> "Rhythm":

		"""Concatenate two rhythms."""

		offset = self.length
		shifted = tuple(
			Subdivision(s.start + offset, s.end + offset, s.is_rest) for s in other.subdivisions
		)

		return Rhythm(self.subdivisions + shifted)

	def sounding (self, span: typing.Optional[tessitura.timing.Span] = None) -> typing.List[Subdivision]:

		"""Return the non-rest subdivisions, laid over ``span`` when one is given."""

		slots = self.iter_over(span) if span is not None else self.subdivisions

		return [s for s in slots if not s.is_rest]

	def with_first_sounding (self) -> "Rhythm":

		"""Return a copy whose first slot is forced to sound."""

		if not self.subdivisions:
			return self

		first = self.subdivisions[0]

		return Rhythm((Subdivision(first.start, first.end, False),) + self.subdivisions[1:])

	def iter_over (self, span: tessitura.timing.Span) -> typing.List[Subdivision]:

		"""Lay the rhythm over ``span``, repeating it and truncating at the end.

		Example:
			```python
			Rhythm.from_durations([12, 12]).iter_over(Span(96, 132))
			# → slots at 96-108, 108-120, 120-132
			```
		"""

		result: typing.List[Subdivision] = []
		length = self.length

		if length <= 0:
			return result

		cycle_start = span.start

		while cycle_start < span.end:

			for sub in self.subdivisions:

				start = cycle_start + sub.start

				if start >= span.end:
					break

				result.append(Subdivision(start, min(cycle_start + sub.end, span.end), sub.is_rest))

			cycle_start += length

		return result

	@staticmethod
	def balanced_timing (length: int, count: int, ts: tessitura.timing.TimeSignature, rng: random.Random) -> "Rhythm":

		"""Divide ``length`` into ``count`` near-equal slots on the coarsest grid that fits.

		The grid is tried bar first, then beat, then half beat. Grid units that
		do not divide evenly are handed out to randomly chosen slots, and any
		pulses left below the grid go to the last slot.
		"""

		if count <= 0:
			raise ValueError("Count must be positive")

		if length < count:
			raise ValueError(f"Cannot divide {length} pulses into {count} slots")

		unit = 1

		for candidate in (ts.bar(), ts.beat(), ts.half_beat()):
			if length // candidate >= count:
				unit = candidate
				break

		total_units = length // unit
		base, extra = divmod(total_units, count)
		bonus = set(rng.sample(range(count), extra))

		durations = [(base + (1 if i in bonus else 0)) * unit for i in range(count)]
		durations[-1] += length - sum(durations)

		return Rhythm.from_durations(durations)

	@staticmethod
	def random_with_subdivision_weights (
		length: int,
		options: typing.Sequence[typing.Tuple[typing.Sequence[int], float]],
		rng: random.Random
	) -> "Rhythm":

		"""Fill ``length`` by repeatedly choosing a weighted group of durations.

		Only groups that still fit the remaining length are considered. When
		none fit, the remainder becomes a single slot.

		Parameters:
			options: ``(durations, weight)`` pairs, e.g. ``([8, 8, 8], 8)`` for
				a weighted triplet group.
		"""

		subdivisions: typing.List[Subdivision] = []
		position = 0

		while position < length:

			remaining = length - position
			fitting = [(list(group), weight) for group, weight in options if 0 < sum(group) <= remaining]

			if fitting:
				group = tessitura.weighting.choose_weighted(fitting, rng, "subdivisions")

			else:
				group = [remaining]

			for duration in group:
				subdivisions.append(Subdivision(position, position + duration))
				position += duration

		return Rhythm(tuple(subdivisions))

	@staticmethod
	def random (
		length: int,
		quantum: int,
		split_probability: typing.Callable[[int], float],
		rest_probability: typing.Callable[[int], float],
		rng: random.Random
	) -> "Rhythm":

		"""Recursively split ``length`` into slots no shorter than ``quantum``.

		A segment longer than ``quantum`` is halved (on the quantum grid) with
		probability ``split_probability(segment_length)``. Each resulting leaf
		rests with probability ``rest_probability(leaf_length)``.
		"""

		if quantum <= 0:
			raise ValueError("Quantum must be positive")

		subdivisions: typing.List[Subdivision] = []

		def divide (start: int, size: int) -> None:

			if size > quantum and rng.random() < split_probability(size):
				left = max(1, (size // quantum) // 2) * quantum
				divide(start, left)
				divide(start + left, size - left)
				return

			subdivisions.append(Subdivision(start, start + size, rng.random() < rest_probability(size)))

		if length > 0:
			divide(0, length)

		return Rhythm(tuple(subdivisions))
