"""Time spans, time signatures and temporal relations.

Spans are half-open ``[start, end)`` intervals measured in pulses (see
:mod:`tessitura.constants.pulses`). :class:`TimingRelation` is the
vocabulary context queries use to relate a candidate element's span to a
reference span.
"""

import dataclasses
import enum
import typing

import tessitura.constants.pulses


@dataclasses.dataclass(frozen=True)
class Span:

	"""
	A half-open interval of pulses.
	"""

	start: int
	end: int

	def __post_init__ (self) -> None:
		if self.end < self.start:
			raise ValueError(f"Span end ({self.end}) must not precede its start ({self.start})")

	@property
	def length (self) -> int:

		"""Return the number of pulses covered."""

		return self.end - self.start

	def contains (self, pulse: int) -> bool:

		"""Return True if ``pulse`` lies inside the span."""

		return self.start <= pulse < self.end

	def intersects (self, other: "Span") -> bool:

		"""Return True if the two spans share at least one pulse."""

		return self.start < other.end and other.start < self.end

	def is_within (self, other: "Span") -> bool:

		"""Return True if this span lies entirely inside ``other``."""

		return other.start <= self.start and self.end <= other.end

	def shifted (self, offset: int) -> "Span":

		"""Return a copy moved by ``offset`` pulses."""

		return Span(self.start + offset, self.end + offset)

	def divide_into (self, size: int) -> typing.List["Span"]:

		"""Split into consecutive spans of ``size`` pulses (the last may be shorter)."""

		if size <= 0:
			raise ValueError("Division size must be positive")

		return [Span(s, min(s + size, self.end)) for s in range(self.start, self.end, size)]


def join_spans (spans: typing.Iterable[Span]) -> typing.List[Span]:

	"""Merge touching or overlapping spans into contiguous runs.

	Example:
		```python
		join_spans([Span(0, 4), Span(4, 8), Span(12, 16)])
		# → [Span(0, 8), Span(12, 16)]
		```
	"""

	joined: typing.List[Span] = []

	for span in sorted(spans, key=lambda s: (s.start, s.end)):

		if joined and span.start <= joined[-1].end:
			last = joined[-1]
			joined[-1] = Span(last.start, max(last.end, span.end))

		else:
			joined.append(span)

	return joined


class TimingRelation (enum.Enum):

	"""
	How a candidate element's span relates to a reference span.

	- ``DURING``: the candidate covers the whole reference (e.g. the key in
	  force during a note).
	- ``OVERLAPPING``: the candidate shares at least one pulse with it.
	- ``WITHIN``: the candidate lies entirely inside the reference.
	- ``BEGINNING_WITHIN``: the candidate starts inside the reference.
	- ``ENDING_WITHIN``: the candidate ends inside the reference.
	"""

	DURING = "during"
	OVERLAPPING = "overlapping"
	WITHIN = "within"
	BEGINNING_WITHIN = "beginning_within"
	ENDING_WITHIN = "ending_within"

	def matches (self, candidate: Span, reference: Span) -> bool:

		"""Return True if ``candidate`` stands in this relation to ``reference``."""

		if self is TimingRelation.DURING:
			return candidate.start <= reference.start and reference.end <= candidate.end

		if self is TimingRelation.OVERLAPPING:
			return candidate.intersects(reference)

		if self is TimingRelation.WITHIN:
			return candidate.is_within(reference)

		if self is TimingRelation.BEGINNING_WITHIN:
			return reference.start <= candidate.start < reference.end

		return reference.start < candidate.end <= reference.end


@dataclasses.dataclass(frozen=True)
class TimeSignature:

	"""
	Beats per bar and the length of one beat in pulses.

	Example:
		```python
		ts = TimeSignature(beats_per_bar=3)
		ts.bar()      # 72 pulses
		ts.bars(4)    # 288 pulses
		```
	"""

	beats_per_bar: int = 4
	beat_length: int = tessitura.constants.pulses.MIDI_QUARTER_NOTE

	def __post_init__ (self) -> None:
		if self.beats_per_bar <= 0:
			raise ValueError("Beats per bar must be positive")
		if self.beat_length <= 0 or self.beat_length % 12 != 0:
			raise ValueError("Beat length must be a positive multiple of 12 pulses")

	def beat (self) -> int:
		return self.beat_length

	def beats (self, count: int) -> int:
		return self.beat_length * count

	def half_beat (self) -> int:
		return self.beat_length // 2

	def quarter_beat (self) -> int:
		return self.beat_length // 4

	def triplet (self) -> int:
		return self.beat_length // 3

	def bar (self) -> int:
		return self.beat_length * self.beats_per_bar

	def bars (self, count: int) -> int:
		return self.bar() * count
