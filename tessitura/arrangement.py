"""Part activation over a section, driven by sawtooth ramps.

A ramp rises linearly from 0 to 1 and wraps. Each part is given an activation
band (a sub-range of ``[0, 1)``); a phrase divider belongs to the part while
the ramp passes through that band. Earlier parts get the broad low band and
later parts the narrower high bands, so entrances are staggered as the ramp
climbs and every part drops out together when it wraps.

Example:
	```python
	model = ArrangementModel()
	windows = model.arrange(section, part_count=3, dividers=dividers, rng=rng)
	windows[0].spans   # where the first part plays
	```
"""

import dataclasses
import math
import random
import typing

import tessitura.timing


DEFAULT_BANDS: typing.Tuple[typing.Tuple[float, float], ...] = (
	(0.0, 0.7),
	(0.6, 0.8),
	(0.8, 1.0),
)


@dataclasses.dataclass(frozen=True)
class PhraseDivider:

	"""Marks one phrase of a section. Melody phrasing, arrangement and drums all follow these."""


class Signal:

	"""
	A value in ``[0, 1)`` that varies with time in pulses.
	"""

	def value_at (self, pulse: float) -> float:
		raise NotImplementedError


class Sawtooth (Signal):

	"""
	A linear ramp from 0 to 1 that wraps every ``period`` pulses.

	Example:
		```python
		ramp = Sawtooth(period=96, phase=0.5)
		ramp.value_at(0)    # 0.5
		ramp.value_at(48)   # 0.0 (wrapped)
		```
	"""

	def __init__ (self, period: float, phase: float = 0.0) -> None:

		"""
		Parameters:
			period: Pulses per cycle. Must be positive.
			phase: Starting offset within the cycle, ``0.0 <= phase < 1.0``.
		"""

		if period <= 0:
			raise ValueError("Sawtooth period must be positive")

		if not 0.0 <= phase < 1.0:
			raise ValueError("Sawtooth phase must be in [0, 1)")

		self.period = period
		self.phase = phase

	def value_at (self, pulse: float) -> float:

		return (pulse / self.period + self.phase) % 1.0


class BlendedRamp (Signal):

	"""
	A weighted mix of two signals: ``ratio * first + (1 - ratio) * second``.
	"""

	def __init__ (self, first: Signal, second: Signal, ratio: float) -> None:

		if not 0.0 <= ratio <= 1.0:
			raise ValueError("Blend ratio must be between 0 and 1")

		self.first = first
		self.second = second
		self.ratio = ratio

	def value_at (self, pulse: float) -> float:

		value = self.ratio * self.first.value_at(pulse) + (1.0 - self.ratio) * self.second.value_at(pulse)

		# Keep floating point error from producing exactly 1.0.
		return min(value, math.nextafter(1.0, 0.0))


@dataclasses.dataclass(frozen=True)
class ActivationWindow:

	"""
	Where one part (by index) plays within a section. Spans are disjoint and sorted.
	"""

	part: int
	spans: typing.Tuple[tessitura.timing.Span, ...] = ()


def _intersects (start: float, end: float, band: typing.Tuple[float, float]) -> bool:

	low, high = band

	return start < end and start < high and low < end


def ramp_segment_in_band (start_value: float, end_value: float, band: typing.Tuple[float, float]) -> bool:

	"""Return True if the ramp segment ``[start_value, end_value)`` touches ``band``.

	A segment whose end value is below its start value wrapped past 1.0, so it
	covers ``[start_value, 1)`` and ``[0, end_value)``.
	"""

	if _intersects(start_value, end_value, band):
		return True

	if start_value > end_value:
		return _intersects(start_value, 1.0, band) or _intersects(0.0, end_value, band)

	return False


class ArrangementModel:

	"""
	Decides which parts play over which phrase dividers of a section.
	"""

	def __init__ (
		self,
		bands: typing.Sequence[typing.Tuple[float, float]] = DEFAULT_BANDS,
		period_divisions: typing.Sequence[int] = (2, 4, 8),
		blend_probability: float = 0.5
	) -> None:

		"""
		Parameters:
			bands: Activation band per part index. Parts beyond the list use
				the last band.
			period_divisions: A ramp's period is the section length divided
				by one of these, chosen at random.
			blend_probability: Chance of mixing two independent ramps instead
				of using one.
		"""

		if not bands:
			raise ValueError("At least one activation band is required")

		for low, high in bands:
			if not 0.0 <= low < high <= 1.0:
				raise ValueError(f"Invalid activation band ({low}, {high})")

		if not period_divisions or any(d <= 0 for d in period_divisions):
			raise ValueError("period_divisions must be positive integers")

		if not 0.0 <= blend_probability <= 1.0:
			raise ValueError("blend_probability must be between 0 and 1")

		self.bands = tuple(tuple(band) for band in bands)
		self.period_divisions = tuple(period_divisions)
		self.blend_probability = blend_probability


	def band_for (self, part_index: int) -> typing.Tuple[float, float]:

		"""
		Return the activation band of a part index.
		"""

		return self.bands[min(part_index, len(self.bands) - 1)]


	def random_sawtooth (self, length: int, rng: random.Random) -> Sawtooth:

		division = rng.choice(self.period_divisions)

		return Sawtooth(period=length / division, phase=rng.random())


	def build_ramp (self, section: tessitura.timing.Span, rng: random.Random) -> Signal:

		"""
		Return the ramp for a section (one sawtooth, or two blended).
		"""

		if section.length <= 0:
			raise ValueError("Cannot build a ramp over an empty section")

		ramp: Signal = self.random_sawtooth(section.length, rng)

		if rng.random() < self.blend_probability:
			ramp = BlendedRamp(ramp, self.random_sawtooth(section.length, rng), ratio=rng.random())

		return ramp


	def arrange (
		self,
		section: tessitura.timing.Span,
		part_count: int,
		dividers: typing.Sequence[tessitura.timing.Span],
		rng: random.Random,
		ramp: typing.Optional[Signal] = None
	) -> typing.List[ActivationWindow]:

		"""Return one :class:`ActivationWindow` per part.

		Ramp values are taken relative to the section start, so a section
		rendered at a different offset with the same seed arranges the same way.

		Parameters:
			section: The section span.
			part_count: Number of parts to arrange.
			dividers: Phrase divider spans inside the section.
			rng: Seeded RNG; only used when ``ramp`` is not given.
			ramp: Optional ramp to use instead of a random one.
		"""

		if ramp is None:
			ramp = self.build_ramp(section, rng)

		windows: typing.List[ActivationWindow] = []

		for part_index in range(part_count):

			band = self.band_for(part_index)
			active = [
				divider for divider in dividers
				if ramp_segment_in_band(
					ramp.value_at(divider.start - section.start),
					ramp.value_at(divider.end - section.start),
					band
				)
			]

			windows.append(ActivationWindow(part=part_index, spans=tuple(tessitura.timing.join_spans(active))))

		return windows
