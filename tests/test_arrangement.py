import random

import pytest

import tessitura.arrangement
import tessitura.timing


Span = tessitura.timing.Span
Sawtooth = tessitura.arrangement.Sawtooth


class TestSignals:

	def test_sawtooth_wraps (self) -> None:
		ramp = Sawtooth(period=96, phase=0.5)

		assert ramp.value_at(0) == 0.5
		assert ramp.value_at(48) == 0.0
		assert ramp.value_at(72) == 0.25

	def test_sawtooth_validation (self) -> None:
		with pytest.raises(ValueError):
			Sawtooth(period=0)

		with pytest.raises(ValueError):
			Sawtooth(period=96, phase=1.0)

	def test_blended_ramp (self) -> None:
		ramp = tessitura.arrangement.BlendedRamp(Sawtooth(96), Sawtooth(96, 0.5), ratio=0.5)

		assert ramp.value_at(0) == pytest.approx(0.25)

	def test_blended_ramp_stays_below_one (self) -> None:
		ramp = tessitura.arrangement.BlendedRamp(Sawtooth(96, 0.999999), Sawtooth(96, 0.999999), ratio=0.3)

		assert ramp.value_at(0) < 1.0

	def test_blend_ratio_validation (self) -> None:
		with pytest.raises(ValueError):
			tessitura.arrangement.BlendedRamp(Sawtooth(96), Sawtooth(96), ratio=1.5)


class TestBands:

	def test_plain_segment (self) -> None:
		assert tessitura.arrangement.ramp_segment_in_band(0.1, 0.3, (0.0, 0.7))
		assert not tessitura.arrangement.ramp_segment_in_band(0.7, 0.8, (0.0, 0.7))
		assert tessitura.arrangement.ramp_segment_in_band(0.55, 0.65, (0.6, 0.8))

	def test_wrapped_segment_covers_both_ends (self) -> None:
		"""A segment that wraps past 1.0 touches the top and the bottom of the range."""
		assert tessitura.arrangement.ramp_segment_in_band(0.9, 0.1, (0.0, 0.7))
		assert tessitura.arrangement.ramp_segment_in_band(0.9, 0.1, (0.8, 1.0))
		assert not tessitura.arrangement.ramp_segment_in_band(0.9, 0.1, (0.6, 0.8))

	def test_wrap_to_exact_zero (self) -> None:
		assert not tessitura.arrangement.ramp_segment_in_band(0.875, 0.0, (0.0, 0.7))
		assert tessitura.arrangement.ramp_segment_in_band(0.875, 0.0, (0.8, 1.0))

	def test_parts_beyond_bands_use_last (self) -> None:
		model = tessitura.arrangement.ArrangementModel()

		assert model.band_for(0) == (0.0, 0.7)
		assert model.band_for(5) == (0.8, 1.0)

	@pytest.mark.parametrize("kwargs", [
		{"bands": []},
		{"bands": [(0.5, 0.2)]},
		{"period_divisions": []},
		{"period_divisions": [0]},
		{"blend_probability": 2.0},
	])
	def test_invalid_model_settings (self, kwargs: dict) -> None:
		with pytest.raises(ValueError):
			tessitura.arrangement.ArrangementModel(**kwargs)


class TestArrange:

	SECTION = Span(0, 384)
	DIVIDERS = Span(0, 384).divide_into(48)

	def test_staggered_entrances_with_fixed_ramp (self) -> None:
		"""A single rising ramp brings parts in one after another and drops them together."""
		model = tessitura.arrangement.ArrangementModel()
		windows = model.arrange(self.SECTION, 4, self.DIVIDERS, random.Random(1), ramp=Sawtooth(384, 0.0))

		assert [w.part for w in windows] == [0, 1, 2, 3]
		assert windows[0].spans == (Span(0, 288),)
		assert windows[1].spans == (Span(192, 336),)
		assert windows[2].spans == (Span(288, 384),)
		assert windows[3].spans == (Span(288, 384),)

	def test_ramp_is_relative_to_section_start (self) -> None:
		model = tessitura.arrangement.ArrangementModel()
		shifted = Span(384, 768)
		dividers = [d.shifted(384) for d in self.DIVIDERS]

		windows = model.arrange(shifted, 1, dividers, random.Random(1), ramp=Sawtooth(384, 0.0))

		assert windows[0].spans == (Span(384, 672),)

	def test_random_arrangement_is_deterministic (self) -> None:
		model = tessitura.arrangement.ArrangementModel()

		first = model.arrange(self.SECTION, 3, self.DIVIDERS, random.Random(8))
		second = model.arrange(self.SECTION, 3, self.DIVIDERS, random.Random(8))

		assert first == second

	def test_windows_are_disjoint_and_inside_section (self) -> None:
		model = tessitura.arrangement.ArrangementModel()

		for seed in range(20):
			for window in model.arrange(self.SECTION, 3, self.DIVIDERS, random.Random(seed)):
				for span in window.spans:
					assert span.is_within(self.SECTION)
				for a, b in zip(window.spans, window.spans[1:]):
					assert a.end < b.start

	def test_build_ramp_period_divides_section (self) -> None:
		model = tessitura.arrangement.ArrangementModel(blend_probability=0.0)
		ramp = model.build_ramp(self.SECTION, random.Random(4))

		assert isinstance(ramp, Sawtooth)
		assert ramp.period in (192, 96, 48)

	def test_build_ramp_can_blend (self) -> None:
		model = tessitura.arrangement.ArrangementModel(blend_probability=1.0)

		assert isinstance(model.build_ramp(self.SECTION, random.Random(4)), tessitura.arrangement.BlendedRamp)

	def test_empty_section_rejected (self) -> None:
		with pytest.raises(ValueError):
			tessitura.arrangement.ArrangementModel().build_ramp(Span(10, 10), random.Random(1))
