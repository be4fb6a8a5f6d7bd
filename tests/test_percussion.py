import random
import typing

import pytest

import tessitura.arrangement
import tessitura.errors
import tessitura.orchestration
import tessitura.percussion
import tessitura.rhythm
import tessitura.timing


Hit = tessitura.percussion.DrumHitType
Model = tessitura.percussion.PercussionModel
Span = tessitura.timing.Span


def _by_divider (
	placed: typing.List[typing.Tuple[tessitura.percussion.DrumHit, tessitura.timing.Span]],
	dividers: typing.List[tessitura.timing.Span]
) -> typing.List[typing.List[typing.Tuple[tessitura.percussion.DrumHitType, int, int]]]:

	"""Group placed hits per divider as ``(hit, offset, length)``."""

	return [
		[(hit.hit, span.start - divider.start, span.length) for hit, span in placed if divider.contains(span.start)]
		for divider in dividers
	]


class TestDensity:

	def test_curve_endpoints (self, four_four: tessitura.timing.TimeSignature) -> None:
		model = Model()

		assert model.density(6, four_four) == 0.0
		assert model.density(3, four_four) == 0.0
		assert model.density(30, four_four) == 1.0
		assert model.density(500, four_four) == 1.0

	def test_curve_midpoint (self, four_four: tessitura.timing.TimeSignature) -> None:
		assert Model().density(18, four_four) == pytest.approx(0.5 ** 0.1)

	def test_rest_level_in_range (self) -> None:
		model = Model(rest_probability_range=(0.3, 0.9))
		rng = random.Random(1)

		assert all(0.3 <= model.draw_rest_level(rng) <= 0.9 for _ in range(100))


class TestPattern:

	def test_first_slot_is_one_sounding_quantum (self, four_four: tessitura.timing.TimeSignature) -> None:
		for seed in range(20):
			pattern = Model().pattern(96, four_four, 0.5, random.Random(seed))

			first = pattern.rhythm.subdivisions[0]
			assert (first.start, first.end, first.is_rest) == (0, 6, False)
			assert pattern.rhythm.length == 96
			assert len(pattern.hits) == len(pattern.rhythm)
			assert all(s.length % 6 == 0 for s in pattern.rhythm)

	def test_short_length_is_single_slot (self, four_four: tessitura.timing.TimeSignature) -> None:
		pattern = Model().pattern(4, four_four, 0.5, random.Random(1))

		assert [s.length for s in pattern.rhythm] == [4]

	def test_no_rest_level_means_no_rests (self, four_four: tessitura.timing.TimeSignature) -> None:
		pattern = Model().pattern(96, four_four, 0.0, random.Random(2))

		assert not any(s.is_rest for s in pattern.rhythm)

	def test_only_weighted_hits_used (self, four_four: tessitura.timing.TimeSignature) -> None:
		model = Model(hit_weights=[(Hit.CLOSED_HAT, 1), (Hit.SNARE, 0)])
		pattern = model.pattern(96, four_four, 0.0, random.Random(2))

		assert set(pattern.hits) == {Hit.CLOSED_HAT}

	def test_one_pattern_per_distinct_length (self, four_four: tessitura.timing.TimeSignature) -> None:
		patterns = Model().patterns([96, 48, 96, 48, 24], four_four, random.Random(1))

		assert sorted(patterns) == [24, 48, 96]
		assert all(p.rhythm.length == length for length, p in patterns.items())

	def test_pattern_length_mismatch (self) -> None:
		with pytest.raises(ValueError):
			tessitura.percussion.DrumPattern(tessitura.rhythm.Rhythm.from_durations([6, 6]), (Hit.SNARE,))

	def test_with_downbeat_forces_sound (self) -> None:
		rhythm = tessitura.rhythm.Rhythm((tessitura.rhythm.Subdivision(0, 6, True), tessitura.rhythm.Subdivision(6, 12, True)))
		pattern = tessitura.percussion.DrumPattern(rhythm, (Hit.CLOSED_HAT, Hit.PEDAL_HAT))

		assert pattern.with_downbeat(Hit.BASS_DRUM).lay_over(Span(0, 12)) == [(Hit.BASS_DRUM, Span(0, 6))]


class TestPlacement:

	def test_bar_line_downbeat_is_bass_drum (self, four_four: tessitura.timing.TimeSignature) -> None:
		assert Model.downbeat(Span(96, 192), 0, four_four, random.Random(1)) is Hit.BASS_DRUM
		assert Model.downbeat(Span(144, 192), 48, four_four, random.Random(1)) is Hit.BASS_DRUM

	def test_off_bar_downbeat_uses_its_own_rng (self, four_four: tessitura.timing.TimeSignature) -> None:
		expected = tessitura.percussion.DOWNBEAT_ALTERNATIVES[random.Random(7).randint(0, 1)]

		assert Model.downbeat(Span(48, 96), 0, four_four, random.Random(7)) is expected

	def test_equal_dividers_share_body (self, four_four: tessitura.timing.TimeSignature) -> None:
		"""Dividers of equal length repeat the same groove after the first hit."""
		dividers = [Span(0, 48), Span(48, 96), Span(96, 144)]
		placed = Model().place(dividers, 0, four_four, random.Random(3), random.Random)

		groups = _by_divider(placed, dividers)

		assert groups[0][1:] == groups[1][1:] == groups[2][1:]
		assert groups[0][0] == (Hit.BASS_DRUM, 0, 6)
		assert groups[1][0][0] is tessitura.percussion.DOWNBEAT_ALTERNATIVES[random.Random(1).randint(0, 1)]
		assert groups[2][0][0] is Hit.BASS_DRUM

	def test_velocities_in_range (self, four_four: tessitura.timing.TimeSignature) -> None:
		dividers = Span(0, 384).divide_into(96)
		placed = Model().place(dividers, 0, four_four, random.Random(4), random.Random)

		assert placed
		assert all(90 <= hit.velocity <= 109 for hit, _ in placed)
		assert all(hit.note in (35, 38, 42, 44) for hit, _ in placed)

	def test_deterministic (self, four_four: tessitura.timing.TimeSignature) -> None:
		dividers = Span(0, 384).divide_into(72)

		first = Model().place(dividers, 0, four_four, random.Random(9), random.Random)
		second = Model().place(dividers, 0, four_four, random.Random(9), random.Random)

		assert first == second

	@pytest.mark.parametrize("kwargs", [
		{"hit_weights": []},
		{"hit_weights": [(Hit.SNARE, -1)]},
		{"hit_weights": [(Hit.SNARE, 0)]},
		{"power": 0},
		{"rest_probability_range": (0.9, 0.3)},
		{"velocity_range": (100, 200)},
	])
	def test_invalid_settings (self, kwargs: dict) -> None:
		with pytest.raises(ValueError):
			Model(**kwargs)


class TestRenderer:

	def _tree (self, builder: typing.Callable, four_four: tessitura.timing.TimeSignature, with_dividers: bool = True) -> typing.Any:

		b = builder()
		b.add(four_four, Span(0, 384))

		if with_dividers:
			for divider in Span(0, 384).divide_into(96):
				b.add(tessitura.arrangement.PhraseDivider(), divider)

		part = b.add(tessitura.orchestration.Part(tessitura.orchestration.PartRole.DRUMS, 0, group="percussion"), Span(0, 192))
		line = b.add(tessitura.percussion.DrumLine(), Span(0, 192), parent=part)

		return b, line

	def test_render_line (self, builder: typing.Callable, four_four: tessitura.timing.TimeSignature) -> None:
		b, line = self._tree(builder, four_four)

		segments = Model().render_line(line.element, line.span, b.context(line))
		starts = {s.span.start: s.element.hit for s in segments}

		assert all(s.span.is_within(Span(0, 192)) for s in segments)
		assert starts[0] is Hit.BASS_DRUM
		assert starts[96] is Hit.BASS_DRUM

	def test_render_line_needs_dividers (self, builder: typing.Callable, four_four: tessitura.timing.TimeSignature) -> None:
		b, line = self._tree(builder, four_four, with_dividers=False)

		with pytest.raises(tessitura.errors.MissingContext):
			Model().render_line(line.element, line.span, b.context(line))

	def test_render_line_under_earlier_divider_is_silent (self, builder: typing.Callable, four_four: tessitura.timing.TimeSignature) -> None:

		"""A part inside a divider that began before it renders no hits instead of waiting forever."""

		b = builder()
		b.add(four_four, Span(0, 384))
		b.add(tessitura.arrangement.PhraseDivider(), Span(0, 384))

		part = b.add(tessitura.orchestration.Part(tessitura.orchestration.PartRole.DRUMS, 0, group="percussion"), Span(192, 384))
		line = b.add(tessitura.percussion.DrumLine(), Span(192, 384), parent=part)

		assert Model().render_line(line.element, line.span, b.context(line)) == []
