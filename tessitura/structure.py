"""Song form: sections, phrase dividers and the parts placed in them.

``Sections`` splits a song into equal named chunks, recursively, until each
is short enough to be one ``Section``. Chunk names are drawn at random from
a small set, and named segments share a seed, so chunks that draw the same
name repeat the same material.

A ``Section`` lays out its phrase dividers, its chord progression, bass and
drum parts across its four quarters, and melodic parts over the windows
chosen by the :class:`~tessitura.arrangement.ArrangementModel`.
"""

import dataclasses
import logging
import typing

import tessitura.arrangement
import tessitura.chord_progression
import tessitura.context
import tessitura.melody
import tessitura.orchestration
import tessitura.percussion
import tessitura.rhythm
import tessitura.timing
import tessitura.tree


logger = logging.getLogger(__name__)


DEFAULT_MIN_SECTION_BARS = 8


@dataclasses.dataclass(frozen=True)
class Sections:

	"""Placeholder element that splits its span into sections."""


@dataclasses.dataclass(frozen=True)
class Section:

	"""One section of the song."""


class SongStructure:

	"""Renderers for :class:`Sections`, :class:`Section` and :class:`~tessitura.orchestration.Part`."""

	def __init__ (
		self,
		arrangement: typing.Optional[tessitura.arrangement.ArrangementModel] = None,
		min_section_bars: int = DEFAULT_MIN_SECTION_BARS
	) -> None:

		if min_section_bars < 1:
			raise ValueError("min_section_bars must be at least 1")

		self.arrangement = arrangement or tessitura.arrangement.ArrangementModel()
		self.min_section_bars = min_section_bars


	def render_sections (
		self,
		element: Sections,
		span: tessitura.timing.Span,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.tree.Segment]:

		"""Split ``span`` into named chunks, or make it one :class:`Section`.

		The length considered is trimmed to a multiple of twice the minimum
		section length. If that is no longer than one minimum section the
		whole span becomes a ``Section``. Otherwise it is cut into 2 to 6 equal
		chunks, each a nested ``Sections`` named at random, with any trimmed
		remainder forming a final shorter chunk.
		"""

		ts = (
			context.find(tessitura.timing.TimeSignature)
			.with_timing(tessitura.timing.TimingRelation.DURING, span)
			.require()
			.element
		)

		rng = context.rng()
		min_length = ts.bars(self.min_section_bars)
		trimmed = span.length - span.length % (min_length * 2)

		if trimmed <= min_length:
			return [tessitura.tree.Segment(Section(), span)]

		splits = [n for n in range(2, 7) if trimmed % (n * min_length) == 0]
		count = rng.choice(splits)
		chunks = span.divide_into(trimmed // count)

		logger.debug(f"Splitting {span.start}-{span.end} into {len(chunks)} chunks")

		return [tessitura.tree.Segment(Sections(), chunk, name=str(rng.randrange(count))) for chunk in chunks]


	@staticmethod
	def phrase_dividers (
		span: tessitura.timing.Span,
		ts: tessitura.timing.TimeSignature,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.timing.Span]:

		"""
		Return divider spans: one bar of half-beat multiples, cycled over the section.
		"""

		options = [([ts.half_beat() * n], n) for n in range(1, ts.beats_per_bar + 1)]
		rhythm = tessitura.rhythm.Rhythm.random_with_subdivision_weights(
			ts.bar(),
			options,
			context.rng_with_seed("dividers")
		)

		return [sub.span() for sub in rhythm.iter_over(span)]


	def render_section (
		self,
		element: Section,
		span: tessitura.timing.Span,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.tree.Segment]:

		"""
		Renderer for :class:`Section`.
		"""

		during = tessitura.timing.TimingRelation.DURING
		instrumentation = context.find(tessitura.orchestration.Instrumentation).with_timing(during, span).require().element
		ts = context.find(tessitura.timing.TimeSignature).with_timing(during, span).require().element

		rng = context.rng()
		dividers = self.phrase_dividers(span, ts, context)
		quarters = span.divide_into(max(1, span.length // 4))

		role = tessitura.orchestration.PartRole
		bass = tessitura.orchestration.Part(role.BASS, instrumentation.bass, primary=True, group="bass")
		drums = tessitura.orchestration.Part(role.DRUMS, instrumentation.drums, group="percussion")

		segments = [
			tessitura.tree.Segment(tessitura.chord_progression.ChordMarkers(), span),
			tessitura.tree.Segment(tessitura.chord_progression.RandomChordProgression(), span),
		]
		segments.extend(tessitura.tree.Segment(tessitura.arrangement.PhraseDivider(), d) for d in dividers)
		segments.extend(tessitura.tree.Segment(bass, q, name="Bass") for q in quarters)
		segments.extend(tessitura.tree.Segment(drums, q, name="Drums") for q in quarters)

		programs = instrumentation.melodic_programs()
		ramp = self.arrangement.build_ramp(span, rng)
		windows = self.arrangement.arrange(span, len(programs), dividers, rng, ramp=ramp)

		for window, program in zip(windows, programs):

			part = tessitura.orchestration.Part(role.MELODY, program, primary=(window.part == 0))

			for window_span in window.spans:
				# Parts entering at the same ramp height share material.
				name = str(int(window.part * ramp.value_at(window_span.start - span.start)))
				segments.append(tessitura.tree.Segment(part, window_span, name=name))

		return segments


	@staticmethod
	def render_part (
		element: tessitura.orchestration.Part,
		span: tessitura.timing.Span,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.tree.Segment]:

		"""
		Renderer for :class:`~tessitura.orchestration.Part`: emit the line matching its role.
		"""

		if element.role is tessitura.orchestration.PartRole.DRUMS:
			line: typing.Any = tessitura.percussion.DrumLine()

		elif element.role is tessitura.orchestration.PartRole.BASS:
			line = tessitura.melody.MelodyLine(band=tessitura.melody.BASS_BAND)

		else:
			line = tessitura.melody.MelodyLine(band=tessitura.melody.MELODY_BAND)

		return [tessitura.tree.Segment(line, span)]


	def renderers (self) -> typing.List[typing.Tuple[type, typing.Callable]]:

		return [
			(Sections, self.render_sections),
			(Section, self.render_section),
			(tessitura.orchestration.Part, self.render_part),
		]
