"""The song root and the standard renderer set.

A :class:`Song` spans the whole composition and renders the global context
every other renderer depends on: a random key, time signature, tempo and
instrumentation, plus the :class:`~tessitura.structure.Sections` that
produce the music itself.

Example:
	```python
	composer = tessitura.composer.Composer()
	composition = composer.compose(beats=128, seed=7)
	composition.elements(tessitura.melody.PlayNote)
	```
"""

import dataclasses
import logging
import typing

import tessitura.arrangement
import tessitura.chord_progression
import tessitura.config
import tessitura.context
import tessitura.engine
import tessitura.intervals
import tessitura.key
import tessitura.melody
import tessitura.orchestration
import tessitura.percussion
import tessitura.structure
import tessitura.timing
import tessitura.tree


logger = logging.getLogger(__name__)


BEATS_PER_BAR_CHOICES = range(2, 8)
TEMPO_RANGE: typing.Tuple[int, int] = (100, 160)


@dataclasses.dataclass(frozen=True)
class Song:

	"""Root element of a composition."""


@dataclasses.dataclass(frozen=True)
class RandomKey:

	"""Placeholder element that renders into a :class:`~tessitura.key.Key`."""


@dataclasses.dataclass(frozen=True)
class RandomTimeSignature:

	"""Placeholder element that renders into a :class:`~tessitura.timing.TimeSignature`."""


@dataclasses.dataclass(frozen=True)
class RandomTempo:

	"""Placeholder element that renders into a :class:`Tempo`."""


@dataclasses.dataclass(frozen=True)
class Tempo:

	"""Tempo in beats per minute."""

	bpm: int

	def __post_init__ (self) -> None:
		if self.bpm <= 0:
			raise ValueError("Tempo must be positive")


def render_song (
	element: Song,
	span: tessitura.timing.Span,
	context: tessitura.context.RenderContext
) -> typing.List[tessitura.tree.Segment]:

	return [
		tessitura.tree.Segment(RandomKey(), span),
		tessitura.tree.Segment(RandomTimeSignature(), span),
		tessitura.tree.Segment(RandomTempo(), span),
		tessitura.tree.Segment(tessitura.orchestration.RandomInstrumentation(), span),
		tessitura.tree.Segment(tessitura.structure.Sections(), span),
	]


def render_random_key (
	element: RandomKey,
	span: tessitura.timing.Span,
	context: tessitura.context.RenderContext
) -> typing.List[tessitura.tree.Segment]:

	"""
	Choose a tonic, scale and mode uniformly.
	"""

	rng = context.rng()
	key = tessitura.key.Key(
		tonic = rng.randrange(12),
		scale = rng.choice(sorted(tessitura.intervals.SCALE_INTERVALS)),
		mode = rng.choice(tessitura.intervals.MODES)
	)

	logger.debug(f"Key: {key.name()}")

	return [tessitura.tree.Segment(key, span)]


def render_random_time_signature (
	element: RandomTimeSignature,
	span: tessitura.timing.Span,
	context: tessitura.context.RenderContext
) -> typing.List[tessitura.tree.Segment]:

	"""
	Choose 2 to 7 beats per bar at the engine's beat length.
	"""

	rng = context.rng()
	ts = tessitura.timing.TimeSignature(
		beats_per_bar = rng.choice(BEATS_PER_BAR_CHOICES),
		beat_length = context.beat_length
	)

	return [tessitura.tree.Segment(ts, span)]


def render_random_tempo (
	element: RandomTempo,
	span: tessitura.timing.Span,
	context: tessitura.context.RenderContext
) -> typing.List[tessitura.tree.Segment]:

	low, high = TEMPO_RANGE

	return [tessitura.tree.Segment(Tempo(bpm=context.rng().randint(low, high)), span)]


class Composer:

	"""Builds a :class:`~tessitura.engine.RenderEngine` with the standard renderers and composes songs."""

	def __init__ (self, config: typing.Optional[tessitura.config.GenerationConfig] = None) -> None:

		self.config = config or tessitura.config.GenerationConfig()

		self.chords = tessitura.chord_progression.ChordProgressionGenerator(
			min_chords = self.config.min_chords,
			max_chords = self.config.max_chords,
			echelon_range = self.config.echelon_range,
			progression_bars = self.config.progression_bars
		)
		self.melody = tessitura.melody.MelodyModel(
			tessitura.melody.MelodySettings(bump_factor=self.config.bump_factor)
		)
		self.percussion = tessitura.percussion.PercussionModel(
			power = self.config.power,
			rest_probability_range = self.config.rest_probability_range
		)
		self.structure = tessitura.structure.SongStructure(tessitura.arrangement.ArrangementModel())

		self.engine = tessitura.engine.RenderEngine(
			beat_length = self.config.beat_length,
			max_passes = self.config.max_passes
		)
		self.engine.register_all(self.renderers())


	def renderers (self) -> typing.List[typing.Tuple[type, typing.Callable]]:

		"""
		Return the standard renderer registrations, in registration order.
		"""

		return [
			(Song, render_song),
			(RandomKey, render_random_key),
			(RandomTimeSignature, render_random_time_signature),
			(RandomTempo, render_random_tempo),
			*tessitura.orchestration.renderers(),
			*self.structure.renderers(),
			*self.chords.renderers(),
			*self.melody.renderers(),
			*self.percussion.renderers(),
		]


	def compose (self, beats: typing.Optional[int] = None, seed: typing.Optional[int] = None) -> tessitura.engine.Composition:

		"""Compose a song.

		Parameters:
			beats: Song length in beats (default from the config).
			seed: Root seed (default from the config).
		"""

		beats = self.config.beats if beats is None else beats
		seed = self.config.seed if seed is None else seed

		if beats < 1:
			raise ValueError("beats must be at least 1")

		span = tessitura.timing.Span(0, beats * self.config.beat_length)

		logger.info(f"Composing {beats} beats with seed {seed}")

		return self.engine.compose(Song(), span, seed)
