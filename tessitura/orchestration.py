"""Parts and General MIDI instrumentation.

A :class:`Part` element owns everything rendered beneath it: the notes of a
melody line or the hits of a drum line inherit the part's program and MIDI
channel when the composition is lowered to MIDI.
"""

import dataclasses
import enum
import logging
import random
import typing

import tessitura.constants.gm_instruments
import tessitura.context
import tessitura.errors
import tessitura.timing
import tessitura.tree


logger = logging.getLogger(__name__)


class PartRole (enum.Enum):

	"""What a part plays."""

	BASS = "bass"
	MELODY = "melody"
	DRUMS = "drums"


@dataclasses.dataclass(frozen=True)
class Part:

	"""
	An instrumental part.

	Parameters:
		role: Bass, melody or drums.
		program: General MIDI program (or drum kit number for drums).
		primary: Primary parts play in the firmer velocity band.
		group: Parts in the same group avoid starting notes on the same pitch
			class at the same time.
	"""

	role: PartRole
	program: int
	primary: bool = False
	group: str = "harmony"

	def __post_init__ (self) -> None:
		if not 0 <= self.program <= 127:
			raise ValueError(f"Program {self.program} out of range (0-127)")

	@property
	def is_percussion (self) -> bool:
		return self.role is PartRole.DRUMS


@dataclasses.dataclass(frozen=True)
class Instrumentation:

	"""
	The instruments chosen for a song.
	"""

	drums: int
	bass: int
	melody: int
	extras: typing.Tuple[int, ...] = ()

	def melodic_programs (self) -> typing.List[int]:

		"""Return the lead melody program followed by the extras."""

		return [self.melody] + list(self.extras)


@dataclasses.dataclass(frozen=True)
class RandomInstrumentation:

	"""Placeholder element that renders into an :class:`Instrumentation`."""


MELODIC_FAMILIES = (
	tessitura.constants.gm_instruments.PIANO,
	tessitura.constants.gm_instruments.CHROMATIC_PERCUSSION,
	tessitura.constants.gm_instruments.ORGAN,
	tessitura.constants.gm_instruments.GUITAR,
	tessitura.constants.gm_instruments.STRINGS,
	tessitura.constants.gm_instruments.ENSEMBLE,
	tessitura.constants.gm_instruments.BRASS,
	tessitura.constants.gm_instruments.REED,
	tessitura.constants.gm_instruments.PIPE,
	tessitura.constants.gm_instruments.SYNTH_LEAD,
	tessitura.constants.gm_instruments.SYNTH_PAD,
)

BASS_EXCLUDED = {
	tessitura.constants.gm_instruments.SLAP_BASS_1,
	tessitura.constants.gm_instruments.SLAP_BASS_2,
	tessitura.constants.gm_instruments.HARMONICA,
	tessitura.constants.gm_instruments.TANGO_ACCORDION,
	tessitura.constants.gm_instruments.PAD_BOWED,
	tessitura.constants.gm_instruments.PAD_SWEEP,
	tessitura.constants.gm_instruments.PAD_METALLIC,
	tessitura.constants.gm_instruments.PAD_WARM,
	tessitura.constants.gm_instruments.LEAD_FIFTHS,
}


def melodic_programs () -> typing.List[int]:

	"""
	Return the programs melody and extra parts are drawn from.
	"""

	return [program for family in MELODIC_FAMILIES for program in family]


def bass_programs () -> typing.List[int]:

	"""
	Return the programs a bass part is drawn from: basses, organs, pads and leads with a few exclusions.
	"""

	families = (tessitura.constants.gm_instruments.BASS, tessitura.constants.gm_instruments.ORGAN, tessitura.constants.gm_instruments.SYNTH_PAD, tessitura.constants.gm_instruments.SYNTH_LEAD)

	return [program for family in families for program in family if program not in BASS_EXCLUDED]


def drum_kits () -> typing.List[int]:
	return list(tessitura.constants.gm_instruments.DRUM_KITS)


def choose_instrumentation (
	rng: random.Random,
	melodic: typing.Optional[typing.Sequence[int]] = None,
	bass: typing.Optional[typing.Sequence[int]] = None,
	kits: typing.Optional[typing.Sequence[int]] = None,
	extra_count: int = 2
) -> Instrumentation:

	"""Choose a melody, bass and drum kit, plus distinct extra melodic instruments.

	Raises:
		MissingContext: If any pool is empty.
	"""

	melodic = melodic_programs() if melodic is None else list(melodic)
	bass = bass_programs() if bass is None else list(bass)
	kits = drum_kits() if kits is None else list(kits)

	if not melodic:
		raise tessitura.errors.MissingContext("No available melody instruments.")

	if not bass:
		raise tessitura.errors.MissingContext("No available bass instruments.")

	if not kits:
		raise tessitura.errors.MissingContext("No available drum instruments.")

	melody = rng.choice(melodic)
	bass_program = rng.choice(bass)
	kit = rng.choice(kits)

	others = [p for p in melodic if p != melody]
	extras = tuple(rng.sample(others, min(extra_count, len(others))))

	return Instrumentation(drums=kit, bass=bass_program, melody=melody, extras=extras)


def render_instrumentation (
	element: RandomInstrumentation,
	span: tessitura.timing.Span,
	context: tessitura.context.RenderContext
) -> typing.List[tessitura.tree.Segment]:

	"""
	Renderer for :class:`RandomInstrumentation`.
	"""

	instrumentation = choose_instrumentation(context.rng())

	logger.debug(f"Instrumentation: {instrumentation}")

	return [tessitura.tree.Segment(instrumentation, span)]


def renderers () -> typing.List[typing.Tuple[type, typing.Callable]]:
	return [(RandomInstrumentation, render_instrumentation)]
