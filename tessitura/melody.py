"""Melodic note choice by additive heuristic scores.

Each candidate pitch in the part's octave band collects a signed integer
*bump* from a handful of independent heuristics. The bumps are summed and
turned into a sampling weight with ``bump_factor ** bump``, so every
heuristic acts multiplicatively and ``bump_factor`` sets how strongly the
model prefers high-scoring pitches.

Heuristics:

1. **Chord membership**: longer notes lean harder on chord tones. A chord
   tone already sustained by another part is discouraged instead.
2. **Contour**: a cosine wave across the phrase sets a target pitch; the
   further a candidate sits from it the larger its (clamped) penalty.
3. **Anticipation**: close to a chord change, pitches near the coming
   chord's tones are favoured, more so the closer the change.
4. **Residue**: tones left over from the previous chord are discouraged.
5. **Leap smoothing**: leaps beyond a small free interval and exact
   repetitions are penalised.
6. **Collision**: pitch classes another part of the same group starts at
   nearly the same moment are penalised.
"""

import dataclasses
import logging
import math
import random
import typing

import tessitura.arrangement
import tessitura.chord_progression
import tessitura.chords
import tessitura.constants.velocity
import tessitura.context
import tessitura.errors
import tessitura.intervals
import tessitura.key
import tessitura.orchestration
import tessitura.rhythm
import tessitura.timing
import tessitura.tree
import tessitura.weighting


logger = logging.getLogger(__name__)


# Octave bands as (low, high) semitone offsets above the key's tonic pitch class.
BASS_BAND: typing.Tuple[int, int] = (30, 48)
MELODY_BAND: typing.Tuple[int, int] = (48, 78)

MERGE_PROBABILITY = 0.7


@dataclasses.dataclass(frozen=True)
class PlayNote:

	"""A placed note. The owning part is the nearest :class:`~tessitura.orchestration.Part` ancestor."""

	pitch: int
	velocity: int


@dataclasses.dataclass(frozen=True)
class MelodyLine:

	"""
	Placeholder element that renders a part's notes within an octave band.
	"""

	band: typing.Tuple[int, int] = MELODY_BAND


@dataclasses.dataclass(frozen=True)
class MelodicSlot:

	"""
	Everything the model needs to choose one note.

	``low`` and ``high`` are absolute MIDI pitches (inclusive).
	``sustained_pitch_classes`` are held by other parts at the slot start;
	``colliding_pitch_classes`` are started by same-group parts close to it.
	"""

	span: tessitura.timing.Span
	phrase: tessitura.timing.Span
	chord: tessitura.chords.Chord
	low: int
	high: int
	primary: bool = False
	previous_note: typing.Optional[int] = None
	previous_chord: typing.Optional[tessitura.chords.Chord] = None
	next_chord: typing.Optional[tessitura.chords.Chord] = None
	next_chord_start: typing.Optional[int] = None
	contour_harmonic: typing.Optional[int] = None
	sustained_pitch_classes: typing.FrozenSet[int] = frozenset()
	colliding_pitch_classes: typing.FrozenSet[int] = frozenset()


def _check_band (name: str, band: typing.Tuple[int, int]) -> None:

	low, high = band

	if not tessitura.constants.velocity.MIN_VELOCITY <= low <= high <= tessitura.constants.velocity.MAX_VELOCITY:
		raise ValueError(f"Invalid {name} {band}")


@dataclasses.dataclass(frozen=True)
class MelodySettings:

	"""
	Tuning for :class:`MelodyModel`. Bumps are integers; beat-based values
	are converted with the active time signature.
	"""

	bump_factor: float = 1.6

	chord_tone_gain: float = 1.0
	chord_tone_cap: int = 8
	non_chord_penalty: int = 1

	contour_harmonics: typing.Tuple[int, ...] = (1, 2, 3)
	contour_scale: float = 4.0
	contour_clamp: int = 6

	anticipation_beats: float = 2.0
	anticipation_weight: float = 2.0
	anticipation_reach: int = 2

	residue_penalty: int = 1

	free_leap: int = 2
	leap_weight: float = 0.5
	repeat_penalty: int = 2

	collision_beats: float = 0.25
	collision_penalty: int = 2

	primary_velocity: typing.Tuple[int, int] = tessitura.constants.velocity.PRIMARY_VELOCITY_BAND
	secondary_velocity: typing.Tuple[int, int] = tessitura.constants.velocity.SECONDARY_VELOCITY_BAND

	def __post_init__ (self) -> None:

		if self.bump_factor <= 1.0:
			raise ValueError("bump_factor must be greater than 1")

		if not self.contour_harmonics or any(h < 1 for h in self.contour_harmonics):
			raise ValueError("contour_harmonics must be positive integers")

		if self.contour_scale <= 0:
			raise ValueError("contour_scale must be positive")

		if self.anticipation_beats <= 0:
			raise ValueError("anticipation_beats must be positive")

		if self.collision_beats < 0:
			raise ValueError("collision_beats must not be negative")

		penalties = (
			self.chord_tone_gain, self.chord_tone_cap, self.non_chord_penalty, self.contour_clamp,
			self.anticipation_weight, self.anticipation_reach, self.residue_penalty,
			self.free_leap, self.leap_weight, self.repeat_penalty, self.collision_penalty,
		)

		if any(value < 0 for value in penalties):
			raise ValueError("Melody gains and penalties must not be negative")

		_check_band("primary_velocity", self.primary_velocity)
		_check_band("secondary_velocity", self.secondary_velocity)


class MelodyModel:

	"""Scores candidate pitches for a slot and samples one."""

	def __init__ (self, settings: typing.Optional[MelodySettings] = None) -> None:

		self.settings = settings or MelodySettings()


	# ─── Heuristics ─────────────────────────────────────────────────────

	def chord_bump (self, pitch: int, slot: MelodicSlot, ts: tessitura.timing.TimeSignature) -> int:

		"""
		Reward chord tones in proportion to the square of the slot's length in half beats.
		"""

		s = self.settings
		ratio = slot.span.length / ts.half_beat() - 1
		bump = min(s.chord_tone_cap, int(round(s.chord_tone_gain * ratio * ratio)))
		pc = pitch % 12

		if pc in slot.chord.pitch_classes():
			return -bump if pc in slot.sustained_pitch_classes else bump

		return -max(s.non_chord_penalty, bump)


	def contour_target (self, slot: MelodicSlot, harmonic: int) -> float:

		"""
		Return the target pitch of the cosine contour at the slot's position in its phrase.
		"""

		if slot.phrase.length > 0:
			x = (slot.span.start - slot.phrase.start) / slot.phrase.length

		else:
			x = 0.0

		wave = (math.cos(2 * math.pi * harmonic * x + math.pi) + 1) / 2

		return slot.low + wave * (slot.high - slot.low)


	def contour_bump (self, pitch: int, target: float) -> int:

		s = self.settings
		distance = (pitch - target) / s.contour_scale

		return -min(s.contour_clamp, int(round(distance * distance)))


	def anticipation_bump (self, pitch: int, slot: MelodicSlot, ts: tessitura.timing.TimeSignature) -> int:

		"""
		Favour pitches near the next chord's tones when the change is within the lookahead.
		"""

		if slot.next_chord is None or slot.next_chord_start is None:
			return 0

		s = self.settings
		lookahead = s.anticipation_beats * ts.beat()
		gap = slot.next_chord_start - slot.span.end

		if slot.next_chord_start <= slot.span.start or gap > lookahead:
			return 0

		gap = max(0, gap)
		distance = tessitura.intervals.nearest_distance(pitch % 12, slot.next_chord.pitch_classes())
		pitch_term = max(0, s.anticipation_reach - distance)

		if pitch_term == 0:
			return 0

		time_term = int(round(s.anticipation_weight * (1 - gap / lookahead)))

		return time_term + pitch_term


	def residue_bump (self, pitch: int, slot: MelodicSlot) -> int:

		previous = slot.previous_chord

		if previous is None or previous == slot.chord:
			return 0

		pc = pitch % 12

		if pc in previous.pitch_classes() and pc not in slot.chord.pitch_classes():
			return -self.settings.residue_penalty

		return 0


	def leap_bump (self, pitch: int, slot: MelodicSlot) -> int:

		if slot.previous_note is None:
			return 0

		s = self.settings
		leap = abs(pitch - slot.previous_note)
		bump = -int(round(s.leap_weight * max(0, leap - s.free_leap)))

		if leap == 0:
			bump -= s.repeat_penalty

		return bump


	def collision_bump (self, pitch: int, slot: MelodicSlot) -> int:

		if pitch % 12 in slot.colliding_pitch_classes:
			return -self.settings.collision_penalty

		return 0


	# ─── Selection ──────────────────────────────────────────────────────

	def score (self, pitch: int, slot: MelodicSlot, ts: tessitura.timing.TimeSignature, target: float) -> int:

		"""
		Return the summed bump of one candidate pitch.
		"""

		return (
			self.chord_bump(pitch, slot, ts)
			+ self.contour_bump(pitch, target)
			+ self.anticipation_bump(pitch, slot, ts)
			+ self.residue_bump(pitch, slot)
			+ self.leap_bump(pitch, slot)
			+ self.collision_bump(pitch, slot)
		)


	def weights (
		self,
		slot: MelodicSlot,
		key: tessitura.key.Key,
		ts: tessitura.timing.TimeSignature,
		rng: random.Random
	) -> typing.List[typing.Tuple[int, float]]:

		"""Return ``(pitch, weight)`` for every in-key pitch of the slot's band.

		The contour harmonic comes from the slot, or is drawn from ``rng`` when
		the slot does not set one.
		"""

		harmonic = slot.contour_harmonic

		if harmonic is None:
			harmonic = rng.choice(self.settings.contour_harmonics)

		target = self.contour_target(slot, harmonic)

		return [
			(pitch, self.settings.bump_factor ** self.score(pitch, slot, ts, target))
			for pitch in key.notes_in_range(slot.low, slot.high)
		]


	def velocity (self, slot: MelodicSlot, rng: random.Random) -> int:

		low, high = self.settings.primary_velocity if slot.primary else self.settings.secondary_velocity

		return rng.randint(low, high)


	def choose (
		self,
		slot: MelodicSlot,
		key: tessitura.key.Key,
		ts: tessitura.timing.TimeSignature,
		rng: random.Random
	) -> PlayNote:

		"""Sample one note for a slot.

		Raises:
			MissingContext: If the band holds no in-key pitch.
		"""

		pitch = tessitura.weighting.choose_weighted(self.weights(slot, key, ts, rng), rng, "candidate pitches")

		return PlayNote(pitch=pitch, velocity=self.velocity(slot, rng))


	# ─── Rendering ──────────────────────────────────────────────────────

	def subdivision_options (self, ts: tessitura.timing.TimeSignature) -> typing.List[typing.Tuple[typing.List[int], float]]:

		"""
		Return the weighted note-length groups a phrase is filled with.
		"""

		return [
			([ts.beats(2)], 16),
			([ts.triplet()] * 3, 8),
			([ts.beat() + ts.half_beat()], 4),
			([ts.beat()], 2),
			([ts.half_beat()], 1),
		]


	@staticmethod
	def merge_repeats (
		notes: typing.Sequence[typing.Tuple[PlayNote, tessitura.timing.Span]],
		rng: random.Random,
		probability: float = MERGE_PROBABILITY
	) -> typing.List[typing.Tuple[PlayNote, tessitura.timing.Span]]:

		"""Tie consecutive touching notes of the same pitch, each pair with ``probability``.

		The merged note keeps the first note's velocity.
		"""

		merged: typing.List[typing.Tuple[PlayNote, tessitura.timing.Span]] = []

		for note, span in notes:

			if merged:
				last_note, last_span = merged[-1]

				if last_note.pitch == note.pitch and last_span.end == span.start and rng.random() < probability:
					merged[-1] = (last_note, tessitura.timing.Span(last_span.start, span.end))
					continue

			merged.append((note, span))

		return merged


	def render_line (
		self,
		element: MelodyLine,
		span: tessitura.timing.Span,
		context: tessitura.context.RenderContext
	) -> typing.List[tessitura.tree.Segment]:

		"""Renderer for :class:`MelodyLine`.

		Requires the owning part, key, time signature, the phrase dividers
		overlapping the line and the chord markers overlapping the line plus
		the anticipation lookahead.
		"""

		part_node = context.nearest_ancestor(tessitura.orchestration.Part)

		if part_node is None:
			raise tessitura.errors.MissingContext("MelodyLine is not inside a Part.")

		part = part_node.element
		during = tessitura.timing.TimingRelation.DURING
		overlapping = tessitura.timing.TimingRelation.OVERLAPPING

		key = context.find(tessitura.key.Key).with_timing(during, span).require().element
		ts = context.find(tessitura.timing.TimeSignature).with_timing(during, span).require().element

		dividers = (
			context.find(tessitura.arrangement.PhraseDivider)
			.with_timing(overlapping, span)
			.require_all()
		)

		lookahead = int(math.ceil(self.settings.anticipation_beats * ts.beat()))
		chords = (
			context.find(tessitura.chords.Chord)
			.within(tessitura.chord_progression.ChordMarkers)
			.with_timing(overlapping, tessitura.timing.Span(span.start, span.end + lookahead))
			.require_all()
		)

		tree = context.tree
		siblings = (
			context.find(PlayNote)
			.with_timing(overlapping, span)
			.matching(lambda node: not tree.is_descendant(node, part_node))
			.get_all()
		)
		sibling_parts = {node.index: tree.nearest_ancestor(node, tessitura.orchestration.Part) for node in siblings}

		rng = context.rng()
		low = key.root() + element.band[0]
		high = key.root() + element.band[1]
		collision_window = self.settings.collision_beats * ts.beat()
		options = self.subdivision_options(ts)

		notes: typing.List[typing.Tuple[PlayNote, tessitura.timing.Span]] = []
		previous_note: typing.Optional[int] = None

		for divider in dividers:

			phrase = tessitura.timing.Span(max(divider.span.start, span.start), min(divider.span.end, span.end))

			if phrase.length <= 0:
				continue

			rhythm = tessitura.rhythm.Rhythm.random_with_subdivision_weights(phrase.length, options, rng)
			harmonic = rng.choice(self.settings.contour_harmonics)

			for subdivision in rhythm:

				note_span = subdivision.span().shifted(phrase.start)
				index = _chord_index_at(chords, note_span.start)

				if index is None:
					raise tessitura.errors.MissingContext(f"No chord sounding at {note_span.start}.")

				chord_node = chords[index]
				previous_chord = _adjacent_chord(chords, index, before=True)
				next_chord = _adjacent_chord(chords, index, before=False)

				sustained = frozenset(
					node.element.pitch % 12 for node in siblings
					if node.span.contains(note_span.start)
				)
				colliding = frozenset(
					node.element.pitch % 12 for node in siblings
					if abs(node.span.start - note_span.start) < collision_window
					and sibling_parts[node.index] is not None
					and sibling_parts[node.index].element.group == part.group
				)

				slot = MelodicSlot(
					span = note_span,
					phrase = phrase,
					chord = chord_node.element,
					low = low,
					high = high,
					primary = part.primary,
					previous_note = previous_note,
					previous_chord = previous_chord.element if previous_chord else None,
					next_chord = next_chord.element if next_chord else None,
					next_chord_start = next_chord.span.start if next_chord else None,
					contour_harmonic = harmonic,
					sustained_pitch_classes = sustained,
					colliding_pitch_classes = colliding
				)

				note = self.choose(slot, key, ts, rng)
				notes.append((note, note_span))
				previous_note = note.pitch

		merged = self.merge_repeats(notes, rng)

		logger.debug(f"{part.role.value} line {span.start}-{span.end}: {len(merged)} notes")

		return [tessitura.tree.Segment(note, note_span) for note, note_span in merged]


	def renderers (self) -> typing.List[typing.Tuple[type, typing.Callable]]:
		return [(MelodyLine, self.render_line)]


def _chord_index_at (chords: typing.Sequence[tessitura.tree.RenderNode], pulse: int) -> typing.Optional[int]:

	for index, node in enumerate(chords):
		if node.span.contains(pulse):
			return index

	return None


def _adjacent_chord (
	chords: typing.Sequence[tessitura.tree.RenderNode],
	index: int,
	before: bool
) -> typing.Optional[tessitura.tree.RenderNode]:

	"""
	Return the chord that ends where ``chords[index]`` starts (or starts where it ends).
	"""

	current = chords[index]

	for node in chords:
		if before and node.span.end == current.span.start:
			return node
		if not before and node.span.start == current.span.end:
			return node

	return None
