"""Scale definitions and pitch-class arithmetic.

Everything here works on pitch classes (0-11) or absolute MIDI pitches and
carries no state. Keys, chords and the generation models build on these
helpers rather than repeating modular arithmetic inline.
"""

import typing


SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 2, 4, 5, 7, 9, 11],
	"natural_minor": [0, 2, 3, 5, 7, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
}


# Church modes as rotations of a seven-note scale.
# Index = the scale degree that becomes the new tonic.
MODES: typing.List[str] = [
	"ionian",
	"dorian",
	"phrygian",
	"lydian",
	"mixolydian",
	"aeolian",
	"locrian",
]


def get_scale (name: str) -> typing.List[int]:

	"""
	Return a named scale's interval list from the registry.
	"""

	if name not in SCALE_INTERVALS:
		raise ValueError(f"Unknown scale: {name}. Available: {sorted(SCALE_INTERVALS)}")

	return list(SCALE_INTERVALS[name])


def mode_index (mode: str) -> int:

	"""
	Return the rotation index for a mode name.
	"""

	if mode not in MODES:
		raise ValueError(f"Unknown mode '{mode}'. Available: {MODES}")

	return MODES.index(mode)


def rotate_intervals (intervals: typing.Sequence[int], degree: int) -> typing.List[int]:

	"""Rotate a scale so that ``degree`` becomes the first note.

	The result is re-expressed relative to the new first note, so rotating
	the major scale by 1 yields dorian.

	Example:
		```python
		rotate_intervals([0, 2, 4, 5, 7, 9, 11], 1)  # → [0, 2, 3, 5, 7, 9, 10]
		```
	"""

	count = len(intervals)

	if count == 0:
		return []

	degree %= count
	base = intervals[degree]
	rotated = list(intervals[degree:]) + list(intervals[:degree])

	return [(i - base) % 12 for i in rotated]


def interval_up (from_pc: int, to_pc: int) -> int:

	"""
	Return the ascending simple interval (0-11) from one pitch class to another.
	"""

	return (to_pc - from_pc) % 12


def pitch_class_distance (a: int, b: int) -> int:

	"""
	Return the shortest semitone distance between two pitch classes (0-6).
	"""

	diff = (a - b) % 12

	return min(diff, 12 - diff)


def nearest_distance (pc: int, targets: typing.Iterable[int]) -> int:

	"""
	Return the smallest pitch-class distance from ``pc`` to any of ``targets``.

	An empty target set yields 0 (no movement is required).
	"""

	distances = [pitch_class_distance(pc, t) for t in targets]

	if not distances:
		return 0

	return min(distances)
