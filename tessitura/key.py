"""Keys: a tonic, a scale and a mode.

A :class:`Key` defines the closed set of permissible pitch classes for a
section and, through :meth:`Key.triads`, its scale-degree chords.  Keys are
immutable and are placed in the render tree as ordinary elements so that any
renderer can look them up with ``context.find(Key)``.
"""

import dataclasses
import typing

import tessitura.chords
import tessitura.intervals


ROMAN_NUMERALS: typing.List[str] = ["I", "II", "III", "IV", "V", "VI", "VII"]


@dataclasses.dataclass(frozen=True)
class Key:

	"""
	A tonic pitch class with a scale and mode.

	Attributes:
		tonic: Tonic pitch class (0 = C, ... 11 = B).
		scale: One of :data:`tessitura.intervals.SCALE_INTERVALS`.
		mode: A church mode name; rotates the scale so the tonic sits on that
			degree (``"aeolian"`` of ``"major"`` is the natural minor).

	Example:
		```python
		key = Key(tonic=0)                               # C major
		key = Key(tonic=9, scale="major", mode="aeolian")  # A minor
		```
	"""

	tonic: int
	scale: str = "major"
	mode: str = "ionian"

	def __post_init__ (self) -> None:
		if not 0 <= self.tonic < 12:
			raise ValueError(f"Tonic must be a pitch class 0-11, got {self.tonic}")
		tessitura.intervals.get_scale(self.scale)
		tessitura.intervals.mode_index(self.mode)

	@classmethod
	def from_name (cls, key_name: str, scale: str = "major", mode: str = "ionian") -> "Key":

		"""
		Build a key from a note name such as ``"F#"``.
		"""

		return cls(tonic=tessitura.chords.key_name_to_pc(key_name), scale=scale, mode=mode)


	def root (self) -> int:

		"""
		Return the tonic pitch class.
		"""

		return self.tonic


	def intervals (self) -> typing.List[int]:

		"""
		Return the semitone offsets of each scale degree from the tonic.
		"""

		scale = tessitura.intervals.get_scale(self.scale)

		return tessitura.intervals.rotate_intervals(scale, tessitura.intervals.mode_index(self.mode))


	def pitch_classes (self) -> typing.List[int]:

		"""
		Return the key's pitch classes in scale-degree order.
		"""

		return [(self.tonic + interval) % 12 for interval in self.intervals()]


	def contains (self, pitch: int) -> bool:

		"""
		Return True if a MIDI pitch (or pitch class) belongs to the key.
		"""

		return pitch % 12 in self.pitch_classes()


	def triads (self) -> typing.List[tessitura.chords.Chord]:

		"""Return one triad per scale degree, stacked in thirds within the scale.

		Example:
			```python
			[c.name() for c in Key(tonic=0).triads()]
			# → ['C', 'Dm', 'Em', 'F', 'G', 'Am', 'Bdim']
			```
		"""

		pcs = self.pitch_classes()
		count = len(pcs)
		chords: typing.List[tessitura.chords.Chord] = []

		for degree in range(count):
			root_pc = pcs[degree]
			stack = [
				tessitura.intervals.interval_up(root_pc, pcs[(degree + offset) % count])
				for offset in (0, 2, 4)
			]
			quality = tessitura.chords.quality_from_intervals(stack)
			chords.append(tessitura.chords.Chord(root_pc=root_pc, quality=quality))

		return chords


	def degree_of (self, chord: tessitura.chords.Chord) -> typing.Optional[int]:

		"""
		Return the zero-based scale degree of a chord's root, or None if out of key.
		"""

		pcs = self.pitch_classes()

		if chord.root_pc not in pcs:
			return None

		return pcs.index(chord.root_pc)


	def roman (self, chord: tessitura.chords.Chord) -> str:

		"""
		Return an upper-case roman numeral for a chord's degree (``"?"`` if out of key).
		"""

		degree = self.degree_of(chord)

		if degree is None:
			return "?"

		return ROMAN_NUMERALS[degree]


	def notes_in_range (self, low: int, high: int) -> typing.List[int]:

		"""
		Return all in-key MIDI pitches within ``[low, high]`` (inclusive).
		"""

		pcs = set(self.pitch_classes())

		return [p for p in range(low, high + 1) if p % 12 in pcs]


	def name (self) -> str:

		"""
		Return a readable key name, e.g. ``"A natural_minor (ionian)"``.
		"""

		return f"{tessitura.chords.PC_TO_NOTE_NAME[self.tonic]} {self.scale} ({self.mode})"
