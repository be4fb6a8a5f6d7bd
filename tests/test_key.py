import unittest

import tessitura.chords
import tessitura.key


class KeyTests (unittest.TestCase):

	"""
	Tests for key membership and scale-degree chords.
	"""

	def test_c_major_triads (self) -> None:

		"""
		C major should yield the seven diatonic triads in degree order.
		"""

		names = [chord.name() for chord in tessitura.key.Key(tonic=0).triads()]

		self.assertEqual(names, ["C", "Dm", "Em", "F", "G", "Am", "Bdim"])


	def test_mode_rotation (self) -> None:

		"""
		D dorian should share C major's pitch classes, starting on D.
		"""

		key = tessitura.key.Key(tonic=2, mode="dorian")

		self.assertEqual(key.pitch_classes(), [2, 4, 5, 7, 9, 11, 0])
		self.assertEqual(key.triads()[0].name(), "Dm")


	def test_harmonic_minor_triads (self) -> None:

		"""
		A harmonic minor should contain an augmented third degree and a major fifth degree.
		"""

		key = tessitura.key.Key(tonic=9, scale="harmonic_minor")
		names = [chord.name() for chord in key.triads()]

		self.assertEqual(names, ["Am", "Bdim", "C+", "Dm", "E", "F", "G#dim"])


	def test_triads_stay_in_key (self) -> None:

		for scale in ("major", "natural_minor", "harmonic_minor", "melodic_minor"):
			for mode in ("ionian", "phrygian", "locrian"):
				key = tessitura.key.Key(tonic=5, scale=scale, mode=mode)
				for chord in key.triads():
					self.assertTrue(set(chord.pitch_classes()) <= set(key.pitch_classes()))


	def test_notes_in_range_inclusive (self) -> None:

		key = tessitura.key.Key(tonic=0)

		self.assertEqual(key.notes_in_range(60, 72), [60, 62, 64, 65, 67, 69, 71, 72])
		self.assertEqual(key.notes_in_range(61, 61), [])


	def test_degree_and_roman (self) -> None:

		key = tessitura.key.Key(tonic=0)

		self.assertEqual(key.roman(tessitura.chords.Chord(root_pc=7, quality="major")), "V")
		self.assertEqual(key.degree_of(tessitura.chords.Chord(root_pc=9, quality="minor")), 5)
		self.assertIsNone(key.degree_of(tessitura.chords.Chord(root_pc=1, quality="major")))
		self.assertEqual(key.roman(tessitura.chords.Chord(root_pc=1, quality="major")), "?")


	def test_from_name (self) -> None:

		key = tessitura.key.Key.from_name("Bb", scale="natural_minor")

		self.assertEqual(key.root(), 10)
		self.assertEqual(key.name(), "A# natural_minor (ionian)")


	def test_invalid_keys_raise (self) -> None:

		with self.assertRaises(ValueError):
			tessitura.key.Key(tonic=12)

		with self.assertRaises(ValueError):
			tessitura.key.Key(tonic=0, scale="blues")

		with self.assertRaises(ValueError):
			tessitura.key.Key(tonic=0, mode="hypodorian")
