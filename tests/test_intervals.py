import unittest

import tessitura.chords
import tessitura.intervals


class IntervalTests (unittest.TestCase):

	"""
	Tests for scale lookup and pitch-class arithmetic.
	"""

	def test_get_scale (self) -> None:

		"""
		Scale lookup should return a copy of the known definition.
		"""

		scale = tessitura.intervals.get_scale("major")

		self.assertEqual(scale, [0, 2, 4, 5, 7, 9, 11])

		scale.append(12)
		self.assertEqual(len(tessitura.intervals.SCALE_INTERVALS["major"]), 7)


	def test_unknown_scale_raises (self) -> None:

		with self.assertRaises(ValueError):
			tessitura.intervals.get_scale("bebop")

		with self.assertRaises(ValueError):
			tessitura.intervals.mode_index("hypoionian")


	def test_rotate_major_to_dorian (self) -> None:

		"""
		Rotating the major scale by one degree should give dorian.
		"""

		rotated = tessitura.intervals.rotate_intervals([0, 2, 4, 5, 7, 9, 11], 1)

		self.assertEqual(rotated, [0, 2, 3, 5, 7, 9, 10])


	def test_interval_up_wraps (self) -> None:

		self.assertEqual(tessitura.intervals.interval_up(0, 7), 7)
		self.assertEqual(tessitura.intervals.interval_up(7, 0), 5)
		self.assertEqual(tessitura.intervals.interval_up(11, 2), 3)


	def test_pitch_class_distance_is_shortest_way_round (self) -> None:

		self.assertEqual(tessitura.intervals.pitch_class_distance(0, 11), 1)
		self.assertEqual(tessitura.intervals.pitch_class_distance(0, 6), 6)
		self.assertEqual(tessitura.intervals.pitch_class_distance(2, 9), 5)


	def test_nearest_distance (self) -> None:

		"""
		Distance to a set should be the minimum, and zero for an empty set.
		"""

		self.assertEqual(tessitura.intervals.nearest_distance(1, [0, 4, 7]), 1)
		self.assertEqual(tessitura.intervals.nearest_distance(5, [0, 4, 7]), 1)
		self.assertEqual(tessitura.intervals.nearest_distance(5, []), 0)


class ChordTests (unittest.TestCase):

	"""
	Tests for chord construction helpers.
	"""

	def test_pitch_classes_wrap (self) -> None:

		chord = tessitura.chords.Chord(root_pc=7, quality="major")

		self.assertEqual(chord.pitch_classes(), [7, 11, 2])
		self.assertTrue(chord.contains(74))
		self.assertFalse(chord.contains(72))


	def test_names (self) -> None:

		self.assertEqual(tessitura.chords.Chord(root_pc=9, quality="minor").name(), "Am")
		self.assertEqual(tessitura.chords.Chord(root_pc=11, quality="diminished").name(), "Bdim")
		self.assertEqual(tessitura.chords.Chord(root_pc=3, quality="augmented").name(), "D#+")


	def test_quality_from_intervals (self) -> None:

		self.assertEqual(tessitura.chords.quality_from_intervals([0, 3, 7]), "minor")

		with self.assertRaises(ValueError):
			tessitura.chords.quality_from_intervals([0, 5, 7])


	def test_key_name_to_pc (self) -> None:

		self.assertEqual(tessitura.chords.key_name_to_pc("F#"), 6)
		self.assertEqual(tessitura.chords.key_name_to_pc("Bb"), 10)

		with self.assertRaises(ValueError):
			tessitura.chords.key_name_to_pc("H")
