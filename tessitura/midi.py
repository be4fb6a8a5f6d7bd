"""Lowering a composition to a Standard MIDI File.

Each distinct :class:`~tessitura.orchestration.Part` becomes one track with
its own channel (drums always on channel 10, i.e. index 9). A leading
conductor track carries tempo and time signature meta messages.
"""

import logging
import typing

import mido

import tessitura.composer
import tessitura.constants.gm_drums
import tessitura.constants.pulses
import tessitura.engine
import tessitura.melody
import tessitura.orchestration
import tessitura.percussion
import tessitura.timing


logger = logging.getLogger(__name__)


DEFAULT_TICKS_PER_BEAT = 480

MELODIC_CHANNELS = [c for c in range(16) if c != tessitura.constants.gm_drums.DRUM_CHANNEL]


def _first_element (composition: tessitura.engine.Composition, element_type: type) -> typing.Any:

	nodes = composition.elements(element_type)

	return nodes[0].element if nodes else None


def _to_track (events: typing.List[typing.Tuple[int, int, mido.Message]], name: str) -> mido.MidiTrack:

	"""Convert ``(tick, order, message)`` events with absolute ticks into a delta-timed track."""

	track = mido.MidiTrack()
	track.append(mido.MetaMessage('track_name', name=name, time=0))

	last_tick = 0

	for tick, _, message in sorted(events, key=lambda e: (e[0], e[1])):
		track.append(message.copy(time=max(0, tick - last_tick)))
		last_tick = tick

	track.append(mido.MetaMessage('end_of_track', time=0))

	return track


def to_midi_file (
	composition: tessitura.engine.Composition,
	ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT
) -> mido.MidiFile:

	"""Build a type 1 ``mido.MidiFile`` from a composed song.

	Parameters:
		composition: The resolved composition.
		ticks_per_beat: Output resolution; must be a multiple of the
			composition's beat length in pulses.
	"""

	ts = _first_element(composition, tessitura.timing.TimeSignature)
	beat_length = ts.beat_length if ts else tessitura.constants.pulses.MIDI_QUARTER_NOTE

	if ticks_per_beat % beat_length != 0:
		raise ValueError(f"ticks_per_beat ({ticks_per_beat}) must be a multiple of the beat length ({beat_length})")

	ticks_per_pulse = ticks_per_beat // beat_length

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = ticks_per_beat

	# Conductor track.
	conductor: typing.List[typing.Tuple[int, int, mido.Message]] = []
	tempo = _first_element(composition, tessitura.composer.Tempo)

	if tempo:
		conductor.append((0, 0, mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(tempo.bpm))))

	if ts:
		conductor.append((0, 1, mido.MetaMessage('time_signature', numerator=ts.beats_per_bar, denominator=4)))

	mid.tracks.append(_to_track(conductor, "tessitura"))

	# Collect sounding elements per part, in order of first appearance.
	tree = composition.tree
	by_part: typing.Dict[tessitura.orchestration.Part, typing.List[typing.Tuple[int, int, int, int]]] = {}

	sounding = composition.elements(tessitura.melody.PlayNote) + composition.elements(tessitura.percussion.DrumHit)

	for node in sorted(sounding, key=lambda n: (n.span.start, n.index)):

		part_node = tree.nearest_ancestor(node, tessitura.orchestration.Part)

		if part_node is None:
			continue

		note = node.element.pitch if isinstance(node.element, tessitura.melody.PlayNote) else node.element.note
		by_part.setdefault(part_node.element, []).append((node.span.start, node.span.end, note, node.element.velocity))

	melodic_channels = iter(MELODIC_CHANNELS)

	for part, notes in by_part.items():

		if part.is_percussion:
			channel = tessitura.constants.gm_drums.DRUM_CHANNEL

		else:
			channel = next(melodic_channels, None)

			if channel is None:
				logger.warning(f"Out of MIDI channels, dropping {part.role.value} part (program {part.program})")
				continue

		events: typing.List[typing.Tuple[int, int, mido.Message]] = [
			(0, 0, mido.Message('program_change', channel=channel, program=part.program))
		]

		for start, end, note, velocity in notes:
			# Note-offs sort ahead of note-ons on the same tick.
			events.append((end * ticks_per_pulse, 1, mido.Message('note_off', channel=channel, note=note, velocity=0)))
			events.append((start * ticks_per_pulse, 2, mido.Message('note_on', channel=channel, note=note, velocity=velocity)))

		mid.tracks.append(_to_track(events, f"{part.role.value} {part.program}"))

	logger.debug(f"MIDI file: {len(mid.tracks)} tracks, {ticks_per_beat} ticks per beat")

	return mid


def save_midi (composition: tessitura.engine.Composition, filename: str, ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT) -> mido.MidiFile:

	"""
	Lower a composition and write it to ``filename``.
	"""

	mid = to_midi_file(composition, ticks_per_beat)

	logger.info(f"Saving MIDI file to {filename}...")

	mid.save(filename)

	logger.info(f"Saved {filename}")

	return mid
