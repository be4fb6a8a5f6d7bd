"""General MIDI Level 1 program numbers (0-indexed) grouped by family.

Each family is a ``range`` of eight programs. Individual constants are only
defined for the programs the orchestration pools exclude by name.
"""

PIANO = range(0, 8)
CHROMATIC_PERCUSSION = range(8, 16)
ORGAN = range(16, 24)
GUITAR = range(24, 32)
BASS = range(32, 40)
STRINGS = range(40, 48)
ENSEMBLE = range(48, 56)
BRASS = range(56, 64)
REED = range(64, 72)
PIPE = range(72, 80)
SYNTH_LEAD = range(80, 88)
SYNTH_PAD = range(88, 96)

HARMONICA = 22
TANGO_ACCORDION = 23
SLAP_BASS_1 = 36
SLAP_BASS_2 = 37
LEAD_FIFTHS = 86
PAD_WARM = 89
PAD_BOWED = 92
PAD_METALLIC = 93
PAD_SWEEP = 95

# GS-style drum kit program numbers, sent on the drum channel.
DRUM_KITS = list(range(0, 20)) + list(range(24, 31)) + list(range(32, 37)) + list(range(40, 43))
