"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127). The bands below are inclusive
ranges that the generation models draw uniformly from.
"""

# Melodic parts: the primary line sits in a tight, strong band;
# secondary lines roam a looser, softer one.
PRIMARY_VELOCITY_BAND = (90, 105)
SECONDARY_VELOCITY_BAND = (70, 100)

# Percussion hits
DRUM_VELOCITY_BAND = (90, 109)

# MIDI standard range
MIN_VELOCITY = 0
MAX_VELOCITY = 127
