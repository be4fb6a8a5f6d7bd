"""Pulse-based timing constants.

All spans in the render tree are measured in **pulses**. One beat is a
quarter note of 24 pulses unless a time signature says otherwise.
"""

MIDI_QUARTER_NOTE = 24
