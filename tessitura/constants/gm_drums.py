"""General MIDI Level 1 drum notes used by the percussion model.

Standard MIDI percussion assignments for channel 10 (0-indexed channel 9).
Only the kit pieces the percussion model draws from are listed; the names
follow the GM specification with underscores for readability.
"""

DRUM_CHANNEL = 9


# ─── Individual note constants ───────────────────────────────────────

KICK_2 = 35            # Acoustic Bass Drum
SNARE_1 = 38           # Acoustic Snare
HI_HAT_CLOSED = 42
HI_HAT_PEDAL = 44

