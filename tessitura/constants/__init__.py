"""Constants for tessitura.

This package contains four sets of constants:

- ``tessitura.constants.pulses`` - Pulse-based timing (the render tree's time base)
- ``tessitura.constants.velocity`` - Velocity bands drawn from by the models
- ``tessitura.constants.gm_drums`` - General MIDI drum notes
- ``tessitura.constants.gm_instruments`` - General MIDI program families
"""
