
"""
Tessitura - seeded procedural song generation for Python.

Tessitura composes complete multi-part songs from a single integer seed.
Every musical decision (the key, the chord progression of each section,
which parts play when, every melody note and drum hit) is a weighted random
choice, and every choice draws from a random generator derived from the
seed and its position in the song. The same seed always produces the same
song, and any part of it can be regenerated on its own.

How a song is built:

- **A render tree.** The song is a tree of elements placed over time spans.
  Each element type has registered renderers that turn it into child
  elements. Renderers read what they need (the key, the time signature,
  the current chord) through context queries, and when something is not
  there yet they raise ``MissingContext`` and are retried on a later pass.
- **Chords.** Progressions are a weighted walk over the key's triads,
  favouring smooth voice leading and consonance with the key, and cut at
  the point that loops back most strongly to the opening chord.
- **Arrangement.** Sawtooth ramps over each section stagger the entrances
  of the melodic parts.
- **Melody.** Each note is sampled from heuristic scores: chord tones,
  a wave-shaped contour, anticipation of the next chord, smooth leaps and
  avoidance of clashes with other parts.
- **Percussion.** One pattern per phrase length, with a seed-derived
  downbeat on every phrase.
- **Output.** Songs lower to a standard MIDI file via ``mido``.

Minimal example:

    ```python
    import tessitura

    composer = tessitura.Composer()
    composition = composer.compose(beats=256, seed=42)
    tessitura.save_midi(composition, "song.mid")
    ```

Command line: ``python -m tessitura`` reads ``tessitura.yaml`` (if present)
and writes the configured MIDI file.

Package-level exports: ``Composer``, ``GenerationConfig``, ``MissingContext``, ``save_midi``.
"""

import tessitura.composer
import tessitura.config
import tessitura.errors
import tessitura.midi


Composer = tessitura.composer.Composer
GenerationConfig = tessitura.config.GenerationConfig
MissingContext = tessitura.errors.MissingContext
save_midi = tessitura.midi.save_midi
