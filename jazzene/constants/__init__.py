"""Constants for Jazzene.

This package contains three sets of constants:

- ``jazzene.constants.durations`` - Beat-based durations (exact ``Fraction`` values) used by
  the rhythm templates
- ``jazzene.constants.velocity`` - MIDI velocity per emphasis tag
- ``jazzene.constants.register`` - Pitch register and voice-leading bounds for the soloist

MIDI file timing (ticks per beat) is defined at package level for the exporter.
"""

# Standard MIDI file resolution. Beat positions are exact fractions, so triplets and swung
# eighths land on whole ticks at this resolution (480 is divisible by 2, 3, 4, 5, 6, 8, 12, 16).
MIDI_TICKS_PER_BEAT = 480
