"""Register constants for the improvising voice.

Pitches are MIDI note numbers, C4 = 60 (Middle C).
"""

# A tenor/trumpet-like solo register: F3 up to C6.
SOLO_LOW = 53
SOLO_HIGH = 84

# Starting point for the first note of a solo (G4).
SOLO_START = 67

# Voice-leading bound: the largest interval, in semitones, between two consecutive notes.
MAX_LEAP = 9
