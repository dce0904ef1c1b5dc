"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127). Every generated note carries an
emphasis tag; these constants map the tag to a velocity.
"""

ACCENT_VELOCITY = 104       # Downbeats, phrase targets
NORMAL_VELOCITY = 88        # Most notes
GHOST_VELOCITY = 62         # Swung upbeats and pickup notes

EMPHASIS_VELOCITY = {
	"accent": ACCENT_VELOCITY,
	"normal": NORMAL_VELOCITY,
	"ghost": GHOST_VELOCITY,
}

# MIDI standard range
MIN_VELOCITY = 0
MAX_VELOCITY = 127
