"""Beat-based duration constants for rhythm templates and note timing.

All values are in **beats** of the time signature, expressed as exact
``fractions.Fraction`` values so that triplet and swing subdivisions sum back to
whole beats without floating point drift::

    import jazzene.constants.durations as dur

    # Two swung eighths fill one beat exactly
    assert dur.SWING_LONG + dur.SWING_SHORT == dur.QUARTER

Multiply by a count for multi-note durations::

    length = 3 * dur.TRIPLET_EIGHTH     # 1 beat
"""

import fractions


SIXTEENTH = fractions.Fraction(1, 4)
TRIPLET_EIGHTH = fractions.Fraction(1, 3)
EIGHTH = fractions.Fraction(1, 2)
TRIPLET_QUARTER = fractions.Fraction(2, 3)
DOTTED_EIGHTH = fractions.Fraction(3, 4)
QUARTER = fractions.Fraction(1)
DOTTED_QUARTER = fractions.Fraction(3, 2)
HALF = fractions.Fraction(2)
DOTTED_HALF = fractions.Fraction(3)
WHOLE = fractions.Fraction(4)

# Swung eighth pair at the classic 2:1 triplet feel.
SWING_LONG = TRIPLET_QUARTER
SWING_SHORT = TRIPLET_EIGHTH
