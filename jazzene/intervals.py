"""Scale definitions and chord-scale tone palettes.

Each chord quality maps to the scale a jazz soloist would normally play over
it (``CHORD_SCALES``). :func:`chord_palette` splits the twelve pitch classes
into the three tiers the improviser draws from: chord tones, remaining scale
tones, and chromatic neighbours of the chord tones.
"""

import dataclasses
import typing


INTERVAL_DEFINITIONS: typing.Dict[str, typing.List[int]] = {
	"altered": [0, 1, 3, 4, 6, 8, 10],
	"aeolian_mode": [0, 2, 3, 5, 7, 8, 10],
	"diminished_half_whole": [0, 1, 3, 4, 6, 7, 9, 10],
	"diminished_whole_half": [0, 2, 3, 5, 6, 8, 9, 11],
	"dorian_mode": [0, 2, 3, 5, 7, 9, 10],
	"locrian_mode": [0, 1, 3, 5, 6, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"lydian_dominant": [0, 2, 4, 6, 7, 9, 10],
	"major_ionian": [0, 2, 4, 5, 7, 9, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"whole_tone": [0, 2, 4, 6, 8, 10],
}


# Map mode names to scale interval keys for key handling.
DIATONIC_MODE_MAP: typing.Dict[str, str] = {
	"ionian": "major_ionian",
	"major": "major_ionian",
	"dorian": "dorian_mode",
	"lydian": "lydian",
	"mixolydian": "mixolydian",
	"aeolian": "aeolian_mode",
	"minor": "aeolian_mode",
	"locrian": "locrian_mode",
}


# Chord quality -> chord scale.
CHORD_SCALES: typing.Dict[str, str] = {
	"major": "major_ionian",
	"major_6th": "major_ionian",
	"major_7th": "major_ionian",
	"minor": "dorian_mode",
	"minor_6th": "dorian_mode",
	"minor_7th": "dorian_mode",
	"minor_major_7th": "melodic_minor",
	"dominant_7th": "mixolydian",
	"dominant_7th_sus4": "mixolydian",
	"sus2": "mixolydian",
	"sus4": "mixolydian",
	"half_diminished_7th": "locrian_mode",
	"diminished": "diminished_whole_half",
	"diminished_7th": "diminished_whole_half",
	"augmented": "whole_tone",
}


def get_intervals (name: str) -> typing.List[int]:

	"""
	Return a named interval list from the registry.
	"""

	if name not in INTERVAL_DEFINITIONS:
		raise ValueError(f"Unknown interval set: {name}")

	return list(INTERVAL_DEFINITIONS[name])


def scale_pitch_classes (key_pc: int, mode: str = "ionian") -> typing.List[int]:

	"""
	Return the pitch classes (0–11) that belong to a key and mode.

	Parameters:
		key_pc: Root pitch class (0 = C, 1 = C#/Db, …, 11 = B).
		mode: Scale mode name. Supports all keys of ``DIATONIC_MODE_MAP``
		      (e.g. ``"ionian"``, ``"dorian"``, ``"minor"``).

	Returns:
		List of pitch classes in scale order, starting from the tonic.

	Example:
		```python
		# C major pitch classes
		scale_pitch_classes(0, "ionian")  # → [0, 2, 4, 5, 7, 9, 11]

		# A minor pitch classes
		scale_pitch_classes(9, "aeolian")  # → [9, 11, 0, 2, 4, 5, 7] (mod-12)
		```
	"""

	if mode not in DIATONIC_MODE_MAP:
		raise ValueError(f"Unknown mode '{mode}'. Available: {sorted(DIATONIC_MODE_MAP)}")

	intervals = get_intervals(DIATONIC_MODE_MAP[mode])
	return [(key_pc + i) % 12 for i in intervals]


@dataclasses.dataclass(frozen=True)
class Palette:

	"""Pitch classes available over one chord, split by tier.

	The three tiers are disjoint: a pitch class is a chord tone, a scale
	tone, or a neighbour, never more than one.
	"""

	chord_tones: typing.FrozenSet[int]
	scale_tones: typing.FrozenSet[int]
	neighbor_tones: typing.FrozenSet[int]


	def tier (self, pc: int) -> typing.Optional[str]:

		"""Return ``"chord"``, ``"scale"``, ``"neighbor"`` or ``None`` for a pitch class."""

		pc %= 12

		if pc in self.chord_tones:
			return "chord"
		if pc in self.scale_tones:
			return "scale"
		if pc in self.neighbor_tones:
			return "neighbor"
		return None


def chord_palette (chord: typing.Any) -> Palette:

	"""Build the tone palette for a chord.

	Chord tones are the chord's own pitch classes (tensions included). Scale
	tones are the rest of the chord scale from ``CHORD_SCALES``. Neighbour
	tones are chromatic pitch classes one semitone above or below a chord
	tone that belong to neither of the other tiers.

	Parameters:
		chord: A :class:`jazzene.chords.Chord`.

	Example:
		```python
		palette = chord_palette(Chord(root_pc=2, quality="minor_7th"))  # Dm7
		sorted(palette.chord_tones)     # → [0, 2, 5, 9]
		sorted(palette.scale_tones)     # → [4, 7, 11]   (D dorian remainder)
		sorted(palette.neighbor_tones)  # → [1, 3, 6, 8, 10]
		```
	"""

	chord_pcs = frozenset(chord.pitch_classes())

	scale_intervals = get_intervals(chord.scale_name())
	scale_pcs = frozenset((chord.root_pc + i) % 12 for i in scale_intervals) - chord_pcs

	neighbors: typing.Set[int] = set()

	for pc in chord_pcs:
		neighbors.add((pc + 1) % 12)
		neighbors.add((pc - 1) % 12)

	neighbor_pcs = frozenset(neighbors) - chord_pcs - scale_pcs

	return Palette(chord_tones=chord_pcs, scale_tones=scale_pcs, neighbor_tones=neighbor_pcs)
