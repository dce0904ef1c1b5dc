"""Chord definitions, key handling, and pitch class utilities.

This module provides chord quality definitions, pitch class mappings, the `Chord` class
for representing jazz chord symbols, and the `Key` class used to resolve scale-degree
(roman numeral) chords.

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps note names (e.g., `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to note names (flat spelling, as on a lead sheet)
- `CHORD_INTERVALS`: Maps chord quality names to interval lists (semitones from root)
- `CHORD_SUFFIX`: Maps chord quality names to lead-sheet suffixes (e.g., `"m7"`, `"maj7"`)
- `EXTENSION_INTERVALS`: Maps tension names (`"9"`, `"b9"`, `"#11"`, ...) to semitones

Module-level helpers:
- `key_name_to_pc(key_name)`: Validate a note name and return its pitch class (0-11).
- `parse_suffix(suffix)`: Split a chord suffix into a quality and extension tuple.
- `parse_key(text)`: Parse a key name such as `"Bb"` or `"Am"` into a `Key`.

Chord qualities: `"major"`, `"minor"`, `"diminished"`, `"augmented"`, `"dominant_7th"`,
`"major_7th"`, `"minor_7th"`, `"half_diminished_7th"`, `"diminished_7th"`,
`"minor_major_7th"`, `"major_6th"`, `"minor_6th"`, `"sus2"`, `"sus4"`, `"dominant_7th_sus4"`
"""

import dataclasses
import re
import typing

import jazzene.intervals


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"Fb": 4,
	"E#": 5,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
	"Cb": 11,
	"B#": 0,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"Db",
	"D",
	"Eb",
	"E",
	"F",
	"F#",
	"G",
	"Ab",
	"A",
	"Bb",
	"B",
]


def normalize_accidentals (text: str) -> str:

	"""Replace Unicode accidentals with their ASCII spellings (``♭`` -> ``b``, ``♯`` -> ``#``)."""

	return text.replace("♭", "b").replace("♯", "#")


def key_name_to_pc (key_name: str) -> int:

	"""Validate a note name and return its pitch class (0–11).

	Parameters:
		key_name: Note name (e.g. ``"C"``, ``"F#"``, ``"Bb"``).

	Returns:
		Pitch class integer (0–11).

	Raises:
		ValueError: If the note name is not recognised.

	Example:
		```python
		key_name_to_pc("C")   # → 0
		key_name_to_pc("F#")  # → 6
		key_name_to_pc("Bb")  # → 10
		```
	"""

	name = normalize_accidentals(key_name)

	if name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown note name: {key_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[name]


CHORD_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"major": [0, 4, 7],
	"minor": [0, 3, 7],
	"diminished": [0, 3, 6],
	"augmented": [0, 4, 8],
	"dominant_7th": [0, 4, 7, 10],
	"major_7th": [0, 4, 7, 11],
	"minor_7th": [0, 3, 7, 10],
	"half_diminished_7th": [0, 3, 6, 10],
	"diminished_7th": [0, 3, 6, 9],
	"minor_major_7th": [0, 3, 7, 11],
	"major_6th": [0, 4, 7, 9],
	"minor_6th": [0, 3, 7, 9],
	"sus2": [0, 2, 7],
	"sus4": [0, 5, 7],
	"dominant_7th_sus4": [0, 5, 7, 10],
}

CHORD_SUFFIX: typing.Dict[str, str] = {
	"major": "",
	"minor": "m",
	"diminished": "dim",
	"augmented": "+",
	"dominant_7th": "7",
	"major_7th": "maj7",
	"minor_7th": "m7",
	"half_diminished_7th": "m7b5",
	"diminished_7th": "dim7",
	"minor_major_7th": "mMaj7",
	"major_6th": "6",
	"minor_6th": "m6",
	"sus2": "sus2",
	"sus4": "sus4",
	"dominant_7th_sus4": "7sus4",
}

EXTENSION_INTERVALS: typing.Dict[str, int] = {
	"b9": 13,
	"9": 14,
	"#9": 15,
	"11": 17,
	"#11": 18,
	"b13": 20,
	"13": 21,
}


# Suffix spellings accepted on input: alias -> (quality, implied extensions).
# Matched longest first, so "m7b5" wins over "m7" and "maj7" over "m".
_QUALITY_ALIASES: typing.Dict[str, typing.Tuple[str, typing.Tuple[str, ...]]] = {
	"": ("major", ()),
	"maj": ("major", ()),
	"M": ("major", ()),
	"m": ("minor", ()),
	"-": ("minor", ()),
	"mi": ("minor", ()),
	"min": ("minor", ()),
	"dim": ("diminished", ()),
	"o": ("diminished", ()),
	"°": ("diminished", ()),
	"aug": ("augmented", ()),
	"+": ("augmented", ()),
	"7": ("dominant_7th", ()),
	"9": ("dominant_7th", ("9",)),
	"11": ("dominant_7th", ("11",)),
	"13": ("dominant_7th", ("13",)),
	"7alt": ("dominant_7th", ("b9", "#9", "b13")),
	"maj7": ("major_7th", ()),
	"ma7": ("major_7th", ()),
	"M7": ("major_7th", ()),
	"Δ7": ("major_7th", ()),
	"Δ": ("major_7th", ()),
	"maj9": ("major_7th", ("9",)),
	"M9": ("major_7th", ("9",)),
	"Δ9": ("major_7th", ("9",)),
	"m7": ("minor_7th", ()),
	"-7": ("minor_7th", ()),
	"mi7": ("minor_7th", ()),
	"min7": ("minor_7th", ()),
	"m9": ("minor_7th", ("9",)),
	"-9": ("minor_7th", ("9",)),
	"min9": ("minor_7th", ("9",)),
	"m11": ("minor_7th", ("11",)),
	"-11": ("minor_7th", ("11",)),
	"m7b5": ("half_diminished_7th", ()),
	"-7b5": ("half_diminished_7th", ()),
	"min7b5": ("half_diminished_7th", ()),
	"ø": ("half_diminished_7th", ()),
	"ø7": ("half_diminished_7th", ()),
	"dim7": ("diminished_7th", ()),
	"o7": ("diminished_7th", ()),
	"°7": ("diminished_7th", ()),
	"mMaj7": ("minor_major_7th", ()),
	"mM7": ("minor_major_7th", ()),
	"m(maj7)": ("minor_major_7th", ()),
	"-Δ7": ("minor_major_7th", ()),
	"6": ("major_6th", ()),
	"m6": ("minor_6th", ()),
	"-6": ("minor_6th", ()),
	"min6": ("minor_6th", ()),
	"sus2": ("sus2", ()),
	"sus4": ("sus4", ()),
	"sus": ("sus4", ()),
	"7sus4": ("dominant_7th_sus4", ()),
	"7sus": ("dominant_7th_sus4", ()),
}

_ALIASES_LONGEST_FIRST: typing.List[str] = sorted(_QUALITY_ALIASES, key=len, reverse=True)

_EXTENSION_PATTERN = re.compile(r"[b#]?(?:13|11|9)")
_EXTENSION_RUN_PATTERN = re.compile(r"(?:[(),]|[b#]?(?:13|11|9))*")


def parse_suffix (suffix: str) -> typing.Optional[typing.Tuple[str, typing.Tuple[str, ...]]]:

	"""Split a chord suffix into a quality name and a tuple of extensions.

	The suffix is everything after the root (``"m7"`` in ``"Cm7"``). Trailing
	tensions such as ``"b9"``, ``"#11"`` or ``"(13)"`` are collected as
	extensions, in order of appearance and without duplicates.

	Parameters:
		suffix: Chord suffix text, accidentals already normalised.

	Returns:
		``(quality, extensions)``, or ``None`` when the suffix is not recognised.

	Example:
		```python
		parse_suffix("m7")      # → ("minor_7th", ())
		parse_suffix("7b9")     # → ("dominant_7th", ("b9",))
		parse_suffix("maj9#11") # → ("major_7th", ("9", "#11"))
		parse_suffix("q")       # → None
		```
	"""

	for alias in _ALIASES_LONGEST_FIRST:

		if not suffix.startswith(alias):
			continue

		remainder = suffix[len(alias):]

		if not _EXTENSION_RUN_PATTERN.fullmatch(remainder):
			continue

		quality, implied = _QUALITY_ALIASES[alias]
		extensions: typing.List[str] = list(implied)

		for extension in _EXTENSION_PATTERN.findall(remainder):
			if extension not in extensions:
				extensions.append(extension)

		return quality, tuple(extensions)

	return None


@dataclasses.dataclass(frozen=True)
class Chord:

	"""
	Represents a chord symbol as a root pitch class, quality, and optional tensions.
	"""

	root_pc: int
	quality: str
	extensions: typing.Tuple[str, ...] = ()
	bass_pc: typing.Optional[int] = None


	def intervals (self) -> typing.List[int]:

		"""
		Return the chord intervals for this chord quality, tensions included.
		"""

		if self.quality not in CHORD_INTERVALS:
			raise ValueError(f"Unknown chord quality: {self.quality}")

		intervals = list(CHORD_INTERVALS[self.quality])

		for extension in self.extensions:
			intervals.append(EXTENSION_INTERVALS[extension])

		return intervals


	def pitch_classes (self) -> typing.List[int]:

		"""Return the distinct pitch classes sounded by the chord, root first."""

		pcs: typing.List[int] = []

		for interval in self.intervals():
			pc = (self.root_pc + interval) % 12
			if pc not in pcs:
				pcs.append(pc)

		return pcs


	def tones (self, root: int) -> typing.List[int]:

		"""Return MIDI note numbers for chord tones starting from a root.

		Finds the MIDI note corresponding to the chord's root pitch class that is
		closest to the provided ``root`` argument.

		Parameters:
			root: MIDI note number (e.g., 60 = middle C) to center the chord around.

		Returns:
			List of MIDI note numbers for chord tones

		Example:
			```python
			chord = Chord(root_pc=0, quality="major_7th")  # Cmaj7
			chord.tones(root=60)               # [60, 64, 67, 71]
			chord.tones(root=70)               # [72, 76, 79, 83] - finds C5 as closest root
			```
		"""

		offset = (self.root_pc - root) % 12
		if offset > 6:
			offset -= 12

		effective_root = root + offset

		return [effective_root + interval for interval in self.intervals()]


	def scale_name (self) -> str:

		"""Return the chord-scale used to improvise over this chord (e.g. ``"dorian_mode"`` for m7)."""

		return jazzene.intervals.CHORD_SCALES.get(self.quality, "major_ionian")


	def name (self) -> str:

		"""
		Return a lead-sheet chord symbol, e.g. ``"Bbmaj7"`` or ``"G7b9/B"``.
		"""

		root_name = PC_TO_NOTE_NAME[self.root_pc % 12]
		suffix = CHORD_SUFFIX.get(self.quality, "")
		tensions = "".join(self.extensions)

		# "7" + "9" reads better as "9" on a chart.
		if self.quality == "dominant_7th" and self.extensions in (("9",), ("13",)):
			suffix, tensions = tensions, ""

		symbol = f"{root_name}{suffix}{tensions}"

		if self.bass_pc is not None:
			symbol += f"/{PC_TO_NOTE_NAME[self.bass_pc % 12]}"

		return symbol


@dataclasses.dataclass(frozen=True)
class Key:

	"""
	A tonal center: tonic pitch class plus a mode (``"ionian"`` or ``"aeolian"``).
	"""

	tonic_pc: int
	mode: str = "ionian"


	def scale_pcs (self) -> typing.List[int]:

		"""Return the seven pitch classes of the key, tonic first."""

		return jazzene.intervals.scale_pitch_classes(self.tonic_pc, self.mode)


	def degree_pc (self, degree: int, accidental: int = 0) -> int:

		"""Return the pitch class of a scale degree (0 = I, 6 = VII), shifted by an accidental.

		Parameters:
			degree: Zero-based scale degree.
			accidental: Semitone shift, ``-1`` for a flat numeral (``bVII``), ``+1`` for sharp.
		"""

		return (self.scale_pcs()[degree % 7] + accidental) % 12


	def name (self) -> str:

		"""Return the key name, e.g. ``"Bb"`` or ``"Cm"``."""

		suffix = "m" if self.mode == "aeolian" else ""
		return f"{PC_TO_NOTE_NAME[self.tonic_pc]}{suffix}"


_KEY_PATTERN = re.compile(r"^([A-Ga-g])([#b]?)\s*(m|min|minor|-|maj|major|M)?$")


def parse_key (text: str) -> Key:

	"""Parse a key name into a `Key`.

	Parameters:
		text: Key name such as ``"C"``, ``"Bb"``, ``"F#"``, ``"Am"`` or ``"Eb minor"``.

	Returns:
		The parsed ``Key``.

	Raises:
		ValueError: If the text is not a recognisable key name.

	Example:
		```python
		parse_key("Bb")   # → Key(tonic_pc=10, mode="ionian")
		parse_key("Cm")   # → Key(tonic_pc=0, mode="aeolian")
		```
	"""

	match = _KEY_PATTERN.match(normalize_accidentals(text.strip()))

	if match is None:
		raise ValueError(f"Unknown key: {text!r}. Expected e.g. 'C', 'Bb', 'F#m'.")

	letter, accidental, mode_text = match.groups()
	tonic_pc = key_name_to_pc(letter.upper() + accidental)
	mode = "aeolian" if mode_text in ("m", "min", "minor", "-") else "ionian"

	return Key(tonic_pc=tonic_pc, mode=mode)
