"""Chord progression parsing.

Turns lead-sheet text into a :class:`Progression` of absolute chords, each
pinned to a measure index. Two token forms are understood:

- Absolute symbols: ``Cm7``, ``Bbmaj7``, ``F#m7b5``, ``G7b9``, ``C7/E``.
- Scale degrees relative to the key: ``IIm7``, ``V7``, ``bVII7``, ``iii``.
  Numerals resolve against the key's own scale (so ``III`` is ``Eb`` in C
  minor). A lowercase numeral without a quality suffix is a minor triad.

``|`` separates bars and ``%`` repeats the previous chord. Tokens that fail
to parse are skipped and logged; they never abort the parse.

Example:
	```python
	import jazzene.chords
	import jazzene.progression

	key = jazzene.chords.parse_key("Bb")
	prog = jazzene.progression.parse_progression("| Cm7 F7 | Bbmaj7 |", key, measures=2)
	[entry.chord.name() for entry in prog.entries]   # → ["Cm7", "F7", "Bbmaj7"]
	[entry.measure for entry in prog.entries]        # → [0, 0, 1]
	```
"""

import dataclasses
import fractions
import logging
import re
import typing

import jazzene.chords


logger = logging.getLogger(__name__)


BAR_SEPARATOR = "|"
REPEAT_TOKEN = "%"

_ABSOLUTE_PATTERN = re.compile(r"^([A-G])([#b]?)(.*?)(?:/([A-G][#b]?))?$")
_ROMAN_PATTERN = re.compile(r"^([#b]?)(VII|VI|IV|V|III|II|I|vii|vi|iv|v|iii|ii|i)(.*?)(?:/([A-G][#b]?))?$")

_ROMAN_DEGREES: typing.Dict[str, int] = {
	"I": 0,
	"II": 1,
	"III": 2,
	"IV": 3,
	"V": 4,
	"VI": 5,
	"VII": 6,
}

_ACCIDENTAL_SHIFT: typing.Dict[str, int] = {"": 0, "b": -1, "#": 1}


@dataclasses.dataclass(frozen=True)
class ProgressionEntry:

	"""
	One chord of a progression and the measure it starts in.
	"""

	chord: jazzene.chords.Chord
	measure: int
	token: str = ""


@dataclasses.dataclass(frozen=True)
class ChordSpan:

	"""
	A chord sounding from ``start`` for ``duration`` beats (lead sheet timeline).
	"""

	chord: jazzene.chords.Chord
	start: fractions.Fraction
	duration: fractions.Fraction
	measure: int

	@property
	def end (self) -> fractions.Fraction:
		return self.start + self.duration


@dataclasses.dataclass(frozen=True)
class Progression:

	"""An ordered, measure-indexed chord progression.

	``has_bars`` records whether the source text used ``|`` separators. A
	barred progression has a fixed length of ``bar_count`` measures and
	repeats (chorus form) when more measures are requested; an unbarred one
	was already spread over the requested measure count at parse time.
	"""

	entries: typing.Tuple[ProgressionEntry, ...] = ()
	has_bars: bool = False
	bar_count: int = 0


	def __post_init__ (self) -> None:

		previous = 0

		for entry in self.entries:
			if entry.measure < previous:
				raise ValueError("Progression measure indices must be non-negative and non-decreasing")
			previous = entry.measure


	def __len__ (self) -> int:
		return len(self.entries)


	def is_empty (self) -> bool:
		return not self.entries


	def chords_in_measure (self, measure: int) -> typing.List[ProgressionEntry]:

		"""Return the entries that start in a measure, wrapping barred progressions."""

		if not self.entries:
			return []

		if self.has_bars and self.bar_count > 0:
			measure %= self.bar_count

		return [entry for entry in self.entries if entry.measure == measure]


	def chord_spans (self, measures: int, beats_per_measure: int) -> typing.List[ChordSpan]:

		"""Lay the progression out over ``measures`` measures.

		Chords that share a measure split it evenly. A chord lasts until the
		next chord starts, so an empty measure holds the previous chord. When
		the first measure has no chord (a barred progression starting with an
		empty bar), the last chord of the progression fills in.

		Parameters:
			measures: Number of measures to cover.
			beats_per_measure: Beats in each measure.

		Returns:
			Contiguous spans covering ``[0, measures * beats_per_measure)``.
		"""

		if not self.entries or measures <= 0 or beats_per_measure <= 0:
			return []

		bar_length = fractions.Fraction(beats_per_measure)
		starts: typing.List[typing.Tuple[fractions.Fraction, int, jazzene.chords.Chord]] = []

		for measure in range(measures):

			entries = self.chords_in_measure(measure)

			if not entries:
				continue

			step = bar_length / len(entries)

			for i, entry in enumerate(entries):
				starts.append((measure * bar_length + i * step, measure, entry.chord))

		total = measures * bar_length

		if not starts or starts[0][0] > 0:
			starts.insert(0, (fractions.Fraction(0), 0, self.entries[-1].chord))

		spans: typing.List[ChordSpan] = []

		for i, (start, measure, chord) in enumerate(starts):
			end = starts[i + 1][0] if i + 1 < len(starts) else total
			spans.append(ChordSpan(chord=chord, start=start, duration=end - start, measure=measure))

		return spans


def parse_chord_token (token: str, key: jazzene.chords.Key) -> typing.Optional[jazzene.chords.Chord]:

	"""Parse a single chord token into an absolute chord.

	Parameters:
		token: Absolute (``"Ebmaj7"``) or scale-degree (``"IVmaj7"``) symbol.
		key: Key used to resolve scale-degree tokens.

	Returns:
		The resolved ``Chord``, or ``None`` when the token is malformed.

	Example:
		```python
		key = jazzene.chords.parse_key("C")
		parse_chord_token("IIIm7", key).name()   # → "Em7"
		parse_chord_token("bVII7", key).name()   # → "Bb7"
		parse_chord_token("H7", key)             # → None
		```
	"""

	text = jazzene.chords.normalize_accidentals(token.strip())

	if not text:
		return None

	match = _ROMAN_PATTERN.match(text)

	if match is not None:
		accidental, numeral, suffix, bass = match.groups()
		parsed = jazzene.chords.parse_suffix(suffix)

		if parsed is not None:
			quality, extensions = parsed

			if suffix == "" and numeral.islower():
				quality = "minor"

			root_pc = key.degree_pc(_ROMAN_DEGREES[numeral.upper()], _ACCIDENTAL_SHIFT[accidental])
			return _build_chord(root_pc, quality, extensions, bass)

	match = _ABSOLUTE_PATTERN.match(text)

	if match is None:
		return None

	letter, accidental, suffix, bass = match.groups()
	parsed = jazzene.chords.parse_suffix(suffix)

	if parsed is None:
		return None

	quality, extensions = parsed
	root_pc = jazzene.chords.key_name_to_pc(letter + accidental)

	return _build_chord(root_pc, quality, extensions, bass)


def _build_chord (
	root_pc: int,
	quality: str,
	extensions: typing.Tuple[str, ...],
	bass: typing.Optional[str]
) -> jazzene.chords.Chord:

	bass_pc = jazzene.chords.key_name_to_pc(bass) if bass else None

	if bass_pc == root_pc:
		bass_pc = None

	return jazzene.chords.Chord(root_pc=root_pc, quality=quality, extensions=extensions, bass_pc=bass_pc)


def _tokenize (text: str) -> typing.List[str]:

	"""
	Split progression text into chord tokens and bar separators.
	"Cm7 F7|Bb" -> ["Cm7", "F7", "|", "Bb"]
	"""

	text = text.replace(BAR_SEPARATOR, f" {BAR_SEPARATOR} ")

	return text.split()


def parse_progression (text: str, key: jazzene.chords.Key, measures: int = 0) -> Progression:

	"""Parse progression text into a measure-indexed :class:`Progression`.

	With bar separators, the measure index advances at each ``|`` (leading
	and trailing separators are ignored, consecutive ones leave empty bars
	that hold the previous chord). Without separators, chord ``i`` of ``n``
	is placed on measure ``floor(i * measures / n)`` so the chords spread
	evenly across the requested measure count.

	Malformed tokens are skipped with a warning, never raised.

	Parameters:
		text: Lead-sheet text, e.g. ``"Cm7 F7 Bbmaj7 Ebmaj7"``.
		key: Key used to resolve scale-degree tokens.
		measures: Requested measure count (used only for unbarred text).

	Returns:
		The parsed progression; empty if nothing parsed.
	"""

	tokens = _tokenize(text or "")

	while tokens and tokens[0] == BAR_SEPARATOR:
		tokens.pop(0)

	while tokens and tokens[-1] == BAR_SEPARATOR:
		tokens.pop()

	has_bars = BAR_SEPARATOR in tokens
	chords: typing.List[typing.Tuple[jazzene.chords.Chord, int, str]] = []
	bar = 0

	for token in tokens:

		if token == BAR_SEPARATOR:
			bar += 1
			continue

		if token == REPEAT_TOKEN:
			if chords:
				chords.append((chords[-1][0], bar, token))
			else:
				logger.warning("Skipping repeat sign with no previous chord")
			continue

		chord = parse_chord_token(token, key)

		if chord is None:
			logger.warning(f"Skipping unrecognised chord token: {token!r}")
			continue

		chords.append((chord, bar, token))

	if not chords:
		return Progression()

	if has_bars:
		entries = tuple(ProgressionEntry(chord=c, measure=m, token=t) for c, m, t in chords)
		return Progression(entries=entries, has_bars=True, bar_count=bar + 1)

	count = len(chords)
	spread = max(1, measures)

	entries = tuple(
		ProgressionEntry(chord=c, measure=(i * spread) // count, token=t)
		for i, (c, _, t) in enumerate(chords)
	)

	return Progression(entries=entries, has_bars=False, bar_count=entries[-1].measure + 1)
