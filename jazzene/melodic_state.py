"""Pitch selection for the improvised line.

Provides :class:`ImprovisingVoice`, which tracks the recent pitch history of
the solo and scores every candidate pitch in its register before making a
weighted random choice. Candidates come from the current chord's
:class:`~jazzene.intervals.Palette`, weighted by tier: chord tones highest,
then chord-scale tones, then chromatic neighbours.

On top of the tier weights the voice applies the Narmour
Implication-Realization (NIR) rules on **absolute MIDI pitches**, so
registral direction is tracked across octaves: a leap from C4 (60) to G4
(67) is +7 upward, not an ambiguous -5.

The voice-leading constraint is hard: a candidate more than ``max_leap``
semitones from the previous pitch is never chosen. If no candidate survives
the constraint, the chord tone nearest the previous pitch is played instead.
"""

import random
import typing

import jazzene.constants.register
import jazzene.intervals
import jazzene.sequence_utils


DEFAULT_TIER_WEIGHTS: typing.Dict[str, float] = {
	"chord": 4.0,
	"scale": 2.0,
	"neighbor": 0.6,
}


class ImprovisingVoice:

	"""Persistent melodic context for one generated solo."""


	def __init__ (
		self,
		low: int = jazzene.constants.register.SOLO_LOW,
		high: int = jazzene.constants.register.SOLO_HIGH,
		start: int = jazzene.constants.register.SOLO_START,
		max_leap: int = jazzene.constants.register.MAX_LEAP,
		tier_weights: typing.Optional[typing.Dict[str, float]] = None,
		accent_chord_boost: float = 2.0,
		nir_strength: float = 0.5,
		pitch_diversity: float = 0.6,
	) -> None:

		"""Initialise a voice for a register and voice-leading bound.

		Parameters:
			low: Lowest MIDI note (inclusive) the voice may play.
			high: Highest MIDI note (inclusive) the voice may play.
			start: Reference pitch for the very first note.
			max_leap: Largest allowed interval, in semitones, between
			    consecutive notes.
			tier_weights: Base weight per palette tier (``"chord"``,
			    ``"scale"``, ``"neighbor"``).
			accent_chord_boost: Extra multiplier for chord tones on accented
			    onsets, so downbeats land on the harmony.
			nir_strength: 0.0–1.0.  Scales how strongly the NIR rules
			    influence candidate scores.
			pitch_diversity: 0.0–1.0.  Exponential penalty per recent
			    repetition of the same pitch.
		"""

		if low > high:
			raise ValueError(f"low ({low}) must be <= high ({high})")

		if max_leap < 1:
			raise ValueError("max_leap must be at least one semitone")

		self.low = low
		self.high = high
		self.start = start
		self.max_leap = max_leap
		self.tier_weights = dict(tier_weights or DEFAULT_TIER_WEIGHTS)
		self.accent_chord_boost = accent_chord_boost
		self.nir_strength = nir_strength
		self.pitch_diversity = pitch_diversity

		# History of the last N absolute MIDI pitches.
		self.history: typing.List[int] = []
		self._last_tier: typing.Optional[str] = None


	@property
	def reference_pitch (self) -> int:

		"""The pitch the next interval is measured from."""

		return self.history[-1] if self.history else self.start


	def choose_next (
		self,
		palette: jazzene.intervals.Palette,
		rng: random.Random,
		emphasis: str = "normal",
	) -> int:

		"""Score the candidates for one onset and return the chosen pitch."""

		reference = self.reference_pitch

		candidates = [
			p for p in range(self.low, self.high + 1)
			if palette.tier(p) is not None and abs(p - reference) <= self.max_leap
		]

		options = [(p, self._score_candidate(p, palette, emphasis)) for p in candidates]
		options = [(p, score) for p, score in options if score > 0.0]

		if options:
			chosen = jazzene.sequence_utils.weighted_choice(options, rng)
		else:
			chosen = self.nearest_chord_tone(palette, reference)

		self._last_tier = palette.tier(chosen)

		# Persist history for the next call (capped at 4 entries).
		self.history.append(chosen)
		if len(self.history) > 4:
			self.history.pop(0)

		return chosen


	def nearest_chord_tone (self, palette: jazzene.intervals.Palette, reference: int) -> int:

		"""Return the chord tone in the register closest to ``reference`` (lower pitch on a tie)."""

		tones = [p for p in range(self.low, self.high + 1) if p % 12 in palette.chord_tones]

		if not tones:
			return max(self.low, min(self.high, reference))

		return min(tones, key=lambda p: (abs(p - reference), p))


	def _score_candidate (
		self,
		candidate: int,
		palette: jazzene.intervals.Palette,
		emphasis: str,
	) -> float:

		"""Score one candidate using tier weight, NIR rules, range gravity, and pitch diversity."""

		tier = palette.tier(candidate)

		if tier is None:
			return 0.0

		weight = self.tier_weights.get(tier, 0.0)

		if emphasis == "accent":
			if tier == "chord":
				weight *= self.accent_chord_boost
			elif tier == "neighbor":
				weight *= 0.25

		score = 1.0

		if self.history:
			last_note = self.history[-1]

			target_diff = candidate - last_note
			target_interval = abs(target_diff)
			target_direction = 1 if target_diff > 0 else -1 if target_diff < 0 else 0

			# A chromatic neighbour resolves by step to the harmony.
			if self._last_tier == "neighbor" and tier == "chord" and target_interval <= 2:
				score += 1.5

			if len(self.history) >= 2:
				prev_note = self.history[-2]

				prev_diff = last_note - prev_note
				prev_interval = abs(prev_diff)
				prev_direction = 1 if prev_diff > 0 else -1 if prev_diff < 0 else 0

				# Reversal (gap fill): after a large leap, expect a direction change.
				if prev_interval > 4:
					if target_direction != prev_direction and target_direction != 0:
						score += 0.5

					if target_interval < 4:
						score += 0.3

				# Process (continuation): after a small step, expect more of the same.
				elif 0 < prev_interval < 3:
					if target_direction == prev_direction:
						score += 0.4

					if abs(target_interval - prev_interval) <= 1:
						score += 0.2

			# Proximity: smaller intervals are generally preferred.
			if 0 < target_interval <= 3:
				score += 0.3

			score = 1.0 + (score - 1.0) * self.nir_strength

		score *= weight

		# Range gravity: penalise notes far from the centre of [low, high].
		centre = (self.low + self.high) / 2.0
		half_range = max(1.0, (self.high - self.low) / 2.0)
		distance_ratio = abs(candidate - centre) / half_range
		score *= 1.0 - 0.3 * (distance_ratio ** 2)

		# Pitch diversity: exponential penalty for recently-heard pitches.
		recent_occurrences = sum(1 for h in self.history if h == candidate)
		score *= self.pitch_diversity ** recent_occurrences

		return max(0.0, score)
