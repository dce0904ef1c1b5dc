"""Tests for ImprovisingVoice - palette-weighted, NIR-guided pitch selection.

Covers:
- Construction validation
- choose_next() determinism, register and voice-leading bound
- Fallback to the nearest chord tone
- History management (cap at 4)
- Accent weighting of chord and neighbour tones
- Neighbour-to-chord resolution bonus
- Pitch diversity penalty
"""

import random

import pytest

import jazzene.chords
import jazzene.intervals
import jazzene.melodic_state


def _palette (root_pc: int = 2, quality: str = "minor_7th") -> jazzene.intervals.Palette:

	"""Palette for a chord (Dm7 by default)."""

	return jazzene.intervals.chord_palette(jazzene.chords.Chord(root_pc=root_pc, quality=quality))


def _voice (**kwargs: object) -> jazzene.melodic_state.ImprovisingVoice:

	"""Voice with a one-octave register around middle C unless overridden."""

	options: dict = {"low": 60, "high": 72, "start": 66, "max_leap": 5}
	options.update(kwargs)

	return jazzene.melodic_state.ImprovisingVoice(**options)


class TestInit:

	def test_low_above_high_raises (self) -> None:
		"""An inverted register is rejected."""
		with pytest.raises(ValueError):
			jazzene.melodic_state.ImprovisingVoice(low=72, high=60)

	def test_max_leap_must_be_positive (self) -> None:
		"""A zero leap bound is rejected."""
		with pytest.raises(ValueError):
			jazzene.melodic_state.ImprovisingVoice(max_leap=0)

	def test_reference_starts_at_start (self) -> None:
		"""Before any note the reference pitch is the start pitch."""
		assert _voice(start=64).reference_pitch == 64


class TestChooseNext:

	def test_deterministic (self) -> None:
		"""Equal seeds give equal lines."""
		palette = _palette()

		def line (seed: int) -> list[int]:
			voice = _voice()
			rng = random.Random(seed)
			return [voice.choose_next(palette, rng) for _ in range(32)]

		assert line(11) == line(11)

	def test_respects_register_and_leap (self) -> None:
		"""Every pitch is in the register and within max_leap of the previous one."""
		palettes = [_palette(2, "minor_7th"), _palette(7, "dominant_7th"), _palette(0, "major_7th")]
		voice = _voice()
		rng = random.Random(3)
		previous = voice.reference_pitch

		for i in range(300):
			pitch = voice.choose_next(palettes[i % 3], rng, "accent" if i % 4 == 0 else "normal")
			assert 60 <= pitch <= 72
			assert abs(pitch - previous) <= 5
			previous = pitch

	def test_history_capped_at_four (self) -> None:
		"""Only the last four pitches are remembered."""
		voice = _voice()
		rng = random.Random(0)
		pitches = [voice.choose_next(_palette(), rng) for _ in range(10)]

		assert voice.history == pitches[-4:]
		assert voice.reference_pitch == pitches[-1]

	def test_falls_back_to_nearest_chord_tone (self) -> None:
		"""With nothing playable inside the leap bound, the nearest chord tone is used."""
		palette = jazzene.intervals.Palette(
			chord_tones = frozenset({0}),
			scale_tones = frozenset(),
			neighbor_tones = frozenset(),
		)
		voice = _voice(start=66, max_leap=1)

		assert voice.choose_next(palette, random.Random(0)) == 60


class TestNearestChordTone:

	def test_tie_goes_to_lower_pitch (self) -> None:
		"""Equidistant chord tones resolve downwards."""
		palette = _palette(0, "major")
		assert _voice().nearest_chord_tone(palette, 62) == 60

	def test_closest_wins (self) -> None:
		"""The closest chord tone is chosen."""
		palette = _palette(0, "major")
		assert _voice().nearest_chord_tone(palette, 66) == 67


class TestScoring:

	def test_accent_boosts_chord_tones (self) -> None:
		"""On an accent a chord tone scores accent_chord_boost times higher."""
		voice = _voice(accent_chord_boost=2.0)
		palette = _palette()

		normal = voice._score_candidate(62, palette, "normal")
		accent = voice._score_candidate(62, palette, "accent")

		assert accent == pytest.approx(2.0 * normal)

	def test_accent_dampens_neighbours (self) -> None:
		"""On an accent a chromatic neighbour scores a quarter as much."""
		voice = _voice()
		palette = _palette()

		normal = voice._score_candidate(61, palette, "normal")
		accent = voice._score_candidate(61, palette, "accent")

		assert accent == pytest.approx(0.25 * normal)

	def test_tier_order (self) -> None:
		"""Chord tones outscore scale tones, which outscore neighbours, at equal distance from centre."""
		voice = _voice(low=48, high=84)
		palette = _palette()

		# 62 (D, chord), 64 (E, scale), 61 (C#, neighbour) are all near the centre of 48..84.
		chord = voice._score_candidate(62, palette, "normal")
		scale = voice._score_candidate(64, palette, "normal")
		neighbor = voice._score_candidate(61, palette, "normal")

		assert chord > scale > neighbor > 0

	def test_outside_palette_scores_zero (self) -> None:
		"""A pitch class in no tier is never a candidate."""
		palette = jazzene.intervals.Palette(frozenset({0}), frozenset({2}), frozenset({1}))

		assert _voice()._score_candidate(64, palette, "normal") == 0.0

	def test_neighbour_resolution_bonus (self) -> None:
		"""After a neighbour tone, a chord tone a step away scores higher than otherwise."""
		palette = _palette()

		resolving = _voice(nir_strength=1.0)
		resolving.history = [63]
		resolving._last_tier = "neighbor"

		plain = _voice(nir_strength=1.0)
		plain.history = [63]
		plain._last_tier = "scale"

		assert resolving._score_candidate(62, palette, "normal") > plain._score_candidate(62, palette, "normal")

	def test_repetition_penalty (self) -> None:
		"""A pitch heard recently scores lower."""
		palette = _palette()

		fresh = _voice(nir_strength=0.0)
		fresh.history = [65, 69]

		repeated = _voice(nir_strength=0.0)
		repeated.history = [62, 69]

		assert repeated._score_candidate(62, palette, "normal") < fresh._score_candidate(62, palette, "normal")
