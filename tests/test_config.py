import logging

import pytest

import jazzene.clock
import jazzene.config


class TestFromQuery:

	def test_defaults (self) -> None:
		"""An empty query gives the defaults."""
		settings = jazzene.config.Settings.from_query("")

		assert settings == jazzene.config.Settings()
		assert settings.key.name() == "C"
		assert str(settings.time_signature) == "4/4"
		assert settings.bpm == 120.0
		assert settings.seed == 42
		assert settings.measures == 8
		assert settings.chords == "Cm7 F7 Bbmaj7 Ebmaj7"
		assert settings.view == "both"
		assert not settings.loop
		assert settings.stop is jazzene.clock.StopPolicy.PRESERVE

	def test_valid_options (self) -> None:
		"""Every option is parsed from its text form."""
		settings = jazzene.config.Settings.from_query(
			"?key=Bb&time=3/4&bpm=160&seed=7&measures=16&chords=Dm7+G7+Cmaj7"
			"&view=lead_sheet&loop=on&loop_a=2&loop_b=6.5&stop=rewind"
		)

		assert settings.key.name() == "Bb"
		assert str(settings.time_signature) == "3/4"
		assert settings.bpm == 160.0
		assert settings.seed == 7
		assert settings.measures == 16
		assert settings.chords == "Dm7 G7 Cmaj7"
		assert settings.view == "lead_sheet"
		assert settings.loop
		assert (settings.loop_a, settings.loop_b) == (2.0, 6.5)
		assert settings.stop is jazzene.clock.StopPolicy.REWIND

	@pytest.mark.parametrize("query, field, expected", [
		("bpm=fast", "bpm", 120.0),
		("bpm=5", "bpm", 120.0),
		("bpm=1000", "bpm", 120.0),
		("bpm=nan", "bpm", 120.0),
		("seed=1.5", "seed", 42),
		("measures=-2", "measures", 8),
		("measures=999", "measures", 8),
		("view=sideways", "view", "both"),
		("loop=maybe", "loop", False),
		("loop_a=-3", "loop_a", 0.0),
	])
	def test_invalid_values_fall_back (self, query: str, field: str, expected: object, caplog: pytest.LogCaptureFixture) -> None:
		"""Invalid values keep the default and log a warning."""
		with caplog.at_level(logging.WARNING, logger="jazzene.config"):
			settings = jazzene.config.Settings.from_query(query)

		assert getattr(settings, field) == expected
		assert caplog.records

	def test_invalid_key_and_time (self) -> None:
		"""Unknown keys and meters fall back too."""
		settings = jazzene.config.Settings.from_query("key=H&time=4/5")

		assert settings.key.name() == "C"
		assert str(settings.time_signature) == "4/4"

	def test_unknown_option_is_ignored (self, caplog: pytest.LogCaptureFixture) -> None:
		"""Unknown names are warned about and otherwise ignored."""
		with caplog.at_level(logging.WARNING, logger="jazzene.config"):
			settings = jazzene.config.Settings.from_query("colour=blue&bpm=90")

		assert settings.bpm == 90.0
		assert "colour" in caplog.text

	def test_base_is_overridden (self) -> None:
		"""Options apply on top of a base."""
		base = jazzene.config.Settings.from_query("bpm=200&seed=3")
		settings = jazzene.config.Settings.from_query("seed=9", base=base)

		assert settings.bpm == 200.0
		assert settings.seed == 9


def test_from_mapping_accepts_yaml_scalars () -> None:

	"""Numbers and booleans from YAML are taken as they are."""

	settings = jazzene.config.Settings.from_mapping({"bpm": 90, "loop": True, "seed": 5, "chords": None})

	assert settings.bpm == 90.0
	assert settings.loop
	assert settings.seed == 5
	assert settings.chords == jazzene.config.DEFAULT_CHORDS


def test_from_mapping_rejects_bool_as_number () -> None:

	"""A boolean is not a tempo."""

	assert jazzene.config.Settings.from_mapping({"bpm": True}).bpm == 120.0


def test_to_mapping_round_trip () -> None:

	"""to_mapping() feeds back into from_mapping() unchanged."""

	settings = jazzene.config.Settings.from_query("key=Am&time=6/8&bpm=140&loop=true&loop_a=1&loop_b=3&stop=rewind")

	assert jazzene.config.Settings.from_mapping(settings.to_mapping()) == settings


class TestLoadConfig:

	def test_explicit_file (self, tmp_path) -> None:
		"""A YAML file's options are loaded."""
		path = tmp_path / "jazzene.yaml"
		path.write_text("key: Bb\nbpm: 180\nchords: \"| Cm7 F7 | Bbmaj7 |\"\nloop: true\n")

		settings = jazzene.config.load_config(str(path))

		assert settings.key.name() == "Bb"
		assert settings.bpm == 180.0
		assert settings.chords == "| Cm7 F7 | Bbmaj7 |"
		assert settings.loop

	def test_empty_file_is_defaults (self, tmp_path) -> None:
		"""An empty file means all defaults."""
		path = tmp_path / "empty.yaml"
		path.write_text("")

		assert jazzene.config.load_config(str(path)) == jazzene.config.Settings()

	def test_missing_explicit_file_raises (self, tmp_path) -> None:
		"""A named file that does not exist is an error."""
		with pytest.raises(jazzene.config.ConfigError):
			jazzene.config.load_config(str(tmp_path / "nope.yaml"))

	def test_invalid_yaml_raises (self, tmp_path) -> None:
		"""Unparseable YAML in a named file is an error."""
		path = tmp_path / "bad.yaml"
		path.write_text("key: [unclosed\n")

		with pytest.raises(jazzene.config.ConfigError):
			jazzene.config.load_config(str(path))

	def test_non_mapping_raises (self, tmp_path) -> None:
		"""A named file must hold a mapping."""
		path = tmp_path / "list.yaml"
		path.write_text("- 1\n- 2\n")

		with pytest.raises(jazzene.config.ConfigError):
			jazzene.config.load_config(str(path))

	def test_implicit_missing_file_uses_defaults (self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
		"""Without a named file and no jazzene.yaml, defaults are used."""
		monkeypatch.chdir(tmp_path)

		assert jazzene.config.load_config() == jazzene.config.Settings()

	def test_implicit_bad_file_uses_defaults (self, tmp_path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
		"""A broken default file is warned about, not fatal."""
		monkeypatch.chdir(tmp_path)
		(tmp_path / "jazzene.yaml").write_text("just a string\n")

		with caplog.at_level(logging.WARNING, logger="jazzene.config"):
			settings = jazzene.config.load_config()

		assert settings == jazzene.config.Settings()
		assert "mapping" in caplog.text
