import logging

import mido
import pytest

import jazzene.__main__


@pytest.fixture(autouse=True)
def _isolated_cwd (tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:

	"""Run each command where no jazzene.yaml exists."""

	monkeypatch.chdir(tmp_path)


def test_generate_prints_solo (capsys) -> None:

	"""generate prints the chord timeline and the notes."""

	assert jazzene.__main__.main(["generate", "--key", "Bb", "--chords", "IIm7 V7 Imaj7", "--measures", "3"]) == 0

	out = capsys.readouterr().out

	assert out.startswith("Key: Bb  Time: 4/4  120 BPM  3 measures")
	assert "Cm7" in out
	assert "F7" in out
	assert "Bbmaj7" in out


def test_generate_is_deterministic (capsys) -> None:

	"""The same options print the same solo."""

	jazzene.__main__.main(["generate", "--seed", "5", "--measures", "2"])
	first = capsys.readouterr().out

	jazzene.__main__.main(["generate", "--seed", "5", "--measures", "2"])
	second = capsys.readouterr().out

	assert first == second


def test_generate_writes_midi (tmp_path) -> None:

	"""--output writes a standard MIDI file."""

	path = tmp_path / "solo.mid"

	assert jazzene.__main__.main(["generate", "--measures", "2", "--output", str(path)]) == 0
	assert mido.MidiFile(str(path)).ticks_per_beat == 480


def test_generate_empty_progression (capsys) -> None:

	"""An empty progression prints an empty solo rather than failing."""

	assert jazzene.__main__.main(["generate", "--chords", "???"]) == 0
	assert "(empty)" in capsys.readouterr().out


def test_config_file_and_overrides (tmp_path, capsys) -> None:

	"""Command-line options override the config file."""

	config = tmp_path / "solo.yaml"
	config.write_text("key: Eb\nbpm: 90\nmeasures: 2\n")

	assert jazzene.__main__.main(["generate", "--config", str(config), "--bpm", "150"]) == 0
	assert capsys.readouterr().out.startswith("Key: Eb  Time: 4/4  150 BPM  2 measures")


def test_missing_config_file_fails (tmp_path) -> None:

	"""A --config file that does not exist is a usage error."""

	assert jazzene.__main__.main(["generate", "--config", str(tmp_path / "missing.yaml")]) == 2


def test_invalid_option_falls_back (capsys, caplog: pytest.LogCaptureFixture) -> None:

	"""An invalid option value warns and uses the default."""

	with caplog.at_level(logging.WARNING, logger="jazzene.config"):
		assert jazzene.__main__.main(["generate", "--bpm", "fast", "--measures", "1"]) == 0

	assert "120 BPM" in capsys.readouterr().out
	assert "bpm" in caplog.text


def test_play_with_nothing_to_play (caplog: pytest.LogCaptureFixture) -> None:

	"""play exits cleanly when the progression is empty."""

	with caplog.at_level(logging.WARNING, logger="jazzene.__main__"):
		assert jazzene.__main__.main(["play", "--chords", ""]) == 0

	assert "Nothing to play" in caplog.text


def test_parser_requires_a_command () -> None:

	"""A command must be given."""

	with pytest.raises(SystemExit):
		jazzene.__main__.build_parser().parse_args([])
