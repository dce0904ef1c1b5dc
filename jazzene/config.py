"""Startup settings.

Settings come from three places, all funnelled through
:meth:`Settings.from_mapping`:

- a query string (``?key=Bb&bpm=160&chords=Dm7+G7+Cmaj7``) via
  :meth:`Settings.from_query`,
- a YAML file via :func:`load_config`,
- command-line overrides applied on top of either.

An option with an invalid or out-of-range value falls back to its default
and logs a warning; it never stops the program. The only hard failure is a
config file named explicitly that cannot be read or parsed, which raises
:class:`ConfigError`.

Example YAML::

	key: Bb
	time: 4/4
	bpm: 160
	seed: 7
	measures: 16
	chords: "| Cm7 F7 | Bbmaj7 | Ebmaj7 | Am7b5 D7 |"
	loop: true
	loop_a: 4
	loop_b: 12
"""

import dataclasses
import logging
import math
import os
import typing
import urllib.parse

import yaml

import jazzene.chords
import jazzene.clock
import jazzene.generator


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "jazzene.yaml"

DEFAULT_KEY = "C"
DEFAULT_TIME = "4/4"
DEFAULT_BPM = 120.0
DEFAULT_SEED = 42
DEFAULT_MEASURES = 8
DEFAULT_CHORDS = "Cm7 F7 Bbmaj7 Ebmaj7"
DEFAULT_VIEW = "both"

MIN_BPM = 20.0
MAX_BPM = 400.0
MIN_MEASURES = 0
MAX_MEASURES = 256

VIEWS = ("both", "lead_sheet", "falling_notes")

_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")


class ConfigError (Exception):

	"""An explicitly requested config file could not be read or parsed."""


def _parse_key (value: typing.Any) -> jazzene.chords.Key:

	try:
		return jazzene.chords.parse_key(str(value))
	except ValueError:
		logger.warning(f"Invalid key {value!r}, using {DEFAULT_KEY}")
		return jazzene.chords.parse_key(DEFAULT_KEY)


def _parse_time (value: typing.Any) -> jazzene.generator.TimeSignature:

	try:
		return jazzene.generator.TimeSignature.parse(str(value))
	except ValueError:
		logger.warning(f"Invalid time signature {value!r}, using {DEFAULT_TIME}")
		return jazzene.generator.TimeSignature.parse(DEFAULT_TIME)


def _parse_number (
	name: str,
	value: typing.Any,
	default: float,
	low: typing.Optional[float] = None,
	high: typing.Optional[float] = None,
	integer: bool = False,
) -> typing.Any:

	"""Parse a numeric option, falling back to ``default`` when invalid or out of range."""

	try:
		if isinstance(value, bool):
			raise ValueError("boolean is not a number")

		number = float(value)

		if not math.isfinite(number):
			raise ValueError("not finite")

		if integer:
			if number != int(number):
				raise ValueError("not a whole number")
			number = int(number)

	except (TypeError, ValueError):
		logger.warning(f"Invalid {name} {value!r}, using {default}")
		return default

	if (low is not None and number < low) or (high is not None and number > high):
		logger.warning(f"{name} {value!r} out of range [{low}, {high}], using {default}")
		return default

	return number


def _parse_bool (name: str, value: typing.Any, default: bool) -> bool:

	if isinstance(value, bool):
		return value

	text = str(value).strip().lower()

	if text in _TRUE_WORDS:
		return True

	if text in _FALSE_WORDS:
		return False

	logger.warning(f"Invalid {name} {value!r}, using {str(default).lower()}")
	return default


def _parse_choice (name: str, value: typing.Any, choices: typing.Sequence[str], default: str) -> str:

	text = str(value).strip().lower()

	if text not in choices:
		logger.warning(f"Invalid {name} {value!r}, expected one of {list(choices)}, using {default}")
		return default

	return text


def _parse_stop (value: typing.Any) -> jazzene.clock.StopPolicy:

	if isinstance(value, jazzene.clock.StopPolicy):
		return value

	text = _parse_choice("stop", value, [policy.value for policy in jazzene.clock.StopPolicy], jazzene.clock.StopPolicy.PRESERVE.value)

	return jazzene.clock.StopPolicy(text)


@dataclasses.dataclass(frozen=True)
class Settings:

	"""Validated startup options.

	Fields hold parsed values: ``key`` is a :class:`~jazzene.chords.Key`,
	``time_signature`` a :class:`~jazzene.generator.TimeSignature`, ``stop`` a
	:class:`~jazzene.clock.StopPolicy`. Loop bounds are seconds.
	"""

	key: jazzene.chords.Key = dataclasses.field(default_factory=lambda: jazzene.chords.parse_key(DEFAULT_KEY))
	time_signature: jazzene.generator.TimeSignature = dataclasses.field(default_factory=jazzene.generator.TimeSignature)
	bpm: float = DEFAULT_BPM
	seed: int = DEFAULT_SEED
	measures: int = DEFAULT_MEASURES
	chords: str = DEFAULT_CHORDS
	view: str = DEFAULT_VIEW
	loop: bool = False
	loop_a: float = 0.0
	loop_b: float = 0.0
	stop: jazzene.clock.StopPolicy = jazzene.clock.StopPolicy.PRESERVE


	@classmethod
	def from_mapping (cls, mapping: typing.Mapping[str, typing.Any], base: typing.Optional["Settings"] = None) -> "Settings":

		"""Build settings from option names and raw values.

		Parameters:
			mapping: Option names (``key``, ``time``, ``bpm``, ``seed``,
				``measures``, ``chords``, ``view``, ``loop``, ``loop_a``,
				``loop_b``, ``stop``) to raw values, strings or YAML scalars.
				``None`` values are ignored.
			base: Settings to override. Defaults to all defaults.

		Returns:
			The merged settings. Invalid values keep the default.
		"""

		settings = base if base is not None else cls()
		changes: typing.Dict[str, typing.Any] = {}

		for name, value in mapping.items():

			if value is None:
				continue

			if name == "key":
				changes["key"] = _parse_key(value)
			elif name == "time":
				changes["time_signature"] = _parse_time(value)
			elif name == "bpm":
				changes["bpm"] = float(_parse_number("bpm", value, DEFAULT_BPM, MIN_BPM, MAX_BPM))
			elif name == "seed":
				changes["seed"] = _parse_number("seed", value, DEFAULT_SEED, integer=True)
			elif name == "measures":
				changes["measures"] = _parse_number("measures", value, DEFAULT_MEASURES, MIN_MEASURES, MAX_MEASURES, integer=True)
			elif name == "chords":
				changes["chords"] = str(value)
			elif name == "view":
				changes["view"] = _parse_choice("view", value, VIEWS, DEFAULT_VIEW)
			elif name == "loop":
				changes["loop"] = _parse_bool("loop", value, False)
			elif name == "loop_a":
				changes["loop_a"] = float(_parse_number("loop_a", value, 0.0, low=0.0))
			elif name == "loop_b":
				changes["loop_b"] = float(_parse_number("loop_b", value, 0.0, low=0.0))
			elif name == "stop":
				changes["stop"] = _parse_stop(value)
			else:
				logger.warning(f"Ignoring unknown option {name!r}")

		return dataclasses.replace(settings, **changes)


	@classmethod
	def from_query (cls, query: str, base: typing.Optional["Settings"] = None) -> "Settings":

		"""Build settings from a URL query string (leading ``?`` optional).

		A repeated option takes its last value.

		Example:
			```python
			Settings.from_query("?key=Bb&bpm=160").bpm   # → 160.0
			```
		"""

		pairs = urllib.parse.parse_qsl(query.lstrip("?"), keep_blank_values=True)

		return cls.from_mapping(dict(pairs), base=base)


	def to_mapping (self) -> typing.Dict[str, typing.Any]:

		"""Return the settings as plain option values (the inverse of :meth:`from_mapping`)."""

		return {
			"key": self.key.name(),
			"time": str(self.time_signature),
			"bpm": self.bpm,
			"seed": self.seed,
			"measures": self.measures,
			"chords": self.chords,
			"view": self.view,
			"loop": self.loop,
			"loop_a": self.loop_a,
			"loop_b": self.loop_b,
			"stop": self.stop.value,
		}


def load_config (path: typing.Optional[str] = None, base: typing.Optional[Settings] = None) -> Settings:

	"""Load settings from a YAML file.

	Parameters:
		path: File to read. When omitted, ``jazzene.yaml`` in the working
			directory is used if it exists, otherwise defaults are returned.
		base: Settings the file's options override.

	Raises:
		ConfigError: If ``path`` was given and the file is missing, unreadable,
			not valid YAML, or not a mapping of options.
	"""

	explicit = path is not None
	config_path = path if path is not None else DEFAULT_CONFIG_PATH

	if not os.path.exists(config_path):

		if explicit:
			raise ConfigError(f"Config file {config_path} not found")

		logger.debug(f"No {config_path} found, using defaults")
		return base if base is not None else Settings()

	try:
		with open(config_path, 'r') as f:
			data = yaml.safe_load(f)

	except (OSError, yaml.YAMLError) as e:

		if explicit:
			raise ConfigError(f"Could not read config file {config_path}: {e}") from e

		logger.warning(f"Could not read {config_path}: {e}. Using defaults.")
		return base if base is not None else Settings()

	if data is None:
		data = {}

	if not isinstance(data, dict):

		if explicit:
			raise ConfigError(f"Config file {config_path} must contain a mapping of options")

		logger.warning(f"Ignoring {config_path}: expected a mapping of options")
		return base if base is not None else Settings()

	logger.info(f"Loaded config from {config_path}")

	return Settings.from_mapping(data, base=base)
