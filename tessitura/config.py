"""Generation settings and their YAML loader.

Example ``tessitura.yaml``:

	```yaml
	composition:
	  seed: 7
	  beats: 384
	chords:
	  min_chords: 2
	  max_chords: 5
	melody:
	  bump_factor: 1.8
	percussion:
	  power: 0.2
	output:
	  midi_path: song.mid
  json_path: song.json
	```

Every key is optional. Unknown sections or keys are rejected so that typos
do not silently fall back to defaults.
"""

import dataclasses
import logging
import os
import typing

import yaml

import tessitura.constants.pulses


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "tessitura.yaml"


@dataclasses.dataclass
class GenerationConfig:

	"""
	All tunable settings for one generation run.
	"""

	seed: int = 0
	beats: int = 384
	beat_length: int = tessitura.constants.pulses.MIDI_QUARTER_NOTE
	max_passes: int = 16

	min_chords: int = 2
	max_chords: int = 6
	progression_bars: int = 4
	echelon_range: typing.Tuple[float, float] = (0.2, 1.0)

	bump_factor: float = 1.6

	power: float = 0.1
	rest_probability_range: typing.Tuple[float, float] = (0.3, 0.9)

	midi_path: str = "output.mid"
	json_path: typing.Optional[str] = "output.json"
	ticks_per_beat: int = 480

	def __post_init__ (self) -> None:

		if self.beats < 1:
			raise ValueError("beats must be at least 1")

		if self.ticks_per_beat < 1 or self.ticks_per_beat % self.beat_length != 0:
			raise ValueError(f"ticks_per_beat must be a positive multiple of beat_length ({self.beat_length})")

		self.echelon_range = tuple(self.echelon_range)
		self.rest_probability_range = tuple(self.rest_probability_range)


# YAML section -> keys it may contain (all map onto GenerationConfig fields).
SECTIONS: typing.Dict[str, typing.Tuple[str, ...]] = {
	"composition": ("seed", "beats", "beat_length", "max_passes"),
	"chords": ("min_chords", "max_chords", "progression_bars", "echelon_range"),
	"melody": ("bump_factor",),
	"percussion": ("power", "rest_probability_range"),
	"output": ("midi_path", "json_path", "ticks_per_beat"),
}


def config_from_dict (data: typing.Optional[typing.Dict[str, typing.Any]]) -> GenerationConfig:

	"""Build a :class:`GenerationConfig` from parsed YAML.

	Raises:
		ValueError: On unknown sections or keys, or invalid values.
	"""

	if not data:
		return GenerationConfig()

	if not isinstance(data, dict):
		raise ValueError("Configuration must be a mapping of sections")

	values: typing.Dict[str, typing.Any] = {}

	for section, entries in data.items():

		if section not in SECTIONS:
			raise ValueError(f"Unknown configuration section '{section}'")

		if entries is None:
			continue

		if not isinstance(entries, dict):
			raise ValueError(f"Configuration section '{section}' must be a mapping")

		for key, value in entries.items():

			if key not in SECTIONS[section]:
				raise ValueError(f"Unknown key '{key}' in configuration section '{section}'")

			values[key] = value

	return GenerationConfig(**values)


def load_config (config_path: str = DEFAULT_CONFIG_PATH) -> GenerationConfig:

	"""
	Load configuration from a YAML file, or defaults if it does not exist.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return GenerationConfig()

	with open(config_path, 'r') as f:
		return config_from_dict(yaml.safe_load(f))
