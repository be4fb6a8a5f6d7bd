import logging
import sys

import tessitura.composer
import tessitura.config
import tessitura.midi


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main () -> None:

	"""
	Compose one song from the configuration and save it as a MIDI file and a JSON tree.
	"""

	logger.info("Tessitura starting...")

	config_path = sys.argv[1] if len(sys.argv) > 1 else tessitura.config.DEFAULT_CONFIG_PATH
	config = tessitura.config.load_config(config_path)

	composer = tessitura.composer.Composer(config)
	composition = composer.compose()

	if composition.failures:
		logger.warning(f"{len(composition.failures)} parts of the song could not be rendered")

	tessitura.midi.save_midi(composition, config.midi_path, config.ticks_per_beat)

	if config.json_path:
		composition.save_json(config.json_path)


if __name__ == "__main__":
	main()
