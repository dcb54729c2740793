import logging
import sys

import atone.config
import atone.engine


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_BARS = 16
DEFAULT_FILENAME = "atone.mid"


def main () -> None:

	"""
	Render a configured engine to a MIDI file.

	Usage: ``python -m atone [config.yaml]``.  Besides the engine parameters
	the config may set ``bars`` (default 16) and ``filename`` (default
	``atone.mid``).
	"""

	logger.info("Atone starting...")

	config_path = sys.argv[1] if len(sys.argv) > 1 else "atone.yaml"
	data = atone.config.load_config(config_path)

	bars = data.pop("bars", DEFAULT_BARS)
	filename = data.pop("filename", DEFAULT_FILENAME)

	engine = atone.engine.Engine(atone.config.EngineConfig.from_dict(data))
	engine.render(bars=bars, filename=filename)

	logger.info(f"Rendered {bars} bars of {engine.algorithm.value} with seed {engine.seed}")


if __name__ == "__main__":
	main()
