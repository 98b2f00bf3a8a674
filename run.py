from __future__ import annotations
import argparse
import logging
import sys

from engine.errors import ConfigError
from engine.settings import load_settings

logger = logging.getLogger("town")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Town map")
    parser.add_argument("--config", default="game/config/defaults.yaml", help="settings YAML")
    parser.add_argument("--storyline", default=None, help="start in this storyline (debug)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from engine.app import GameApp
    try:
        app = GameApp(load_settings(args.config), storyline=args.storyline)
    except ConfigError as e:
        logger.error("content error: %s", e)
        return 1
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
