"""Command-line entry point: ``python -m contribbot``."""

import logging
import sys

from pydantic import ValidationError

from contribbot.config import get_settings

logger = logging.getLogger("contribbot")


def main() -> None:
    # Without a repository to check there is nothing to serve
    try:
        get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR, stream=sys.stderr)
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    from contribbot.main import run

    run()


if __name__ == "__main__":
    main()
