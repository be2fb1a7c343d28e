# src/common/logging_config.py

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "info") -> None:
    """Configure root logging once for the application process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQL echo is controlled by DEBUG on the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
