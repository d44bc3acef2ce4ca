"""Logging setup for the API process."""

import logging


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging for the API process.

    Args:
        level: Logging level, as a number or a name such as "DEBUG"
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("taskforge").setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
