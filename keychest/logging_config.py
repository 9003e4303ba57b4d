import logging
import sys

import pendulum

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


class PendulumFormatter(logging.Formatter):
    """ISO-8601 timestamps in local time."""

    def formatTime(self, record, datefmt=None):
        return pendulum.from_timestamp(record.created, tz=pendulum.local_timezone()).to_iso8601_string()


def setup_logging(level="WARNING", stream=None) -> None:
    """
    Configure the keychest logger once. Later calls only adjust the level.
    """
    logger = logging.getLogger("keychest")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logger.setLevel(level)

    if logger.handlers:
        return  # already configured

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(PendulumFormatter(LOG_FORMAT))
    logger.addHandler(handler)
