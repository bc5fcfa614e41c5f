# alt_text_bot/utils.py

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
HANDLER_NAME = "alt_text_bot"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configures the root logger with a single stream handler.

    Args:
        level (Optional[str]): Log level name. Falls back to the LOG_LEVEL setting.
    """
    if level is None:
        from .config import settings
        level = settings.LOG_LEVEL

    root = logging.getLogger()
    # Uvicorn's reloader imports the app twice; avoid stacking handlers.
    if not any(h.get_name() == HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    root.setLevel(level.upper())
    logging.getLogger("alt_text_bot").info(f"Logging configured at level {level.upper()}.")
