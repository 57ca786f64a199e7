from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Send application logs to stderr.

    The root handler is only installed when nothing else (uvicorn, pytest)
    has configured one already; the "app" logger level is always applied.
    """
    level_name = str(level or "INFO").upper()
    if not isinstance(logging.getLevelName(level_name), int):
        level_name = "INFO"

    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    logging.getLogger("app").setLevel(level_name)
