from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level of the ``datascope`` package logger.

    Notes:
    - Uvicorn (or the embedding application) owns handlers; we only set levels.
    - ``DATASCOPE_LOG_LEVEL=DEBUG`` logs cache misses and every query rewrite.
    """

    normalized = level.upper()
    logging.getLogger("datascope").setLevel(normalized)
    logging.getLogger("datascope").propagate = True
