# mediafocus/common/logging.py
from __future__ import annotations

import logging


def _level_from_settings() -> int:
    # imported lazily so settings can log during their own construction later on
    from mediafocus.common.settings import get_settings

    name = str(get_settings().log_level).upper()
    return getattr(logging, name, logging.INFO)


def get_logger(name: str = "mediafocus", level: int | None = None) -> logging.Logger:
    """
    Return a logger that plays nice with Uvicorn if running under it.
    If no handlers are set, we add a basicConfig once.
    """
    if level is None:
        level = _level_from_settings()
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.setLevel(level)
    return logger
