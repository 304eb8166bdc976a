"""Logging configuration helpers."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"

# Client libraries log every outbound request at INFO.
QUIET_LOGGERS = ("httpx", "openai")


def configure_logging(level: int | str = logging.INFO) -> None:
    """Attach one stream handler to the ``snapplate`` logger.

    ``level`` accepts a number or a name such as ``"debug"``. Calling again
    only updates the level.
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger("snapplate")
    logger.setLevel(resolved)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelNamesMapping().get(level.strip().upper())
    if resolved is None:
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved
