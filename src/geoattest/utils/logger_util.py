import logging
import os
from pathlib import Path


def get_logger(name: str, level=logging.INFO) -> logging.Logger:
    """Get a named logger with standard formatting.

    Example:
        logger = get_logger(__name__)
        logger.info("This is an info message.")

    File output is only enabled when GEOATTEST_LOG_DIR points at a directory;
    otherwise records are streamed to stderr.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)

    # avoid adding duplicate handlers if called repeatedly (common in tests)
    if logger.handlers:
        logger.setLevel(level)
        return logger

    logs_dir = None
    configured_dir = os.environ.get("GEOATTEST_LOG_DIR")
    if configured_dir:
        logs_dir = Path(configured_dir)
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            # If we cannot create the log directory, fall back to streaming only
            logs_dir = None

    formatter = logging.Formatter(
        '%(asctime)s     || %(name)s \n%(levelname)s   || %(message)s \n',
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    if logs_dir is not None:
        filehandler = logging.FileHandler(str(logs_dir / f"{name}.log"), encoding="utf-8")
        filehandler.setFormatter(formatter)
        logger.addHandler(filehandler)

    logger.setLevel(level)
    # stop passing records to the root logger (avoid duplicated messages)
    logger.propagate = False

    logger.debug("'%s' initialized with level %s", name, logging.getLevelName(level))
    return logger


def level_from_env(default=logging.INFO) -> int:
    """Resolve GEOATTEST_LOG_LEVEL (name or number) to a logging level."""
    raw = os.environ.get("GEOATTEST_LOG_LEVEL")
    if not raw:
        return default
    raw = raw.strip()
    if raw.isdigit():
        return int(raw)
    resolved = logging.getLevelName(raw.upper())
    return resolved if isinstance(resolved, int) else default
