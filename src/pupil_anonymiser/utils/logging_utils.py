# src/pupil_anonymiser/utils/logging_utils.py
import logging
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_path: Path | str, level: int = logging.INFO) -> None:
    """
    Root logger -> log file + console.
    Calling it again (one call per pipeline) only updates the level.
    """
    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(level)

    if logger.handlers:
        return

    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(fmt)
    logger.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)
