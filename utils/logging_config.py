from __future__ import annotations

import sys
from pathlib import Path
from loguru import logger


def configure_logging(log_file: Path | None = None, *, level: str = "INFO") -> None:
    logger.remove()
    logger.add(lambda msg: print(msg, end="", file=sys.stderr), level=level)
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level="DEBUG", rotation="1 MB", retention=5)
