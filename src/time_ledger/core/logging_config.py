"""Logging setup shared by the API server and the CLI."""

import logging
import os
from pathlib import Path
from typing import Optional

from time_ledger.core.config import ConfigManager

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: ConfigManager, log_file: Optional[Path] = None) -> None:
    """Configure the root logger from ``advanced.log_level``.

    Args:
        config: Configuration manager
        log_file: Optional file to log to in addition to the console
    """
    log_level = getattr(logging, str(config.get("advanced.log_level", "INFO")).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(LOG_FORMAT)
    ours = [h for h in root_logger.handlers if getattr(h, "_time_ledger", False)]

    # Configure once; repeated calls only adjust the level
    if not any(not isinstance(h, logging.FileHandler) for h in ours):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._time_ledger = True  # type: ignore[attr-defined]
        root_logger.addHandler(console_handler)
        ours.append(console_handler)

    if log_file is not None:
        target = os.path.abspath(log_file)
        if not any(getattr(h, "baseFilename", None) == target for h in ours):
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            file_handler._time_ledger = True  # type: ignore[attr-defined]
            root_logger.addHandler(file_handler)
            ours.append(file_handler)

    for handler in ours:
        handler.setLevel(log_level)
