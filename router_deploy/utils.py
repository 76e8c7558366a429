"""Misc helpers."""

import logging
import os
from pathlib import Path
from typing import Optional

import coloredlogs


def setup_console_logging(
    default_log_level="info",
    log_file: Path | None = None,
    std_out_log_level: Optional[int] = None,
) -> logging.Logger:
    """Set up coloured log output for deployment scripts.

    - ``LOG_LEVEL`` environment variable overrides ``default_log_level``
    - Tune down some noisy dependency library logging

    :param log_file:
        Output both console and this log file.
        The file always gets at least ``INFO`` level.

    :return:
        Root logger
    """

    level = os.environ.get("LOG_LEVEL", default_log_level).upper()
    numeric_level = getattr(logging, level, None)
    assert isinstance(numeric_level, int), f"No level: {level}"

    if not std_out_log_level:
        std_out_log_level = numeric_level

    fmt = "%(asctime)s %(name)-30s %(message)s"
    date_fmt = "%H:%M:%S"

    coloredlogs.install(level=std_out_log_level, fmt=fmt, datefmt=date_fmt)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        min_level = min(logging.INFO, numeric_level)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(min_level)
        file_handler.setFormatter(logging.Formatter(fmt, date_fmt))

        root = logging.getLogger()
        root.setLevel(min_level)
        root.addHandler(file_handler)

    # Mute noise
    logging.getLogger("web3.providers.HTTPProvider").setLevel(logging.WARNING)
    logging.getLogger("web3.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("web3.manager.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
    return logging.getLogger()
