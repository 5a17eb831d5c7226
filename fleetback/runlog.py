"""
runlog.py
One logger per backup run: full transcript to <log_dir>/<host>---<timestamp>.log,
plus host-prefixed lines on stdout. Runs never share handlers.
"""
from __future__ import annotations
import logging, sys
from pathlib import Path
from .util import ensure_dir

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(host)s: %(message)s"


def run_log_path(log_dir: Path, host: str, timestamp: str) -> Path:
    return Path(log_dir) / f"{host}---{timestamp}.log"


def drift_log_path(log_dir: Path, host: str) -> Path:
    return Path(log_dir) / f"{host}-config_change.log"


class _HostFilter(logging.Filter):
    def __init__(self, host: str):
        super().__init__()
        self.host = host

    def filter(self, record):
        record.host = self.host
        return True


def open_run_logger(log_path: Path, host: str, console: bool = True) -> logging.Logger:
    """Configure a file + console logger for a single run (appends to log_path)."""
    ensure_dir(log_path.parent)
    # not registered with logging.getLogger, so finished runs are not kept around
    logger = logging.Logger(f"fleetback.run.{host}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    fh = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(fh)

    if console:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(logging.INFO)
        ch.addFilter(_HostFilter(host))
        ch.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(ch)
    return logger


def flush_run_logger(logger: logging.Logger) -> None:
    for h in logger.handlers:
        h.flush()


def close_run_logger(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        h.flush()
        h.close()
        logger.removeHandler(h)
