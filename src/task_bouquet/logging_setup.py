# src/task_bouquet/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "bouquet.log"

# Loggers that stay on the console only at WARNING+ (they fire on every refresh cycle).
_TIMER_LOGGERS = ("task_bouquet.board.scheduler",)


class _BoardConsoleFilter(logging.Filter):
    """Console shows board activity; the refresh timer and third parties only when something is wrong."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("task_bouquet."):
            # httpx, asyncio, py.warnings, ...
            return record.levelno >= logging.ERROR
        if name.startswith(_TIMER_LOGGERS):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/bouquet",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route logs to stderr (filtered, so the board REPL stays readable) and to
    <log_dir>/bouquet.log (everything, including gateway failures and alert
    previews). Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_BoardConsoleFilter())
    root.addHandler(console)

    board_log = logging.FileHandler(str(log_file), encoding="utf-8")
    board_log.setLevel(file_level)
    board_log.setFormatter(fmt)
    root.addHandler(board_log)

    logging.captureWarnings(True)

    # Request lines from the 30 s refresh would flood the file too.
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return log_file
