# src/todox/logging_setup.py

"""
Logging for the reminder service.

Three sinks:
- console: what an operator watching the terminal needs
- todox.log: everything, for debugging
- reminders.log: the reminder ledger (schedule / fire / cancel / restore), one line per event

While the REPL owns the terminal, routine reminder logs stay out of the console:
the console surface already prints the reminders themselves.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

REMINDER_LOGGERS = ("todox.reminders",)
MATRIX_LOGGERS = ("nio", "todox.connectors.matrix_client", "todox.connectors.matrix_notifier")

_CONSOLE_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_FILE_FMT = "%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s"
_LEDGER_FMT = "%(asctime)s %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _under(name: str, prefixes: tuple[str, ...]) -> bool:
    return any(name == p or name.startswith(p + ".") for p in prefixes)


class ConsoleFilter(logging.Filter):
    """
    Console policy:
    - reminder engine logs: WARNING+ while the REPL is active, otherwise all
    - Matrix client/surface and nio: WARNING+
    - other todox loggers: all
    - everything else (py.warnings included): ERROR+
    """

    def __init__(self, *, repl_active: bool) -> None:
        super().__init__()
        self.repl_active = repl_active

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if _under(name, REMINDER_LOGGERS):
            return record.levelno >= logging.WARNING or not self.repl_active
        if _under(name, MATRIX_LOGGERS):
            return record.levelno >= logging.WARNING
        if name.startswith("todox."):
            return True
        return record.levelno >= logging.ERROR


class ReminderLedgerFilter(logging.Filter):
    """Only reminder-engine records reach reminders.log."""

    def filter(self, record: logging.LogRecord) -> bool:
        return _under(record.name, REMINDER_LOGGERS)


def setup_logging(
    *,
    log_dir: str | Path = ".local/todox",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    repl_active: bool = False,
) -> Path:
    """
    Configure the root logger. Call once, before the first log line.

    Returns the log directory.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FMT, datefmt=_DATEFMT))
    console.addFilter(ConsoleFilter(repl_active=repl_active))
    root.addHandler(console)

    full = logging.FileHandler(str(log_dir / "todox.log"), encoding="utf-8")
    full.setLevel(file_level)
    full.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_DATEFMT))
    root.addHandler(full)

    ledger = logging.FileHandler(str(log_dir / "reminders.log"), encoding="utf-8")
    ledger.setLevel(logging.INFO)
    ledger.setFormatter(logging.Formatter(_LEDGER_FMT, datefmt=_DATEFMT))
    ledger.addFilter(ReminderLedgerFilter())
    root.addHandler(ledger)

    logging.captureWarnings(True)
    # nio logs every sync/HTTP round trip at DEBUG.
    logging.getLogger("nio").setLevel(logging.WARNING)
    return log_dir
