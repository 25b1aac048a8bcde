"""Console and file logging for the ``audio-samples`` command line tool.

The library modules only create loggers under the ``audio_samples`` namespace.
Handlers are installed by ``configure_logging``, which the CLI calls once per
invocation; calling it again swaps the previous handlers for fresh ones.
"""

from __future__ import annotations

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

_LOGGER = logging.getLogger("audio_samples.logging")

LOG_DIR_ENV = "AUDIO_SAMPLES_LOG_DIR"
DEBUG_ENV = "AUDIO_SAMPLES_DEBUG"
LOG_FILE_NAME = "audio_samples.log"

_CONSOLE_HANDLER = "audio_samples.console"
_FILE_HANDLER = "audio_samples.file"
_LEVEL_TAGS = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}


class _TaggedFormatter(logging.Formatter):
    """``[warn] audio_samples.data: message`` style console lines."""

    def format(self, record: logging.LogRecord) -> str:
        record.level_tag = _LEVEL_TAGS.get(record.levelno, record.levelname.lower())
        return super().format(record)


def get_log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "audio_samples" / "logs"


def _open_log_file() -> Path:
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / LOG_FILE_NAME


def configure_logging() -> Path | None:
    """Install the console and file handlers; returns the log file path when it is writable."""
    logger = logging.getLogger("audio_samples")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        if handler.name in (_CONSOLE_HANDLER, _FILE_HANDLER):
            logger.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler(stream=sys.__stderr__)
    console.set_name(_CONSOLE_HANDLER)
    console.setLevel(logging.DEBUG if os.environ.get(DEBUG_ENV) else logging.INFO)
    console.setFormatter(_TaggedFormatter("[%(level_tag)s] %(name)s: %(message)s"))
    logger.addHandler(console)

    try:
        path = _open_log_file()
        file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("File logging disabled: %s", exc)
        return None
    file_handler.set_name(_FILE_HANDLER)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(file_handler)
    return path


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append ``exc`` with its traceback to the log file."""
    try:
        path = _open_log_file()
        with path.open("a", encoding="utf-8") as handle:
            stamp = datetime.now().isoformat(timespec="seconds")
            handle.write(f"[{stamp}] {context}: {type(exc).__name__}: {exc}\n")
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=handle)
    except OSError as log_exc:
        _LOGGER.warning("Could not record %s failure: %s", context, log_exc)
        return None
    return path
