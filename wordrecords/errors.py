"""
Error log for the wordrecords CLI.

Unexpected failures are appended, with their traceback, to a log file in the
store directory; the terminal only gets a one-line message.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import get_default_store_path

ERROR_LOG_FILENAME = "wordrecords-errors.log"

_SEPARATOR = "=" * 60


def _format_entry(exc: BaseException, context: str) -> str:
    """One log entry: separator, UTC time and context, then the traceback."""
    header = f"[{datetime.now(timezone.utc).isoformat()}]"
    if context:
        header += f" {context}"
    body = "".join(traceback.format_exception(exc))
    return f"\n{_SEPARATOR}\n{header}\n{body}"


def log_exception(
    exc: Exception,
    context: str = "",
    store_path: Optional[Path] = None,
) -> Path:
    """
    Append ``exc`` and its traceback to the store's error log.

    The file is created owner-only (0600). Returns the log path whether or
    not the entry could be written.
    """
    log_path = (store_path or get_default_store_path()) / ERROR_LOG_FILENAME
    entry = _format_entry(exc, context)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(entry)
    except OSError:
        pass  # best effort; the CLI still reports the error
    return log_path
