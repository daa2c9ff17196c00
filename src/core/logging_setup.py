"""
Logging configuration for processes that host the engine (service, scripts, tests).

Modules only ever do `logger = logging.getLogger(__name__)`; this is the one place where handlers get attached.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# marker attribute so repeated calls only remove the handlers we installed ourselves
_HANDLER_MARK = "_sumzero_handler"


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    run_name: Optional[str] = None,
    format_string: Optional[str] = None,
) -> Optional[Path]:
    """
    Attach a console handler (and optionally a file handler) to the root logger.
    ----

    * Safe to call more than once: previously installed handlers are replaced, foreign handlers are left alone.
    * With `log_dir` given, logs also go to `<log_dir>/<run_name>.log`. Without a run name a timestamp is used.

    Returns the path of the log file, if one was created.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_MARK, True)
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    name = run_name or datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{name}.log"

    file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    setattr(file_handler, _HANDLER_MARK, True)
    root_logger.addHandler(file_handler)
    return log_file
