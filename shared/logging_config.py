"""
Logging configuration for the tenant console.

One call wires the root logger for the service and its launcher scripts:
a stdout handler, an optional file handler, and a shared line format
tagged with the component name. Calling it again replaces the handlers
it installed before instead of stacking new ones.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request at DEBUG/INFO
NOISY_LOGGERS = ("urllib3", "requests")

_installed_handlers: List[logging.Handler] = []


def level_from_name(name: Optional[str], default=logging.INFO) -> int:
    """Map 'debug' / 'INFO' / ... to a logging level; unknown names fall back to default."""
    value = logging.getLevelName(str(name or "").strip().upper())
    return value if isinstance(value, int) else default


def _console_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    return handlers


def setup_logging(
    component_name: str,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for a console component.

    Args:
        component_name: Component identifier (e.g., 'console')
        level: Logging level, numeric or by name ('debug', 'INFO', ...)
        log_file: Optional file path for log output; parent dirs are created
        format_string: Custom format string (default provided)

    Returns:
        The component logger
    """
    if isinstance(level, str):
        level = level_from_name(level)
    formatter = logging.Formatter(
        format_string or f"[%(asctime)s] [{component_name.upper()}] %(levelname)s - %(message)s",
        datefmt=DATE_FORMAT,
    )

    root = logging.getLogger()
    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    for handler in _console_handlers(log_file):
        handler.setFormatter(formatter)
        root.addHandler(handler)
        _installed_handlers.append(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger(component_name)
    logger.info(f"{component_name.upper()} logging initialized (level={logging.getLevelName(level)})")
    return logger
