"""
Logging setup shared by the CLI and the REST API.

Nothing is configured at import time. Each entry point calls
``setup_logging`` once after the settings are loaded; values it is not given
come from the ``GITHUB_LOG_*`` settings.

Output goes to stderr, so CLI commands can print JSON on stdout while
logging. A log file is written only when ``GITHUB_ENABLE_FILE_LOGGING`` is on.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

FORMATS = {"simple": SIMPLE_FORMAT, "detailed": DETAILED_FORMAT, "json": JSON_FORMAT}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FILE_NAME = "github.log"

# Per-logger levels; project loggers follow the console level once it is DEBUG
MODULE_LOG_LEVELS = {
    "github.client": "INFO",
    "github.capabilities": "INFO",
    "github.service": "INFO",
    "github.interfaces": "INFO",
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _defaults() -> Dict[str, Any]:
    """Logging values from the settings, or straight from the environment when they do not validate."""
    from github.core.config import get_settings

    try:
        settings = get_settings()
    except ValidationError:
        # Still log something useful; the caller reports the bad configuration itself
        return {
            "log_level": os.getenv("GITHUB_LOG_LEVEL", "INFO"),
            "log_format": os.getenv("GITHUB_LOG_FORMAT", "detailed"),
            "log_file_dir": os.getenv("GITHUB_LOG_FILE_DIR", "logs"),
            "enable_file_logging": os.getenv("GITHUB_ENABLE_FILE_LOGGING", "false").lower() in ("true", "1", "yes"),
        }
    return {
        "log_level": settings.log_level,
        "log_format": settings.log_format,
        "log_file_dir": settings.log_file_dir,
        "enable_file_logging": settings.enable_file_logging,
    }


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: Optional[bool] = None,
    log_file_dir: Optional[str] = None,
) -> None:
    """
    (Re)configure the root logger.

    Calling it again replaces the previous handlers instead of adding more.

    Args:
        log_level: One of ``LOG_LEVELS`` (case-insensitive); anything else means INFO
        log_format: simple, detailed or json; anything else means detailed
        enable_file: Also write ``github.log``; the file always receives DEBUG
        log_file_dir: Directory for the log file, created if missing
    """
    defaults = _defaults()
    level = (log_level or defaults["log_level"]).upper()
    if level not in LOG_LEVELS:
        level = "INFO"
    fmt = log_format or defaults["log_format"]
    write_file = defaults["enable_file_logging"] if enable_file is None else enable_file
    file_dir = Path(log_file_dir or defaults["log_file_dir"])

    formatter = logging.Formatter(FORMATS.get(fmt, DETAILED_FORMAT), datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if write_file:
        file_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_dir / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        if level == "DEBUG" and module_name.startswith("github."):
            module_level = "DEBUG"
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.debug(f"Logging configured: level={level}, format={fmt}, file_logging={write_file}")


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (pass ``__name__``)."""
    return logging.getLogger(name)
