"""Logging setup for the article agent.

The CLI calls ``configure_logging`` once after ``.env`` is loaded; hosts that
embed ``ArticlePipeline`` may call it themselves or keep their own handlers.
Pipeline modules only ask for named loggers (``ag.pipeline.article``,
``ag.processors.dedup`` and so on) and never add handlers.

Environment:
  - LOG_LEVEL (default: INFO)
  - LOG_OUTPUT: stdout, file or both (default: stdout)
  - LOG_FILE_PATH (default: logs/article-agent.log)
  - LOG_FORMAT: text or json (default: text)
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Literal, Optional

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_OUTPUT = os.environ.get("LOG_OUTPUT", "stdout").lower()
LOG_FILE_PATH = os.environ.get("LOG_FILE_PATH", "logs/article-agent.log")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "text").lower()

LogOutput = Literal["stdout", "file", "both"]
LogFormat = Literal["text", "json"]

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
_JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", '
    '"file": "%(filename)s:%(lineno)d", "message": "%(message)s"}'
)

# Libraries whose INFO output buries pipeline stage messages
_NOISY_LOGGERS = ("urllib3", "requests")

_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUPS = 5


def _build_handlers(output: str, file_path: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if output in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if output in ("file", "both"):
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(file_path, maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS))
    return handlers


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    module: Optional[str] = None,
) -> None:
    """Replace the root handlers with the agent's stdout and/or rotating file handlers.

    Arguments left as ``None`` come from the environment at call time, so a
    ``.env`` loaded by the CLI is honoured. ``module`` additionally pins one
    logger (for example ``"ag.processors.dedup"``) to ``level``.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", LOG_LEVEL)
    if isinstance(level, str):
        level = level.upper()
    if log_format is None:
        log_format = (os.environ.get("LOG_FORMAT") or LOG_FORMAT).lower()
    if output is None:
        output = (os.environ.get("LOG_OUTPUT") or LOG_OUTPUT).lower()
    if file_path is None:
        file_path = os.environ.get("LOG_FILE_PATH") or LOG_FILE_PATH

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(_JSON_FORMAT if log_format == "json" else _TEXT_FORMAT)
    for handler in _build_handlers(output, file_path):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if module:
        logging.getLogger(module).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
