"""Structured logging helpers: JSON lines with context."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

_ROOT_LOGGER = "platform_builder"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _root_logger() -> logging.Logger:
    logger = logging.getLogger(_ROOT_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the platform_builder hierarchy."""
    root = _root_logger()
    if not name or name == _ROOT_LOGGER:
        return root
    if not name.startswith(_ROOT_LOGGER + "."):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(verbose: bool = False) -> logging.Logger:
    logger = _root_logger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger


def log_dependencies(
    logger: logging.Logger, platform: str, version: str, dependencies: list[str]
) -> None:
    """Emit the declared dependencies of an app as a single INFO record."""
    deps = [d.strip() for d in dependencies if d.strip()]
    logger.info(
        "Dependencies for %s %s: %s", platform, version or "(unspecified)", ", ".join(deps)
    )
