"""
Logging setup for the Fare Forecaster.

``configure_logging(config)`` is called once by each CLI command, after the
config loads and before any store is read.  Library modules only ever do
``logging.getLogger(__name__)``; per-route work goes through
``route_logger()`` so every line carries the route it concerns.

Both formats render context passed via ``extra=``:

  text: ``2026-02-24T15:00:00Z [INFO] fare_forecaster.pipeline.analyze: Analyzing ... route=BKK->CNX``
  json: ``{"ts": "...", "level": "INFO", "logger": "...", "msg": "...", "route": "BKK->CNX"}``

Log records go to stderr so command output on stdout can be piped.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, MutableMapping

if TYPE_CHECKING:
    from fare_forecaster.config import LoggingConfig
    from fare_forecaster.models.price import Route

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


def _context(record: logging.LogRecord) -> dict[str, Any]:
    """Fields that came from ``extra=`` rather than the LogRecord itself."""
    return {
        key: val
        for key, val in record.__dict__.items()
        if key not in _RESERVED and not key.startswith("_")
    }


class _TextFormatter(logging.Formatter):
    """Classic one-line format with ``key=value`` context appended."""

    converter = time.gmtime

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(context.items()))
        return line


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg`` + context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(_context(record))
        return json.dumps(payload, default=str)


class RouteLoggerAdapter(logging.LoggerAdapter):
    """Adds ``route`` to every record; call-site ``extra=`` keys win."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def route_logger(name: str, route: "Route") -> RouteLoggerAdapter:
    """Logger for ``name`` whose records are tagged ``route=ORIGIN->DEST``."""
    return RouteLoggerAdapter(logging.getLogger(name), {"route": str(route)})


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Args:
        config: Logging configuration section from ``AppConfig``.
        debug:  When ``True`` (``AppConfig.debug``), log at DEBUG regardless
                of ``config.level``.
    """
    level = logging.DEBUG if debug else getattr(logging, config.level.upper(), logging.INFO)
    formatter: logging.Formatter = _JsonFormatter() if config.json_format else _TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.getLogger("lightgbm").setLevel(logging.WARNING)
