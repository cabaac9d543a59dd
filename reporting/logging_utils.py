from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Mapping, Optional

import yaml

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(context)s | %(message)s"


class ContextFilter(logging.Filter):
    """Inject structured context data into log records."""

    def __init__(self, base_context: Optional[Mapping[str, object]] = None) -> None:
        super().__init__()
        self._base_context = dict(base_context or {})

    @staticmethod
    def _format(context_map: Mapping[str, object]) -> str:
        if not context_map:
            return "-"
        return " ".join(f"{key}={context_map[key]}" for key in sorted(context_map))

    def filter(self, record: logging.LogRecord) -> bool:
        merged = dict(self._base_context)
        merged.update(getattr(record, "context_map", {}) or {})
        record.context = self._format(merged)
        return True


class StructuredAdapter(logging.LoggerAdapter):
    """Logger adapter that carries structured context across log calls.

    A ``context=`` mapping passed to any log call is merged on top of the
    adapter's own context for that record only.
    """

    def process(self, msg, kwargs):
        supplied = kwargs.pop("context", None) or {}
        context_map = dict(self.extra.get("context_map", {}))
        context_map.update(supplied)

        extra = kwargs.setdefault("extra", {})
        merged = dict(extra.get("context_map", {}))
        merged.update(context_map)
        extra["context_map"] = merged
        return msg, kwargs


def get_logger(name: str, *, context: Optional[Mapping[str, object]] = None) -> logging.LoggerAdapter:
    """Return a logger that automatically carries structured context."""
    base_logger = logging.getLogger(name)
    return StructuredAdapter(base_logger, {"context_map": dict(context or {})})


def setup_logging(
    log_path: Optional[Path] = None,
    level: str = "INFO",
    config_path: Optional[Path] = None,
    *,
    context: Optional[Mapping[str, object]] = None,
) -> None:
    """Configure root logging for a Gerber run.

    When ``config_path`` points at a YAML ``dictConfig`` file it is applied
    as-is; otherwise a stream handler (and a file handler when ``log_path`` is
    given) is installed with the standard format. Every root handler gets a
    ``ContextFilter`` so ``%(context)s`` is always available.
    """
    filter_instance = ContextFilter(context)
    root = logging.getLogger()

    if config_path is not None and Path(config_path).exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        log_level = getattr(logging, level.upper(), logging.INFO)
        root.setLevel(log_level)
        for handler in list(root.handlers):
            root.removeHandler(handler)

        formatter = logging.Formatter(LOG_FORMAT)
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if log_path is not None:
            log_path = Path(log_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(str(log_path), encoding="utf-8"))
        for handler in handlers:
            handler.setLevel(log_level)
            handler.setFormatter(formatter)
            root.addHandler(handler)

    for handler in root.handlers:
        handler.addFilter(filter_instance)
