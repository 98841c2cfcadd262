# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Tag every log line with the command, namespace and lease holder
# CREATED: 17 OCT 2026
# ============================================================================
"""
Structured Logging

Who held the namespace lock, for which command, and when: every line a
command writes carries that context, so a run can be reconstructed from
stderr alone.

- log_context() pushes command / namespace / holder fields for a block
- get_logger() tags lines with the component that wrote them
- log_checkpoint() writes named markers (lease_acquired, lease_released,
  remote_config_loaded, remote_config_persisted, command_completed)
- configure_logging() picks a single-line human format or JSON
  (--json-logs or DEPLOY_LOG_FORMAT=json)

Logs go to stderr; stdout is reserved for command output.

Usage:
    logger = get_logger(__name__, ComponentType.LEASE)

    with log_context(command="node add", namespace="net1", holder_identity=holder):
        logger.info("Acquiring lease")
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Which part of the deployer wrote a line."""
    COMMAND = "command"
    LEASE = "lease"
    REMOTE_CONFIG = "remote_config"
    TOPOLOGY = "topology"
    INFRASTRUCTURE = "infrastructure"
    CLI = "cli"


# ============================================================================
# CONTEXT
# ============================================================================

@dataclass
class LogContext:
    """Fields attached to every line written inside a log_context() block."""
    command: Optional[str] = None
    namespace: Optional[str] = None
    cluster_ref: Optional[str] = None
    context: Optional[str] = None
    holder_identity: Optional[str] = None
    node_alias: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with extra flattened in."""
        result = {
            key: value
            for key, value in asdict(self).items()
            if value is not None and key != "extra"
        }
        result.update(self.extra)
        return result


_local = threading.local()


def _stack() -> list:
    if not hasattr(_local, "stack"):
        _local.stack = []
    return _local.stack


def get_current_context() -> LogContext:
    stack = _stack()
    return stack[-1] if stack else LogContext()


@contextmanager
def log_context(**fields):
    """
    Add fields to the logging context for the duration of the block.

    Nested blocks inherit the enclosing fields; extra dicts are merged.
    """
    parent = get_current_context()
    extra = {**parent.extra, **(fields.pop("extra", None) or {})}
    current = replace(parent, extra=extra, **fields)

    stack = _stack()
    stack.append(current)
    try:
        yield current
    finally:
        stack.pop()


# ============================================================================
# FORMATTERS
# ============================================================================

class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        component = getattr(record, "component", None)
        if component:
            log_data["component"] = component

        context = get_current_context().to_dict()
        if context:
            log_data["context"] = context

        extra = getattr(record, "extra", None)
        if extra:
            log_data["data"] = extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }
        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Single terminal line:

        2026-10-17 12:00:00 INFO     services.lease_manager [cmd=node add, ns=net1]: ...
    """

    _CONTEXT_LABELS = (
        ("command", "cmd"),
        ("namespace", "ns"),
        ("cluster_ref", "cluster"),
        ("holder_identity", "holder"),
    )

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        context = get_current_context()
        parts = [
            f"{label}={getattr(context, attr)}"
            for attr, label in self._CONTEXT_LABELS
            if getattr(context, attr)
        ]
        context_str = f" [{', '.join(parts)}]" if parts else ""

        extra = getattr(record, "extra", None)
        extra_str = f" {extra}" if extra else ""

        result = (
            f"{timestamp} {record.levelname.ljust(8)} {record.name}{context_str}: "
            f"{record.getMessage()}{extra_str}"
        )
        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"
        return result


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """
    Adapter carrying the logger's component.

    The formatters read the thread-local context themselves; the adapter
    only passes the component and the call's own extra fields.
    """

    def process(self, msg, kwargs):
        component = self.extra.get("component")
        kwargs["extra"] = {
            "extra": dict(kwargs.get("extra") or {}),
            "component": component.value if component is not None else None,
        }
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Route all logging to stderr in the chosen format.

    Args:
        level: Log level name or number
        json_output: JSON lines (also enabled by DEPLOY_LOG_FORMAT=json)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("DEPLOY_LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # The kubernetes client logs every request at DEBUG
    logging.getLogger("kubernetes").setLevel(max(level, logging.INFO))


# ============================================================================
# CHECKPOINTS
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Write a named marker on the "checkpoint" logger.

    The command, namespace and holder of the enclosing log_context() are
    copied into the record so a checkpoint stands on its own.
    """
    context = get_current_context()
    checkpoint_data: Dict[str, Any] = {
        "checkpoint": name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    for key in ("command", "namespace", "holder_identity"):
        value = getattr(context, key)
        if value:
            checkpoint_data[key] = value
    if data:
        checkpoint_data["data"] = data

    (logger or logging.getLogger("checkpoint")).info(
        f"CHECKPOINT: {name}", extra={"extra": checkpoint_data}
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
