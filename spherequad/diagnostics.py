from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

import psutil

try:  # pragma: no cover - not available on Windows
    import resource
except ImportError:  # pragma: no cover - platform dependent
    resource = None  # type: ignore

from spherequad import config as sq_config


@dataclass
class _ResourceSnapshot:
    wall: float
    cpu_user: float | None
    cpu_system: float | None
    rss: int | None


def _snapshot(enabled: bool) -> _ResourceSnapshot:
    wall = time.perf_counter()
    if not enabled:
        return _ResourceSnapshot(wall=wall, cpu_user=None, cpu_system=None, rss=None)
    cpu_user = cpu_system = None
    if resource is not None:
        usage = resource.getrusage(resource.RUSAGE_SELF)
        cpu_user = float(usage.ru_utime)
        cpu_system = float(usage.ru_stime)
    rss = int(psutil.Process().memory_info().rss)
    return _ResourceSnapshot(wall=wall, cpu_user=cpu_user, cpu_system=cpu_system, rss=rss)


def _format_value(value: Any) -> str:
    if value is None:
        return "NA"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


def _delta_ms(after: float | None, before: float | None) -> float | None:
    if after is None or before is None:
        return None
    return (after - before) * 1e3


@dataclass
class OperationLog:
    """Mutable record collected while an operation runs."""

    name: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, **values: Any) -> None:
        self.metadata.update(values)


@contextmanager
def log_operation(logger: logging.Logger, name: str) -> Iterator[OperationLog]:
    """Time ``name`` and emit a single ``op=<name>`` record when it finishes.

    Resource fields (CPU time, RSS delta) are reported as ``NA`` when
    diagnostics are disabled in the runtime configuration.
    """

    enabled = sq_config.runtime_config().enable_diagnostics
    op_log = OperationLog(name=name)
    before = _snapshot(enabled)
    status = "error"
    try:
        yield op_log
        status = "ok"
    finally:
        after = _snapshot(enabled)
        rss_delta = None
        if after.rss is not None and before.rss is not None:
            rss_delta = after.rss - before.rss
        fields = {
            "status": status,
            "wall_ms": (after.wall - before.wall) * 1e3,
            "cpu_user_ms": _delta_ms(after.cpu_user, before.cpu_user),
            "cpu_system_ms": _delta_ms(after.cpu_system, before.cpu_system),
            "rss_delta": rss_delta,
        }
        fields.update(op_log.metadata)
        message = " ".join(
            [f"op={name}"] + [f"{key}={_format_value(value)}" for key, value in fields.items()]
        )
        logger.info(message)


__all__ = ["OperationLog", "log_operation"]
