"""Shorthand access to the runtime configuration (``from spherequad import config``)."""

from __future__ import annotations

from spherequad.runtime.config import (
    RuntimeConfig,
    RuntimeContext,
    configure_runtime,
    current_runtime_context,
    describe_runtime,
    reset_runtime_config_cache,
    reset_runtime_context,
    runtime_config,
    runtime_context,
)

__all__ = [
    "RuntimeConfig",
    "RuntimeContext",
    "configure_runtime",
    "current_runtime_context",
    "describe_runtime",
    "reset_runtime_config_cache",
    "reset_runtime_context",
    "runtime_config",
    "runtime_context",
]
