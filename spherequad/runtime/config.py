from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

_LOGGER = logging.getLogger("spherequad")

_SUPPORTED_PRECISION = {"float32", "float64"}
_DISTANCE_MODES = {"proxy", "euclidean"}
_INITIAL_AXES = {"deviation", "x", "y", "z"}
_DEFAULT_PRECISION = "float32"
_DEFAULT_DISTANCE_MODE = "proxy"
_DEFAULT_INITIAL_AXIS = "deviation"


def _bool_from_env(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _normalise_precision(value: str | None) -> str:
    if value is None:
        return _DEFAULT_PRECISION
    value = value.strip().lower()
    if value not in _SUPPORTED_PRECISION:
        raise ValueError(f"Unsupported precision '{value}'. Expected one of {_SUPPORTED_PRECISION}.")
    return value


def _parse_distance_mode(value: str | None) -> str:
    if value is None:
        return _DEFAULT_DISTANCE_MODE
    mode = value.strip().lower()
    if mode not in _DISTANCE_MODES:
        raise ValueError(
            f"Unsupported distance mode '{mode}'. Expected one of {_DISTANCE_MODES}."
        )
    return mode


def _parse_initial_axis(value: str | None) -> str:
    if value is None:
        return _DEFAULT_INITIAL_AXIS
    axis = value.strip().lower()
    if axis not in _INITIAL_AXES:
        raise ValueError(
            f"Unsupported initial axis '{axis}'. Expected one of {_INITIAL_AXES}."
        )
    return axis


@dataclass(frozen=True)
class RuntimeConfig:
    precision: str
    enable_numba: bool
    enable_diagnostics: bool
    log_level: str
    distance_mode: str
    initial_axis: str
    verify_sort: bool

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.precision)

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        precision = _normalise_precision(os.getenv("SPHEREQUAD_PRECISION"))
        enable_numba = _bool_from_env(os.getenv("SPHEREQUAD_ENABLE_NUMBA"), default=False)
        enable_diagnostics = _bool_from_env(
            os.getenv("SPHEREQUAD_ENABLE_DIAGNOSTICS"), default=True
        )
        log_level = os.getenv("SPHEREQUAD_LOG_LEVEL", "INFO").upper()
        distance_mode = _parse_distance_mode(os.getenv("SPHEREQUAD_DISTANCE"))
        initial_axis = _parse_initial_axis(os.getenv("SPHEREQUAD_INITIAL_AXIS"))
        verify_sort = _bool_from_env(os.getenv("SPHEREQUAD_VERIFY_SORT"), default=False)
        return cls(
            precision=precision,
            enable_numba=enable_numba,
            enable_diagnostics=enable_diagnostics,
            log_level=log_level,
            distance_mode=distance_mode,
            initial_axis=initial_axis,
            verify_sort=verify_sort,
        )


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("spherequad")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)


@dataclass
class RuntimeContext:
    """Runtime configuration plus its one-time side effects."""

    config: RuntimeConfig
    _activated: bool = False

    def activate(self) -> None:
        """Apply logging side effects once."""

        if self._activated:
            return
        _configure_logging(self.config.log_level)
        if self.config.enable_numba:
            _LOGGER.debug("Numba kernels enabled for spatial sorting.")
        self._activated = True


_CONTEXT_CACHE: Optional[RuntimeContext] = None


def runtime_context() -> RuntimeContext:
    """Return the cached runtime context, constructing it if necessary."""

    global _CONTEXT_CACHE
    if _CONTEXT_CACHE is None:
        config = RuntimeConfig.from_env()
        context = RuntimeContext(config=config)
        context.activate()
        _CONTEXT_CACHE = context
    return _CONTEXT_CACHE


def current_runtime_context() -> RuntimeContext | None:
    """Return the active context without constructing one."""

    return _CONTEXT_CACHE


def runtime_config() -> RuntimeConfig:
    return runtime_context().config


def configure_runtime(config: RuntimeConfig) -> RuntimeContext:
    """Force the active runtime context to use ``config`` instead of env defaults."""

    context = RuntimeContext(config=config)
    context.activate()
    _set_runtime_context(context)
    return context


def _set_runtime_context(context: RuntimeContext) -> None:
    global _CONTEXT_CACHE
    _CONTEXT_CACHE = context


def reset_runtime_config_cache() -> None:
    reset_runtime_context()


def reset_runtime_context() -> None:
    """Clear the cached runtime context (used in tests)."""

    global _CONTEXT_CACHE
    _CONTEXT_CACHE = None


def describe_runtime() -> Dict[str, Any]:
    """Return a serialisable view of the active runtime configuration."""

    config = runtime_config()
    return {
        "precision": config.precision,
        "enable_numba": config.enable_numba,
        "enable_diagnostics": config.enable_diagnostics,
        "log_level": config.log_level,
        "distance_mode": config.distance_mode,
        "initial_axis": config.initial_axis,
        "verify_sort": config.verify_sort,
    }


__all__ = [
    "RuntimeConfig",
    "RuntimeContext",
    "runtime_context",
    "current_runtime_context",
    "runtime_config",
    "configure_runtime",
    "reset_runtime_context",
    "reset_runtime_config_cache",
    "describe_runtime",
]
