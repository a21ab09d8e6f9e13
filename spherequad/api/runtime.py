from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict

from spherequad import config as sq_config
from spherequad.runtime.model import RuntimeModel


_ATTR_TO_FIELD = {
    "precision": "precision",
    "enable_numba": "enable_numba",
    "diagnostics": "enable_diagnostics",
    "log_level": "log_level",
    "distance_mode": "distance_mode",
    "initial_axis": "initial_axis",
    "verify_sort": "verify_sort",
}


@dataclass(frozen=True)
class Runtime:
    """Declarative runtime configuration that can activate a spherequad context.

    Every field is optional; unset fields fall back to the environment (or to
    ``base`` when converting with :meth:`to_config`).
    """

    precision: str | None = None
    enable_numba: bool | None = None
    diagnostics: bool | None = None
    log_level: str | None = None
    distance_mode: str | None = None
    initial_axis: str | None = None
    verify_sort: bool | None = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_model(self, base: RuntimeModel | None = None) -> RuntimeModel:
        base_model = base or RuntimeModel.from_env()
        payload = base_model.model_dump()

        for attr, field_name in _ATTR_TO_FIELD.items():
            value = getattr(self, attr)
            if value is None:
                continue
            payload[field_name] = value

        for key, value in self.extra.items():
            payload[key] = value

        return RuntimeModel(**payload)

    def to_config(self, base: sq_config.RuntimeConfig | None = None) -> sq_config.RuntimeConfig:
        base_model = (
            RuntimeModel.from_env()
            if base is None
            else RuntimeModel.from_legacy_config(base)
        )
        model = self.to_model(base=base_model)
        return model.to_runtime_config()

    def activate(self) -> sq_config.RuntimeContext:
        """Install this runtime as the active global context and return it."""

        config = self.to_config()
        return sq_config.configure_runtime(config)

    def describe(self) -> Dict[str, Any]:
        config = self.to_config()
        return {
            "precision": config.precision,
            "enable_numba": config.enable_numba,
            "enable_diagnostics": config.enable_diagnostics,
            "log_level": config.log_level,
            "distance_mode": config.distance_mode,
            "initial_axis": config.initial_axis,
            "verify_sort": config.verify_sort,
        }

    def with_updates(self, **kwargs: Any) -> "Runtime":
        return replace(self, **kwargs)

    @classmethod
    def from_active(cls) -> "Runtime":
        active = sq_config.current_runtime_context()
        if active is not None:
            return cls.from_config(active.config)
        return cls.from_config(sq_config.RuntimeConfig.from_env())

    @classmethod
    def from_config(cls, config: sq_config.RuntimeConfig) -> "Runtime":
        return cls(
            precision=config.precision,
            enable_numba=config.enable_numba,
            diagnostics=config.enable_diagnostics,
            log_level=config.log_level,
            distance_mode=config.distance_mode,
            initial_axis=config.initial_axis,
            verify_sort=config.verify_sort,
        )


__all__ = ["Runtime"]
