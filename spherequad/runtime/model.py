from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

from spherequad.runtime.config import RuntimeConfig


class RuntimeModel(BaseModel):
    """Validated mirror of :class:`RuntimeConfig` used for declarative overrides."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    precision: Literal["float32", "float64"] = "float32"
    enable_numba: bool = False
    enable_diagnostics: bool = True
    log_level: str = "INFO"
    distance_mode: Literal["proxy", "euclidean"] = "proxy"
    initial_axis: Literal["deviation", "x", "y", "z"] = "deviation"
    verify_sort: bool = False

    @field_validator("precision", "distance_mode", "initial_axis", mode="before")
    @classmethod
    def _lower(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @classmethod
    def from_env(cls) -> "RuntimeModel":
        return cls.from_legacy_config(RuntimeConfig.from_env())

    @classmethod
    def from_legacy_config(cls, config: RuntimeConfig) -> "RuntimeModel":
        return cls(
            precision=config.precision,
            enable_numba=config.enable_numba,
            enable_diagnostics=config.enable_diagnostics,
            log_level=config.log_level,
            distance_mode=config.distance_mode,
            initial_axis=config.initial_axis,
            verify_sort=config.verify_sort,
        )

    def to_runtime_config(self) -> RuntimeConfig:
        return RuntimeConfig(**self.model_dump())


__all__ = ["RuntimeModel"]
