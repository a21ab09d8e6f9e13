"""Public ergonomic façade for spherequad."""

from .builder import QuadtreeBuilder
from .runtime import Runtime

__all__ = [
    "QuadtreeBuilder",
    "Runtime",
]
