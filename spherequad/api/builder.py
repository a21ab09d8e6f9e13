from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from spherequad.algo.build import SphereQuadtree, build_index
from spherequad.api.runtime import Runtime


@dataclass(frozen=True)
class QuadtreeBuilder:
    """Thin façade around the sort, pyramid and threading pipeline."""

    runtime: Runtime = field(default_factory=Runtime)
    tree: SphereQuadtree | None = None

    def fit(self, points: Any) -> SphereQuadtree:
        context = self.runtime.activate()
        return build_index(points, runtime_config=context.config)

    def fitted(self, points: Any) -> "QuadtreeBuilder":
        """Return a builder holding the tree built from ``points``."""

        return QuadtreeBuilder(runtime=self.runtime, tree=self.fit(points))

    def query_overlaps(self, center: Any, radius: float) -> np.ndarray:
        tree = self._require_tree()
        self.runtime.activate()
        return tree.query_overlaps(center, radius)

    def _require_tree(self) -> SphereQuadtree:
        if self.tree is None:
            raise ValueError("QuadtreeBuilder has no tree; call fitted() first.")
        return self.tree


__all__ = ["QuadtreeBuilder"]
