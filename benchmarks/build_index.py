from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from spherequad import Runtime
from spherequad.algo import build_pyramid, sort_points, thread_links


@dataclass(frozen=True)
class BenchmarkResult:
    side: int
    sort_seconds: float
    pyramid_seconds: float
    thread_seconds: float

    @property
    def total_seconds(self) -> float:
        return self.sort_seconds + self.pyramid_seconds + self.thread_seconds


def _generate_points(rng: np.random.Generator, side: int, dtype: np.dtype) -> np.ndarray:
    count = side * side
    direction = rng.normal(size=(count, 3))
    direction /= np.linalg.norm(direction, axis=1, keepdims=True)
    # Uniform in a ball: radius scales with the cube root of a uniform draw.
    distance = 0.4 * np.cbrt(rng.uniform(size=(count, 1)))
    points = np.empty((count, 4), dtype=dtype)
    points[:, :3] = 0.5 + direction * distance
    points[:, 3] = 0.03
    return points


def benchmark_side(side: int, *, repeat: int, seed: int, dtype: np.dtype) -> BenchmarkResult:
    rng = np.random.default_rng(seed)
    best = None
    for _ in range(repeat):
        points = _generate_points(rng, side, dtype)
        start = time.perf_counter()
        result = sort_points(points)
        sorted_at = time.perf_counter()
        build_pyramid(result.points, side=side)
        pyramid_at = time.perf_counter()
        thread_links(side)
        threaded_at = time.perf_counter()
        candidate = BenchmarkResult(
            side=side,
            sort_seconds=sorted_at - start,
            pyramid_seconds=pyramid_at - sorted_at,
            thread_seconds=threaded_at - pyramid_at,
        )
        if best is None or candidate.total_seconds < best.total_seconds:
            best = candidate
    assert best is not None
    return best


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark the sort, pyramid and link threading stages of build_index."
    )
    parser.add_argument(
        "--sides",
        type=int,
        nargs="+",
        default=[16, 32, 64, 128],
        help="Grid sides to benchmark (powers of two).",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=3,
        help="Runs per side; the fastest is reported.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for data generation.",
    )
    parser.add_argument(
        "--precision",
        choices=("float32", "float64"),
        default="float32",
        help="Point buffer precision.",
    )
    parser.add_argument(
        "--numba",
        action="store_true",
        help="Use the compiled quicksort kernel.",
    )
    parser.add_argument(
        "--distance",
        choices=("proxy", "euclidean"),
        default="proxy",
        help="Distance measure for farthest-point selection.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> List[BenchmarkResult]:
    args = _parse_args(argv)
    context = Runtime(
        precision=args.precision,
        enable_numba=args.numba,
        distance_mode=args.distance,
        diagnostics=False,
        log_level="WARNING",
    ).activate()
    dtype = context.config.dtype

    results = []
    for side in args.sides:
        result = benchmark_side(side, repeat=max(1, args.repeat), seed=args.seed, dtype=dtype)
        results.append(result)
        print(
            f"side={result.side} points={side * side} "
            f"sort={result.sort_seconds:.4f}s "
            f"pyramid={result.pyramid_seconds:.4f}s "
            f"thread={result.thread_seconds:.4f}s "
            f"total={result.total_seconds:.4f}s"
        )
    return results


if __name__ == "__main__":
    main()
