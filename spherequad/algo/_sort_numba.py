from __future__ import annotations

import numba as nb
import numpy as np

I64 = np.int64


@nb.njit(cache=True)
def hoare_argsort(keys: np.ndarray) -> np.ndarray:
    """Order ``keys`` with a two-pointer quicksort and return the permutation.

    The pivot is always the middle element of the current range and equal
    keys are swapped, so the result is deterministic but not stable. Ranges
    are kept on an explicit stack; they are disjoint, so the visiting order
    does not change the final permutation.
    """

    n = keys.shape[0]
    perm = np.arange(n, dtype=I64)
    if n < 2:
        return perm
    work = keys.copy()
    stack = np.empty(2 * n + 2, dtype=I64)
    stack[0] = 0
    stack[1] = n - 1
    top = 2
    while top > 0:
        top -= 2
        low = stack[top]
        high = stack[top + 1]
        i = low
        j = high
        pivot = work[(low + high) // 2]
        while i <= j:
            while work[i] < pivot:
                i += 1
            while work[j] > pivot:
                j -= 1
            if i <= j:
                tmp_key = work[i]
                work[i] = work[j]
                work[j] = tmp_key
                tmp_idx = perm[i]
                perm[i] = perm[j]
                perm[j] = tmp_idx
                i += 1
                j -= 1
        if low < j:
            stack[top] = low
            stack[top + 1] = j
            top += 2
        if i < high:
            stack[top] = i
            stack[top + 1] = high
            top += 2
    return perm


def argsort_kernel(use_numba: bool):
    """Compiled kernel when ``use_numba`` is set, otherwise its Python source."""

    if use_numba:
        return hoare_argsort
    return hoare_argsort.py_func


__all__ = ["hoare_argsort", "argsort_kernel"]
