"""
In-place transpose of a flat row-major buffer.

Square matrices swap (i, j) with (j, i) above the diagonal.

For an R x C matrix with N = R * C elements the transpose moves the element
at flat offset a to

    pi(a) = (R * a) mod (N - 1)    for a < N - 1
    pi(N - 1) = N - 1

Offsets 0 and N - 1 never move. Every other offset belongs to exactly one
cycle of pi; rotating the values along each cycle once performs the whole
permutation without a second value buffer. A bitmap over [0, N - 1) records
which offsets have already been placed.
"""
from __future__ import annotations

import logging
from typing import Iterator

import numpy as np
import torch

logger = logging.getLogger(__name__)

# Above this many elements the non-square cycle walk (a Python loop) is slow.
LARGE_TRANSPOSE_WARN = 4_000_000


def transpose_index(a: int, rows: int, cols: int) -> int:
    """Destination offset of flat offset `a` when transposing rows x cols."""
    last = rows * cols - 1
    if not 0 <= a <= last:
        raise IndexError(f"offset {a} outside buffer of {rows * cols} elements")
    if a == last:
        return last
    return (rows * a) % last


def _cycle_starts(rows: int, cols: int) -> Iterator[int]:
    # The caller walks the cycle of each yielded start before resuming.
    last = rows * cols - 1
    if last < 2:
        return
    visited = np.zeros(last, dtype=bool)
    visited[0] = True
    for start in range(1, last):
        if visited[start]:
            continue
        yield start
        a = start
        while not visited[a]:
            visited[a] = True
            a = (rows * a) % last


def permutation_cycles(rows: int, cols: int) -> Iterator[list[int]]:
    """Yield the non-trivial cycles of the transpose permutation."""
    for start in _cycle_starts(rows, cols):
        cycle = [start]
        a = transpose_index(start, rows, cols)
        while a != start:
            cycle.append(a)
            a = transpose_index(a, rows, cols)
        if len(cycle) > 1:
            yield cycle


def transpose_square_(flat: torch.Tensor, n: int) -> None:
    """Transpose an n x n buffer in place."""
    m = flat.view(n, n)
    for i in range(n - 1):
        upper = m[i, i + 1 :].clone()
        m[i, i + 1 :] = m[i + 1 :, i]
        m[i + 1 :, i] = upper


def transpose_cycles_(flat: torch.Tensor, rows: int, cols: int) -> int:
    """
    Permute a rows x cols buffer in place into its cols x rows transpose.

    Returns the number of cycles walked. The caller swaps the dimensions.
    """
    last = rows * cols - 1
    values = flat.numpy()  # shares memory with `flat`
    n_cycles = 0
    for start in _cycle_starts(rows, cols):
        a = start
        carry = values[a]
        while True:
            a = (rows * a) % last
            values[a], carry = carry, values[a]
            if a == start:
                break
        n_cycles += 1
    logger.debug("transposed %dx%d buffer in place (%d cycles)", rows, cols, n_cycles)
    return n_cycles
