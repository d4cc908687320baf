"""
malg.storage

One flat, contiguous, row-major value buffer per matrix.

Element (i, j) of an R x C matrix lives at offset i * C + j. Rows are
addressed by computing that offset; there is no separate array of row
handles to keep in sync with the buffer.
"""
from __future__ import annotations

import logging
import operator
from typing import Any

import torch

from malg.exceptions import AllocationFailure, InvalidDimension

logger = logging.getLogger(__name__)


def _as_dim(n: Any, name: str) -> int:
    try:
        k = operator.index(n)
    except TypeError as e:
        raise InvalidDimension(f"number of {name} must be an integer. Got {n!r}") from e
    if k <= 0:
        raise InvalidDimension(f"number of {name} is {k}")
    return k


def check_dimensions(rows: Any, cols: Any) -> tuple[int, int]:
    """Validate a requested shape before anything is allocated."""
    return _as_dim(rows, "rows"), _as_dim(cols, "cols")


def allocate(rows: Any, cols: Any, *, dtype: torch.dtype) -> torch.Tensor:
    """
    Allocate an uninitialized buffer of rows * cols elements.

    Returns
    -------
    buf : (rows * cols,) contiguous CPU tensor
    """
    rows, cols = check_dimensions(rows, cols)
    try:
        buf = torch.empty(rows * cols, dtype=dtype)
    except (MemoryError, RuntimeError) as e:
        raise AllocationFailure(
            f"cannot allocate {rows}x{cols} buffer of {dtype}: {e}"
        ) from e
    logger.debug("allocated %dx%d buffer (%s)", rows, cols, dtype)
    return buf


def row_offsets(rows: int, cols: int) -> list[int]:
    """Start offset of every row inside a flat buffer."""
    rows, cols = check_dimensions(rows, cols)
    return [i * cols for i in range(rows)]


def offset(row: int, col: int, cols: int) -> int:
    return row * cols + col
