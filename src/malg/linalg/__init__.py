"""
malg.linalg

Kernels over flat row-major buffers.

Conventions
-----------
- A matrix is a pair (buf, shape) with buf of shape (rows * cols,)
- Element (i, j) sits at buf[i * cols + j]

Kernels in ops.py return a freshly allocated buffer and never write to their
operands. Kernels in transpose.py (trailing underscore) permute in place.
"""
from .ops import add_flat, matmul_flat, scalar_result_dtype, scale_flat
from .transpose import (
    LARGE_TRANSPOSE_WARN,
    permutation_cycles,
    transpose_cycles_,
    transpose_index,
    transpose_square_,
)

__all__ = [
    "add_flat",
    "matmul_flat",
    "scale_flat",
    "scalar_result_dtype",
    "LARGE_TRANSPOSE_WARN",
    "transpose_index",
    "permutation_cycles",
    "transpose_square_",
    "transpose_cycles_",
]
