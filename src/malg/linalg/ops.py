from __future__ import annotations

from typing import Any

import numpy as np
import torch

from malg.exceptions import DimensionMismatch, ShapeMismatch
from malg.storage import allocate
from malg.typing import SUPPORTED_DTYPES, resolve_dtype

Shape = tuple[int, int]

# zero-element tensors used only to ask torch for promotion results
_PROBES = {dt: torch.empty(0, dtype=dt) for dt in SUPPORTED_DTYPES}


def scalar_result_dtype(dtype: torch.dtype, s: Any) -> torch.dtype:
    """
    dtype of buf * s under torch promotion, except that a Python float/complex
    scalar lifts an integral or bool buffer to float64/complex128 instead of
    torch's float32/complex64 defaults.
    """
    if isinstance(s, np.generic):
        s = s.item()
    out = torch.result_type(_PROBES[resolve_dtype(dtype)], s)
    if isinstance(s, (float, complex)) and not (dtype.is_floating_point or dtype.is_complex):
        out = torch.promote_types(out, torch.float64 if isinstance(s, float) else torch.complex128)
    return resolve_dtype(out)


def _cast(buf: torch.Tensor, shape: Shape, dtype: torch.dtype) -> torch.Tensor:
    if buf.dtype == dtype:
        return buf
    return allocate(*shape, dtype=dtype).copy_(buf)


def add_flat(a: torch.Tensor, a_shape: Shape, b: torch.Tensor, b_shape: Shape) -> torch.Tensor:
    """Elementwise a + b for equally shaped matrices."""
    if tuple(a_shape) != tuple(b_shape):
        raise ShapeMismatch(f"cannot add matrices of shape {tuple(a_shape)} and {tuple(b_shape)}")
    dtype = resolve_dtype(torch.promote_types(a.dtype, b.dtype))
    out = allocate(*a_shape, dtype=dtype)
    return torch.add(a, b, out=out)


def matmul_flat(a: torch.Tensor, a_shape: Shape, b: torch.Tensor, b_shape: Shape) -> torch.Tensor:
    """
    Matrix product of a (r,k) and b (k,c).

    C[i, j] = sum_k A[i, k] * B[k, j], accumulated over k in order starting
    from zero. Each step is a rank-1 update, so every supported dtype works
    (bool gives OR-of-ANDs) without going through BLAS.

    Returns
    -------
    out : (r * c,) buffer
    """
    r, k = a_shape
    k2, c = b_shape
    if k != k2:
        raise DimensionMismatch(
            f"inner dimensions differ: {tuple(a_shape)} x {tuple(b_shape)} ({k} cols vs {k2} rows)"
        )

    dtype = resolve_dtype(torch.promote_types(a.dtype, b.dtype))
    A = _cast(a, a_shape, dtype).view(r, k)
    B = _cast(b, b_shape, dtype).view(k, c)

    out = allocate(r, c, dtype=dtype).zero_()
    term = allocate(r, c, dtype=dtype)
    acc = out.view(r, c)
    step = term.view(r, c)
    for kk in range(k):
        torch.mul(A[:, kk : kk + 1], B[kk : kk + 1, :], out=step)
        acc += step
    return out


def scale_flat(buf: torch.Tensor, shape: Shape, s: Any) -> torch.Tensor:
    """s * buf, elementwise."""
    dtype = scalar_result_dtype(buf.dtype, s)
    if isinstance(s, np.generic):
        s = s.item()
    src = _cast(buf, shape, dtype)
    out = allocate(*shape, dtype=dtype)
    return torch.mul(src, s, out=out)
