# src/malg/typing.py
from __future__ import annotations

from numbers import Number
from typing import Any, Iterable, Optional, Union

import numpy as np
import torch


DTypeLike = Union[torch.dtype, type, None]

DEFAULT_INT_DTYPE = torch.int64
DEFAULT_FLOAT_DTYPE = torch.float64
DEFAULT_COMPLEX_DTYPE = torch.complex128

SUPPORTED_DTYPES = (
    torch.bool,
    torch.uint8,
    torch.int8,
    torch.int16,
    torch.int32,
    torch.int64,
    torch.float16,
    torch.float32,
    torch.float64,
    torch.complex64,
    torch.complex128,
)

_PYTHON_TYPES = {
    bool: torch.bool,
    int: DEFAULT_INT_DTYPE,
    float: DEFAULT_FLOAT_DTYPE,
    complex: DEFAULT_COMPLEX_DTYPE,
}


def _is_pandas_df(x: Any) -> bool:
    try:
        import pandas as pd  # type: ignore
        return isinstance(x, pd.DataFrame)
    except Exception:
        return False


def resolve_dtype(dtype: DTypeLike) -> torch.dtype:
    """
    Normalize a dtype request to one of SUPPORTED_DTYPES.

    Accepts a torch.dtype or one of the Python types bool/int/float/complex.
    """
    if isinstance(dtype, type) and dtype in _PYTHON_TYPES:
        dtype = _PYTHON_TYPES[dtype]
    if not isinstance(dtype, torch.dtype) or dtype not in SUPPORTED_DTYPES:
        raise TypeError(f"Unsupported element type {dtype!r}")
    return dtype


def scalar_dtype(value: Any) -> torch.dtype:
    """Element type of a single fill value or scalar operand."""
    if isinstance(value, torch.Tensor):
        if value.numel() != 1:
            raise TypeError(f"Expected a scalar. Got tensor of shape {tuple(value.shape)}")
        return resolve_dtype(value.dtype)
    if isinstance(value, np.generic):
        return resolve_dtype(torch.from_numpy(np.asarray(value)).dtype)
    # bool is checked before int because it subclasses it
    for py_type in (bool, int, float, complex):
        if isinstance(value, py_type):
            return _PYTHON_TYPES[py_type]
    raise TypeError(f"Unexpected matrix value {value!r} ({type(value).__name__})")


def infer_dtype(values: Iterable[Any]) -> torch.dtype:
    """Promote the element types of `values` to a single dtype."""
    out: Optional[torch.dtype] = None
    for v in values:
        dt = scalar_dtype(v)
        out = dt if out is None else torch.promote_types(out, dt)
    return DEFAULT_FLOAT_DTYPE if out is None else out


def is_array_like(x: Any) -> bool:
    """True for tensors, ndarrays and DataFrames (not nested Python lists)."""
    return isinstance(x, (torch.Tensor, np.ndarray)) or _is_pandas_df(x)


def is_scalar(x: Any) -> bool:
    if isinstance(x, torch.Tensor):
        return x.numel() == 1 and x.ndim == 0
    return isinstance(x, (Number, np.generic))


def as_torch(
    x: Any,
    *,
    dtype: DTypeLike = None,
) -> torch.Tensor:
    """
    Convert common array-likes to a CPU torch.Tensor.

    Supports:
    - torch.Tensor
    - numpy.ndarray
    - Python lists/tuples (nested)
    - pandas.DataFrame (if pandas installed)

    Python floats default to float64 rather than torch's float32.
    """
    if _is_pandas_df(x):
        x = x.to_numpy()  # type: ignore[attr-defined]

    if isinstance(x, torch.Tensor):
        t = x.detach().cpu()
    elif isinstance(x, np.ndarray):
        t = torch.from_numpy(np.ascontiguousarray(x))
    elif dtype is not None:
        t = torch.as_tensor(x, dtype=resolve_dtype(dtype))
    else:
        t = torch.as_tensor(x)
        # rebuild from the Python values; casting the float32 tensor would lose digits
        if t.is_floating_point():
            t = torch.as_tensor(x, dtype=DEFAULT_FLOAT_DTYPE)
        elif t.is_complex():
            t = torch.as_tensor(x, dtype=DEFAULT_COMPLEX_DTYPE)

    if dtype is not None:
        t = t.to(dtype=resolve_dtype(dtype))
    else:
        resolve_dtype(t.dtype)
    return t
