# src/malg/matrix.py
from __future__ import annotations

import operator
import warnings
from typing import Any, Iterator, Optional, Sequence

import numpy as np
import torch

from malg.exceptions import DimensionMismatch, IndexOutOfRange, InvalidDimension, ShapeMismatch
from malg.linalg import add_flat, matmul_flat, scale_flat
from malg.linalg import transpose as inplace
from malg.storage import allocate, check_dimensions, offset
from malg.typing import (
    DEFAULT_FLOAT_DTYPE,
    DEFAULT_INT_DTYPE,
    DTypeLike,
    as_torch,
    infer_dtype,
    is_array_like,
    is_scalar,
    resolve_dtype,
    scalar_dtype,
)


def _check_rectangular(data: Sequence[Sequence[Any]]) -> int:
    """Number of columns shared by every row of a nested literal."""
    if len(data) == 0:
        return 0
    cols = len(data[0])
    for i, row in enumerate(data):
        if len(row) != cols:
            raise ShapeMismatch(f"row {i} has {len(row)} elements but row 0 has {cols}")
    return cols


class RowView:
    """
    Borrowed handle onto one row of a Matrix.

    Holds the matrix, not its buffer, so a view taken before a transpose or
    release sees the matrix as it is now.
    """

    __slots__ = ("_matrix", "_row")

    def __init__(self, matrix: "Matrix", row: int) -> None:
        self._matrix = matrix
        self._row = row

    def __len__(self) -> int:
        return self._matrix.cols

    def __getitem__(self, col: int) -> Any:
        return self._matrix.at(self._row, col)

    def __setitem__(self, col: int, value: Any) -> None:
        self._matrix[self._row, col] = value

    def __iter__(self) -> Iterator[Any]:
        return iter(self.tolist())

    def tolist(self) -> list[Any]:
        m = self._matrix
        i = m._check_row(self._row)
        return m._buffer[i * m.cols : (i + 1) * m.cols].tolist()

    def __repr__(self) -> str:
        return f"RowView(row={self._row}, values={self.tolist()})"


class Matrix:
    """
    Dense rows x cols matrix over one contiguous row-major buffer.

    Construction
    ------------
    Matrix()                      empty (0 x 0, nothing allocated)
    Matrix(rows, cols[, fill])    every element set to `fill` (default zero)
    Matrix([[...], [...]])        nested literal, rows x len(first row)
    Matrix(other)                 deep copy of another Matrix
    Matrix(array)                 torch.Tensor / numpy.ndarray / DataFrame

    `dtype` may be a torch.dtype or bool/int/float/complex. When omitted it
    is inferred from the values (Python floats become float64).

    Element type, shape and buffer are owned by the instance; arithmetic
    returns new matrices and never writes to its operands.
    """

    __hash__ = None  # type: ignore[assignment]
    # numpy scalars on the left defer to __rmul__
    __array_ufunc__ = None

    def __init__(self, *args: Any, dtype: DTypeLike = None) -> None:
        self._reset(DEFAULT_FLOAT_DTYPE if dtype is None else resolve_dtype(dtype))

        if not args:
            return
        if len(args) == 1:
            (src,) = args
            if is_scalar(src):
                raise TypeError("Matrix(rows, cols[, fill]) needs both rows and cols")
            if isinstance(src, Matrix):
                self._init_copy(src, dtype=dtype)
            elif is_array_like(src):
                self._init_array(src, dtype=dtype)
            else:
                self._init_literal(src, dtype=dtype)
            return
        if len(args) in (2, 3):
            fill = args[2] if len(args) == 3 else None
            self._init_filled(args[0], args[1], fill, dtype=dtype)
            return
        raise TypeError(f"Matrix() takes at most 3 positional arguments ({len(args)} given)")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _reset(self, dtype: torch.dtype) -> None:
        self._buffer: Optional[torch.Tensor] = None
        self._rows = 0
        self._cols = 0
        self._dtype = dtype

    def _take(self, buf: torch.Tensor, rows: int, cols: int) -> None:
        self._buffer = buf
        self._rows = rows
        self._cols = cols
        self._dtype = buf.dtype

    @classmethod
    def _wrap(cls, buf: torch.Tensor, rows: int, cols: int) -> "Matrix":
        out = cls.__new__(cls)
        out._take(buf, rows, cols)
        return out

    def _init_filled(self, rows: Any, cols: Any, fill: Any, *, dtype: DTypeLike) -> None:
        rows, cols = check_dimensions(rows, cols)
        if dtype is not None:
            dtype = resolve_dtype(dtype)
            if fill is not None:
                scalar_dtype(fill)
        elif fill is not None:
            dtype = scalar_dtype(fill)
        else:
            dtype = DEFAULT_FLOAT_DTYPE

        buf = allocate(rows, cols, dtype=dtype)
        if fill is None:
            buf.zero_()
        else:
            value = fill.item() if isinstance(fill, (torch.Tensor, np.generic)) else fill
            try:
                buf.fill_(value)
            except RuntimeError as e:
                raise TypeError(f"cannot store {value!r} as {dtype}") from e
        self._take(buf, rows, cols)

    def _init_literal(self, data: Sequence[Sequence[Any]], *, dtype: DTypeLike) -> None:
        rows = len(data)
        if rows == 0:
            raise InvalidDimension("number of rows is 0")
        cols = _check_rectangular(data)

        inferred = infer_dtype(v for row in data for v in row)
        dtype = inferred if dtype is None else resolve_dtype(dtype)
        if inferred.is_complex and not dtype.is_complex:
            raise TypeError(f"cannot store complex values as {dtype}")

        self._init_filled(rows, cols, None, dtype=dtype)
        buf = self._buffer
        for i, row in enumerate(data):
            values = [v.item() if isinstance(v, (torch.Tensor, np.generic)) else v for v in row]
            try:
                buf[i * cols : (i + 1) * cols] = torch.as_tensor(values, dtype=dtype)
            except (RuntimeError, TypeError) as e:
                raise TypeError(f"cannot store row {i} as {dtype}") from e

    def _init_array(self, x: Any, *, dtype: DTypeLike) -> None:
        if isinstance(x, (list, tuple)) and all(isinstance(row, (list, tuple)) for row in x):
            _check_rectangular(x)
        t = as_torch(x, dtype=dtype)
        if t.ndim != 2:
            raise InvalidDimension(f"expected a 2-D array. Got {tuple(t.shape)}")
        rows, cols = int(t.shape[0]), int(t.shape[1])
        buf = allocate(rows, cols, dtype=t.dtype)
        buf.copy_(t.reshape(-1))
        self._take(buf, rows, cols)

    def _init_copy(self, other: "Matrix", *, dtype: DTypeLike) -> None:
        target = other.dtype if dtype is None else resolve_dtype(dtype)
        if other.is_empty:
            self._reset(target)
            return
        buf = allocate(other.rows, other.cols, dtype=target)
        buf.copy_(other._buffer)
        self._take(buf, other.rows, other.cols)

    @classmethod
    def from_array(cls, x: Any, *, dtype: DTypeLike = None) -> "Matrix":
        """Build a matrix from any 2-D array-like (tensor, ndarray, DataFrame, nested lists)."""
        out = cls(dtype=dtype)
        out._init_array(x, dtype=dtype)
        return out

    @classmethod
    def identity(cls, n: int, *, dtype: DTypeLike = DEFAULT_INT_DTYPE) -> "Matrix":
        out = cls(n, n, dtype=dtype)
        torch.diagonal(out._buffer.view(n, n)).fill_(1)
        return out

    def copy(self) -> "Matrix":
        return Matrix(self)

    def __copy__(self) -> "Matrix":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "Matrix":
        return self.copy()

    def assign(self, other: "Matrix") -> "Matrix":
        """
        Copy-assign: replace this matrix's values with a deep copy of `other`.

        Shapes must already match; there is no implicit resize. The element
        type becomes other's. On failure this matrix is left untouched.
        """
        if not isinstance(other, Matrix):
            raise TypeError(f"can only assign from a Matrix. Got {type(other).__name__}")
        if other is self:
            return self
        if self.shape != other.shape:
            raise ShapeMismatch(
                f"cannot assign a matrix of shape {other.shape} to one of shape {self.shape}"
            )
        if other.is_empty:
            self._reset(other.dtype)
            return self
        buf = allocate(other.rows, other.cols, dtype=other.dtype)
        buf.copy_(other._buffer)
        self._take(buf, other.rows, other.cols)
        return self

    def move_from(self, other: "Matrix") -> "Matrix":
        """
        Move-assign: take other's buffer and shape, leaving `other` empty.

        Never allocates and never fails for a Matrix argument.
        """
        if not isinstance(other, Matrix):
            raise TypeError(f"can only move from a Matrix. Got {type(other).__name__}")
        if other is self:
            return self
        buf, rows, cols, dtype = other._buffer, other._rows, other._cols, other._dtype
        other._reset(dtype)
        self._buffer, self._rows, self._cols, self._dtype = buf, rows, cols, dtype
        return self

    @classmethod
    def moved_from(cls, other: "Matrix") -> "Matrix":
        """Move-construct a new matrix out of `other`."""
        if not isinstance(other, Matrix):
            raise TypeError(f"can only move from a Matrix. Got {type(other).__name__}")
        out = cls.__new__(cls)
        out._reset(other.dtype)
        return out.move_from(other)

    def release(self) -> None:
        """Drop the buffer and return to the empty state. Safe to repeat."""
        self._reset(self._dtype)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    def row_count(self) -> int:
        return self._rows

    def col_count(self) -> int:
        return self._cols

    @property
    def shape(self) -> tuple[int, int]:
        return (self._rows, self._cols)

    @property
    def size(self) -> int:
        return self._rows * self._cols

    @property
    def dtype(self) -> torch.dtype:
        return self._dtype

    @property
    def is_empty(self) -> bool:
        return self._buffer is None

    def __len__(self) -> int:
        return self._rows

    def __repr__(self) -> str:
        return f"Matrix(rows={self._rows}, cols={self._cols}, dtype={self._dtype})"

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def _check_row(self, row: Any) -> int:
        i = operator.index(row)
        if not 0 <= i < self._rows:
            raise IndexOutOfRange(f"row {i} out of range for {self._rows} rows")
        return i

    def _check_col(self, col: Any) -> int:
        j = operator.index(col)
        if not 0 <= j < self._cols:
            raise IndexOutOfRange(f"col {j} out of range for {self._cols} cols")
        return j

    def at(self, row: int, col: int) -> Any:
        """Element (row, col) as a Python scalar."""
        i = self._check_row(row)
        j = self._check_col(col)
        return self._buffer[offset(i, j, self._cols)].item()

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, tuple):
            if len(key) != 2:
                raise TypeError(f"expected m[row, col]. Got {len(key)} indices")
            return self.at(*key)
        return RowView(self, self._check_row(key))

    def __setitem__(self, key: Any, value: Any) -> None:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("assign single elements with m[row, col] = value")
        i = self._check_row(key[0])
        j = self._check_col(key[1])
        self._buffer[offset(i, j, self._cols)] = value

    def __iter__(self) -> Iterator[RowView]:
        for i in range(self._rows):
            yield RowView(self, i)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------
    def __add__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.is_empty and other.is_empty:
            return Matrix(dtype=torch.promote_types(self.dtype, other.dtype))
        buf = add_flat(self._buffer, self.shape, other._buffer, other.shape)
        return Matrix._wrap(buf, self._rows, self._cols)

    def matmul(self, other: "Matrix") -> "Matrix":
        """Matrix product self x other; requires self.cols == other.rows."""
        if self.is_empty and other.is_empty:
            return Matrix(dtype=torch.promote_types(self.dtype, other.dtype))
        if self.cols != other.rows:
            raise DimensionMismatch(
                f"inner dimensions differ: {self.shape} x {other.shape} "
                f"({self.cols} cols vs {other.rows} rows)"
            )
        buf = matmul_flat(self._buffer, self.shape, other._buffer, other.shape)
        return Matrix._wrap(buf, self._rows, other.cols)

    def scale(self, s: Any) -> "Matrix":
        """Multiply every element by the scalar `s`."""
        if self.is_empty:
            return Matrix(dtype=self.dtype)
        return Matrix._wrap(scale_flat(self._buffer, self.shape, s), self._rows, self._cols)

    def __mul__(self, other: Any) -> "Matrix":
        if isinstance(other, Matrix):
            return self.matmul(other)
        if is_scalar(other):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other: Any) -> "Matrix":
        if is_scalar(other):
            return self.scale(other)
        return NotImplemented

    def __matmul__(self, other: Any) -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.matmul(other)

    def transpose(self) -> None:
        """Transpose in place; rows and cols swap for non-square matrices."""
        if self.is_empty:
            return
        r, c = self._rows, self._cols
        if r == c:
            inplace.transpose_square_(self._buffer, r)
            return
        if r * c > inplace.LARGE_TRANSPOSE_WARN:
            warnings.warn(
                f"In-place transpose of a {r}x{c} matrix walks {r * c} elements in Python; "
                "this can be slow.",
                RuntimeWarning,
                stacklevel=2,
            )
        inplace.transpose_cycles_(self._buffer, r, c)
        self._rows, self._cols = c, r

    # ------------------------------------------------------------------
    # Comparison / export
    # ------------------------------------------------------------------
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.shape != other.shape:
            return False
        if self.is_empty:
            return True
        dt = torch.promote_types(self.dtype, other.dtype)
        return bool(torch.equal(self._buffer.to(dtype=dt), other._buffer.to(dtype=dt)))

    def allclose(self, other: "Matrix", *, rtol: float = 1e-5, atol: float = 1e-8) -> bool:
        if self.shape != other.shape:
            return False
        if self.is_empty:
            return True
        dt = torch.promote_types(self.dtype, other.dtype)
        if not (dt.is_floating_point or dt.is_complex):
            dt = DEFAULT_FLOAT_DTYPE
        return bool(
            torch.allclose(self._buffer.to(dtype=dt), other._buffer.to(dtype=dt), rtol=rtol, atol=atol)
        )

    def tolist(self) -> list[list[Any]]:
        if self.is_empty:
            return []
        return self._buffer.view(self._rows, self._cols).tolist()

    def to_torch(self) -> torch.Tensor:
        """Independent (rows, cols) tensor copy."""
        if self.is_empty:
            return torch.empty((0, 0), dtype=self._dtype)
        return self._buffer.view(self._rows, self._cols).clone()

    def to_numpy(self) -> np.ndarray:
        return self.to_torch().numpy()
