from __future__ import annotations


class MalgError(Exception):
    """Base exception for malg."""


class InvalidDimension(MalgError, ValueError):
    """Zero (or otherwise invalid) number of rows or columns."""


class AllocationFailure(MalgError, MemoryError):
    """Storage for the matrix buffer could not be allocated."""


class ShapeMismatch(MalgError, ValueError):
    """Operand shapes differ where they must be equal."""


class DimensionMismatch(MalgError, ValueError):
    """Inner dimensions are incompatible for a matrix product."""


class IndexOutOfRange(MalgError, IndexError):
    """Row or column index outside the matrix."""
