import numpy as np
import torch
import pytest

from malg import InvalidDimension, Matrix, ShapeMismatch


def test_default_is_empty():
    m = Matrix()
    assert m.is_empty
    assert m.shape == (0, 0)
    assert m.row_count() == 0 and m.col_count() == 0
    assert m.tolist() == []


def test_value_filled_zero():
    m = Matrix(100, 50, 0)
    assert m.shape == (100, 50)
    assert m.dtype == torch.int64
    assert m.at(0, 0) == 0 and m.at(99, 49) == 0


def test_value_filled_float():
    m = Matrix(100, 50, 3.14)
    assert m.dtype == torch.float64
    assert m.at(0, 0) == 3.14 and m.at(99, 49) == 3.14


def test_default_fill_is_zero_of_dtype():
    assert Matrix(2, 3).to_torch().eq(0).all()
    b = Matrix(2, 2, dtype=bool)
    assert b.dtype == torch.bool
    assert b.tolist() == [[False, False], [False, False]]


def test_fill_with_explicit_dtype():
    m = Matrix(3, 2, 5, dtype=torch.float32)
    assert m.dtype == torch.float32
    assert m[2][1] == 5.0


def test_nested_literal():
    m = Matrix([[1.0, 3.2, 6.0],
                [4.2, 6.1, 9.9]])
    assert m.shape == (2, 3)
    assert m.at(0, 1) == 3.2 and m.at(1, 2) == 9.9
    assert m[1][1] == 6.1


def test_nested_literal_float32_matches_cast():
    m = Matrix([[1.0, 3.2, 6.0], [4.2, 6.0, 9.9]], dtype=torch.float32)
    assert m[0][1] == np.float32(3.2)
    assert m[1][1] == 6.0


def test_literal_dtype_is_promoted_across_elements():
    assert Matrix([[1, 2], [3, 4]]).dtype == torch.int64
    assert Matrix([[1, 2.5], [3, 4]]).dtype == torch.float64
    assert Matrix([[True, False]]).dtype == torch.bool
    assert Matrix([[1, 2j]]).dtype == torch.complex128


@pytest.mark.parametrize("args", [(0, 3), (3, 0), (0, 0)])
def test_zero_dimensions_rejected(args):
    with pytest.raises(InvalidDimension):
        Matrix(*args)


def test_zero_dimension_literals_rejected():
    with pytest.raises(InvalidDimension):
        Matrix([])
    with pytest.raises(InvalidDimension):
        Matrix([[], []])


def test_ragged_literal_rejected():
    with pytest.raises(ShapeMismatch):
        Matrix([[1, 2, 3], [4, 5]])
    with pytest.raises(ShapeMismatch):
        Matrix([[1], [2, 3]])


def test_bad_values_rejected():
    with pytest.raises(TypeError):
        Matrix([["a", "b"]])
    with pytest.raises(TypeError):
        Matrix(2, 2, "x")
    with pytest.raises(TypeError):
        Matrix(2, 2, dtype=str)
    with pytest.raises(TypeError):
        Matrix(4)


def test_shape_invariant_never_mixed(make_matrix):
    candidates = [Matrix(), Matrix(1, 1), Matrix([[1, 2, 3]]), make_matrix(5, 2)[0]]
    for m in candidates:
        r, c = m.shape
        assert (r > 0 and c > 0) or (r == 0 and c == 0)


def test_from_tensor_and_ndarray():
    t = torch.arange(6, dtype=torch.int32).view(2, 3)
    m = Matrix(t)
    assert m.dtype == torch.int32
    assert m.tolist() == [[0, 1, 2], [3, 4, 5]]

    # the matrix owns its own copy
    t[0, 0] = 100
    assert m[0, 0] == 0

    a = np.array([[1.5, 2.5], [3.5, 4.5]], dtype=np.float32)
    n = Matrix.from_array(a)
    assert n.dtype == torch.float32
    assert n.tolist() == [[1.5, 2.5], [3.5, 4.5]]


def test_from_array_nested_list_defaults_to_float64():
    m = Matrix.from_array([[0.1, 0.2]])
    assert m.dtype == torch.float64
    assert m[0, 1] == 0.2


def test_from_array_requires_2d():
    with pytest.raises(InvalidDimension):
        Matrix.from_array(np.arange(4))
    with pytest.raises(InvalidDimension):
        Matrix.from_array(np.zeros((0, 3)))


def test_identity():
    eye = Matrix.identity(3)
    assert eye.tolist() == [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
    assert Matrix.identity(2, dtype=bool).tolist() == [[True, False], [False, True]]


def test_repr_and_len():
    m = Matrix(2, 3, 1.0)
    assert repr(m) == "Matrix(rows=2, cols=3, dtype=torch.float64)"
    assert len(m) == 2


def test_fill_that_cannot_be_stored_raises_type_error():
    with pytest.raises(TypeError):
        Matrix(2, 2, 1j, dtype=int)


def test_literal_that_cannot_be_stored_raises_type_error():
    with pytest.raises(TypeError):
        Matrix([[1j, 2]], dtype=torch.int64)


def test_from_array_ragged_nested_list():
    with pytest.raises(ShapeMismatch):
        Matrix.from_array([[1, 2, 3], [4, 5]])
    with pytest.raises(ShapeMismatch):
        Matrix.from_array(([1.0], [2.0, 3.0]))
