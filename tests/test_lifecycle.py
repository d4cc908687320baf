import copy

import torch
import pytest

import malg.matrix
from malg import Matrix, ShapeMismatch


def test_copy_is_deep():
    A = Matrix([[1, 2], [3, 4]])
    for B in (Matrix(A), A.copy(), copy.copy(A), copy.deepcopy(A)):
        assert B == A
        assert B._buffer.data_ptr() != A._buffer.data_ptr()
        B[0, 0] = 100
        assert A[0, 0] == 1


def test_copy_survives_release_of_source():
    A = Matrix([[1.5, 2.5]])
    B = Matrix(A)
    A.release()
    assert B.tolist() == [[1.5, 2.5]]


def test_copy_with_dtype_conversion():
    A = Matrix([[1, 2]])
    B = Matrix(A, dtype=torch.float32)
    assert B.dtype == torch.float32
    assert A.dtype == torch.int64


def test_copy_of_empty_is_empty():
    assert Matrix(Matrix()).is_empty


def test_move_construct_leaves_source_empty():
    A = Matrix([[1, 2], [3, 4]])
    ptr = A._buffer.data_ptr()
    B = Matrix.moved_from(A)
    assert B.tolist() == [[1, 2], [3, 4]]
    assert B._buffer.data_ptr() == ptr
    assert A.shape == (0, 0) and A.is_empty
    A.release()
    assert B.tolist() == [[1, 2], [3, 4]]


def test_move_assign_never_allocates(monkeypatch):
    A = Matrix([[1, 2, 3]])
    B = Matrix(2, 2, 0)

    def no_alloc(*args, **kwargs):
        raise AssertionError("move must not allocate")

    monkeypatch.setattr(malg.matrix, "allocate", no_alloc)
    B.move_from(A)
    C = Matrix.moved_from(B)
    assert C.shape == (1, 3)
    assert A.is_empty and B.is_empty


def test_move_from_self_is_noop():
    A = Matrix([[1]])
    A.move_from(A)
    assert A.tolist() == [[1]]


def test_release_is_idempotent():
    A = Matrix(3, 3, 1.0)
    A.release()
    assert A.is_empty and A.shape == (0, 0)
    A.release()
    assert A.is_empty


def test_assign_copies_values():
    dest = Matrix(2, 2, 0)
    src = Matrix([[5, 6], [7, 8]])
    dest.assign(src)
    assert dest == src
    src[0, 0] = -1
    assert dest[0, 0] == 5


def test_assign_shape_guard_leaves_destination_unchanged():
    dest = Matrix([[1, 2], [3, 4]])
    src = Matrix([[9, 9, 9], [9, 9, 9]])
    with pytest.raises(ShapeMismatch):
        dest.assign(src)
    assert dest.tolist() == [[1, 2], [3, 4]]


def test_assign_rejects_non_matrix():
    with pytest.raises(TypeError):
        Matrix(1, 1).assign([[1]])


def test_move_rejects_non_matrix():
    with pytest.raises(TypeError):
        Matrix.moved_from([[1, 2]])
    with pytest.raises(TypeError):
        Matrix(1, 1).move_from([[1]])
