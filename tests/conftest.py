import torch
import pytest

from malg import Matrix


@pytest.fixture(scope="session")
def torch_dtype():
    # Use float64 in tests so Python float literals compare exactly.
    return torch.float64


@pytest.fixture
def perm_4x4():
    return Matrix([[0, 0, 1, 0],
                   [1, 0, 0, 0],
                   [0, 0, 0, 1],
                   [0, 1, 0, 0]])


@pytest.fixture
def tall_4x2():
    return Matrix([[0, 1],
                   [2, 3],
                   [4, 5],
                   [6, 7]])


def _make_matrix(rows: int, cols: int, *, seed: int = 123, dtype=torch.int64):
    """
    Deterministic rows x cols matrix plus the tensor it was built from.
    Returns:
      M : Matrix
      T : (rows, cols) tensor with the same values
    """
    g = torch.Generator().manual_seed(seed)
    T = torch.randint(-50, 50, (rows, cols), generator=g).to(dtype=dtype)
    return Matrix(T), T


@pytest.fixture
def make_matrix():
    return _make_matrix
