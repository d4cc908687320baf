"""
Matrix example (construction, arithmetic, in-place transpose)

Goal
- Walk through the public surface of malg.Matrix on small, checkable inputs.

Run
- python examples/example_matrix.py
"""

from __future__ import annotations

import logging

from malg import DimensionMismatch, Matrix


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    # ----------------------------
    # Value-filled and literal construction
    # ----------------------------
    zeros = Matrix(100, 50, 0)
    assert zeros[0][0] == 0 and zeros[99][49] == 0

    lit = Matrix([[1.0, 3.2, 6.0],
                  [4.2, 6.0, 9.9]])
    assert lit[0][1] == 3.2 and lit[1][1] == 6.0

    # ----------------------------
    # matrix * matrix
    # ----------------------------
    A = Matrix([[0, 0, 1, 0],
                [1, 0, 0, 0],
                [0, 0, 0, 1],
                [0, 1, 0, 0]])
    B = Matrix([[0, 1],
                [2, 3],
                [4, 5],
                [6, 7]])
    C = A * B
    print("A x B =", C.tolist())

    try:
        B * A
    except DimensionMismatch as e:
        print("B x A rejected:", e)

    # ----------------------------
    # scalar * matrix
    # ----------------------------
    print("2 x M =", (2 * Matrix([[0, 1], [3, 4]])).tolist())

    # ----------------------------
    # In-place transpose
    # ----------------------------
    sq = Matrix([[1, 0, 1, 0],
                 [1, 0, 0, 0],
                 [0, 0, 0, 1],
                 [0, 1, 0, 0]], dtype=bool)
    sq.transpose()
    print("square^T =", sq.tolist())

    wide = Matrix([[11, 12, 13, 14],
                   [21, 22, 23, 24]])
    wide.transpose()
    print("wide^T =", wide.tolist(), "shape", wide.shape)


if __name__ == "__main__":
    main()
