"""Matrix transposes tuned for a small direct-mapped cache."""

from __future__ import annotations

from typing import Callable, Sequence

Matrix = list[list[int]]
TransposeFunction = Callable[[Sequence[Sequence[int]]], Matrix]

SUBMIT_DESCRIPTION = "Transpose submission"
SIMPLE_DESCRIPTION = "Simple row-wise scan transpose"


def _shape(a: Sequence[Sequence[int]]) -> tuple[int, int]:
    """Return (rows, columns) of ``a``, rejecting ragged input."""
    rows = len(a)
    cols = len(a[0]) if rows else 0
    if any(len(row) != cols for row in a):
        raise ValueError("matrix rows must all have the same length")
    return rows, cols


def _transpose_32(a: Sequence[Sequence[int]], b: Matrix) -> None:
    for i in range(0, 32, 8):
        for j in range(0, 32, 8):
            for k in range(i, i + 8):
                diagonal = 0
                for l in range(j, j + 8):
                    if k != l:
                        b[l][k] = a[k][l]
                    else:
                        diagonal = a[k][l]
                if i == j:
                    b[k][k] = diagonal


def _transpose_64(a: Sequence[Sequence[int]], b: Matrix) -> None:
    for i in range(0, 64, 8):
        for j in range(0, 64, 8):
            for k in range(i, i + 4):
                row = a[k][j:j + 8]
                for offset in range(4):
                    b[j + offset][k] = row[offset]
                    b[j + offset][k + 4] = row[offset + 4]

            for k in range(j, j + 4):
                lower = [a[i + 4 + r][k] for r in range(4)]
                upper = b[k][i + 4:i + 8]
                b[k][i + 4:i + 8] = lower
                for r in range(4):
                    b[k + 4][i + r] = upper[r]

            for k in range(i + 4, i + 8):
                for l in range(j + 4, j + 8):
                    b[l][k] = a[k][l]


def _transpose_67x61(a: Sequence[Sequence[int]], b: Matrix) -> None:
    rows, cols = 67, 61
    for i in range(0, min(rows, 64), 16):
        for j in range(0, min(cols, 48), 16):
            for row in range(i, min(i + 16, rows)):
                for col in range(j, min(j + 16, cols)):
                    b[col][row] = a[row][col]

    for i in range(64, rows):
        for j in range(min(cols, 48)):
            b[j][i] = a[i][j]

    for i in range(rows):
        for j in range(48, cols):
            b[j][i] = a[i][j]


_STRATEGIES = {
    (32, 32): _transpose_32,
    (64, 64): _transpose_64,
    (67, 61): _transpose_67x61,
}


def transpose_submit(a: Sequence[Sequence[int]]) -> Matrix:
    """Transpose a 32x32, 64x64 or 67-row by 61-column matrix with blocking."""
    rows, cols = _shape(a)
    strategy = _STRATEGIES.get((rows, cols))
    if strategy is None:
        raise ValueError(f"no blocked transpose for a {rows}x{cols} matrix")
    b = [[0] * rows for _ in range(cols)]
    strategy(a, b)
    return b


def transpose_simple(a: Sequence[Sequence[int]]) -> Matrix:
    """Transpose any rectangular matrix with a plain row-wise scan."""
    _shape(a)
    return [list(column) for column in zip(*a)]


def is_transpose(a: Sequence[Sequence[int]], b: Sequence[Sequence[int]]) -> bool:
    """Return True if ``b`` is exactly the transpose of ``a``."""
    rows, cols = _shape(a)
    if len(b) != cols or any(len(row) != rows for row in b):
        return False
    return all(
        value == b[j][i]
        for i, row in enumerate(a)
        for j, value in enumerate(row)
    )


def registered_functions() -> list[tuple[TransposeFunction, str]]:
    """Return the transpose functions available for evaluation, with descriptions."""
    return [
        (transpose_submit, SUBMIT_DESCRIPTION),
        (transpose_simple, SIMPLE_DESCRIPTION),
    ]