from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence

import numpy as np

MODES = ("lights", "joltage")


class EchelonForm(NamedTuple):
    """Reduced augmented matrix [R | r] plus the bookkeeping the searches need."""

    matrix: np.ndarray
    pivot_cols: List[Optional[int]]  # row -> pivot column (None if no pivot)
    free_cols: List[int]
    rank: int
    consistent: bool

    @property
    def n_vars(self) -> int:
        return self.matrix.shape[1] - 1

    def pivot_rows(self) -> list[int]:
        return [r for r, pc in enumerate(self.pivot_cols) if pc is not None]


def build_augmented(
    n_counters: int, buttons: Sequence[Sequence[int]], target, mode: str
) -> np.ndarray:
    """Return the augmented matrix [A | b] for a machine.

    Column j holds the counters touched by button j; counter indices past
    n_counters are ignored. In "lights" mode the matrix is uint8 over GF(2),
    in "joltage" mode it is float64.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode}")
    if len(target) != n_counters:
        raise ValueError(
            f"Expected target of length {n_counters}, got {len(target)}"
        )
    n_vars = len(buttons)
    dtype = np.uint8 if mode == "lights" else np.float64
    M = np.zeros((n_counters, n_vars + 1), dtype=dtype)

    for j, button in enumerate(buttons):
        for i in button:
            if 0 <= i < n_counters:
                M[i, j] = 1

    if mode == "lights":
        M[:, n_vars] = np.asarray(target, dtype=bool).astype(np.uint8)
    else:
        M[:, n_vars] = np.asarray(target, dtype=np.float64)
    return M


def gf2_rref_augmented(M: np.ndarray) -> EchelonForm:
    """Reduce [A | b] over GF(2) in place (Gauss-Jordan, left to right)."""
    m, width = M.shape
    n = width - 1

    row = 0
    pivot_cols: list[Optional[int]] = [None] * m
    free_cols: list[int] = []
    for col in range(n):
        if row >= m:
            free_cols.append(col)
            continue
        # find a pivot in/under current row
        pivot = None
        for r in range(row, m):
            if M[r, col]:
                pivot = r
                break
        if pivot is None:
            free_cols.append(col)
            continue
        if pivot != row:
            M[[row, pivot]] = M[[pivot, row]]
        # eliminate ALL other rows
        for r in range(m):
            if r != row and M[r, col]:
                M[r, col:] ^= M[row, col:]
        pivot_cols[row] = col
        row += 1

    # 0...0 | 1 rows below the rank
    consistent = not np.any(M[row:, n])
    return EchelonForm(M, pivot_cols, free_cols, row, bool(consistent))


def real_rref_augmented(M: np.ndarray, epsilon: float = 1e-9) -> EchelonForm:
    """Reduce [A | b] over the reals in place, normalising every pivot to 1.

    Entries with magnitude <= epsilon count as zero both when choosing a pivot
    and when deciding whether a row needs eliminating.
    """
    m, width = M.shape
    n = width - 1

    row = 0
    pivot_cols: list[Optional[int]] = [None] * m
    free_cols: list[int] = []
    for col in range(n):
        if row >= m:
            free_cols.append(col)
            continue
        pivot = None
        for r in range(row, m):
            if abs(M[r, col]) > epsilon:
                pivot = r
                break
        if pivot is None:
            free_cols.append(col)
            continue
        if pivot != row:
            M[[row, pivot]] = M[[pivot, row]]
        M[row, col:] /= M[row, col]
        for r in range(m):
            if r != row and abs(M[r, col]) > epsilon:
                factor = M[r, col]
                M[r, col:] -= factor * M[row, col:]
        pivot_cols[row] = col
        row += 1

    consistent = not np.any(np.abs(M[row:, n]) > epsilon)
    return EchelonForm(M, pivot_cols, free_cols, row, bool(consistent))


def reduce_machine(
    n_counters: int,
    buttons: Sequence[Sequence[int]],
    target,
    mode: str,
    epsilon: float = 1e-9,
) -> EchelonForm:
    """Build and reduce the system for one machine in the given mode."""
    M = build_augmented(n_counters, buttons, target, mode)
    if mode == "lights":
        return gf2_rref_augmented(M)
    return real_rref_augmented(M, epsilon=epsilon)
