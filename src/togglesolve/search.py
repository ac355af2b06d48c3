from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from .algebra import EchelonForm


def _pivot_system(form: EchelonForm) -> Tuple[list[int], list[int], np.ndarray, np.ndarray]:
    """Split the reduced matrix into pivot rhs and pivot-row x free-column coefficients."""
    n = form.n_vars
    rows = form.pivot_rows()
    pcols = [form.pivot_cols[r] for r in rows]
    rhs = form.matrix[rows, n]
    coeffs = form.matrix[np.ix_(rows, form.free_cols)]
    return rows, pcols, rhs, coeffs


def gf2_search_space(form: EchelonForm) -> int:
    return 1 << len(form.free_cols)


def gf2_min_presses(
    form: EchelonForm, block_size: int = 1 << 14
) -> Tuple[int, np.ndarray]:
    """Minimum number of presses over every assignment of the free variables.

    Bit b of an assignment mask is free column form.free_cols[b]. Pivot values
    follow from x_pivot = r XOR (sum of set free bits in the row). Work is done
    in blocks of masks; cost is O(2^k * n_vars) for k free variables, so k has
    to stay small. The first mask reaching the minimum wins.

    Returns:
        presses: minimum Hamming weight of a solution
        solution: that solution as a (n_vars,) uint8 vector
    """
    if not form.consistent:
        raise ValueError("gf2_min_presses needs a consistent system")
    n = form.n_vars
    _, pcols, rhs, coeffs = _pivot_system(form)
    rhs = rhs.astype(np.int64)
    coeffs_T = coeffs.astype(np.int64).T
    k = len(form.free_cols)
    shifts = np.arange(k, dtype=np.int64)

    best_w: Optional[int] = None
    best_bits = np.zeros((k,), dtype=np.int64)
    best_piv = np.zeros((len(pcols),), dtype=np.int64)
    total = 1 << k
    for lo in range(0, total, block_size):
        masks = np.arange(lo, min(lo + block_size, total), dtype=np.int64)
        bits = (masks[:, None] >> shifts) & 1
        pivots = rhs ^ ((bits @ coeffs_T) & 1)
        weights = bits.sum(axis=1) + pivots.sum(axis=1)
        i = int(np.argmin(weights))
        if best_w is None or int(weights[i]) < best_w:
            best_w = int(weights[i])
            best_bits = bits[i]
            best_piv = pivots[i]

    solution = np.zeros((n,), dtype=np.uint8)
    solution[form.free_cols] = best_bits
    solution[pcols] = best_piv
    return int(best_w), solution


def free_variable_bounds(
    n_counters: int,
    buttons: Sequence[Sequence[int]],
    target: Sequence[int],
    free_cols: Sequence[int],
) -> list[int]:
    """Upper bound on the presses of each free button.

    A press adds 1 to every counter the button touches, so a button can never
    be pressed more often than the smallest target among those counters. A
    button touching no counter gets 0.
    """
    bounds = []
    for col in free_cols:
        touched = [int(target[i]) for i in buttons[col] if 0 <= i < n_counters]
        bounds.append(min(touched) if touched else 0)
    return bounds


def integer_search_space(bounds: Sequence[int]) -> int:
    return math.prod(b + 1 for b in bounds)


class BestTotal:
    """Running minimum of the branch-and-bound search."""

    def __init__(self):
        self.total: Optional[int] = None
        self.solution: Optional[np.ndarray] = None

    def beaten_by(self, total: int) -> bool:
        return self.total is None or total < self.total

    def cuts(self, partial: int) -> bool:
        # pivot values are non-negative, so the partial sum is a lower bound
        return self.total is not None and partial >= self.total

    def update(self, total: int, solution: np.ndarray) -> None:
        self.total = total
        self.solution = solution


class BoundedIntegerSearch:
    """Depth-first branch-and-bound over the free variables of a reduced system."""

    def __init__(
        self,
        form: EchelonForm,
        bounds: Sequence[int],
        epsilon: float = 1e-9,
        tolerance: float = 1e-3,
    ):
        if len(bounds) != len(form.free_cols):
            raise ValueError(
                f"Expected {len(form.free_cols)} bounds, got {len(bounds)}"
            )
        self.form = form
        self.bounds = [int(b) for b in bounds]
        self.tolerance = tolerance
        _, self.pcols, self.rhs, coeffs = _pivot_system(form)
        self.coeffs = np.where(np.abs(coeffs) > epsilon, coeffs, 0.0)
        # assignment of the free variables, reused across the whole search
        self.values = np.zeros((len(self.bounds),), dtype=np.int64)

    def run(self, best: BestTotal | None = None) -> BestTotal:
        best = best or BestTotal()
        self.values[:] = 0
        self._descend(0, 0, best)
        return best

    def _descend(self, idx: int, partial: int, best: BestTotal) -> None:
        if best.cuts(partial):
            return
        if idx == len(self.bounds):
            self._leaf(partial, best)
            return
        for value in range(self.bounds[idx] + 1):
            if best.cuts(partial + value):
                break
            self.values[idx] = value
            self._descend(idx + 1, partial + value, best)
        self.values[idx] = 0

    def _leaf(self, partial: int, best: BestTotal) -> None:
        pivot_vals = self.rhs - self.coeffs @ self.values
        if np.any(pivot_vals < -self.tolerance):
            return
        rounded = np.round(pivot_vals)
        if np.any(np.abs(pivot_vals - rounded) > self.tolerance):
            return
        pivots = rounded.astype(np.int64)
        total = partial + int(pivots.sum())
        if not best.beaten_by(total):
            return
        solution = np.zeros((self.form.n_vars,), dtype=np.int64)
        solution[self.form.free_cols] = self.values
        solution[self.pcols] = pivots
        best.update(total, solution)


def bounded_integer_search(
    form: EchelonForm,
    bounds: Sequence[int],
    epsilon: float = 1e-9,
    tolerance: float = 1e-3,
) -> Optional[Tuple[int, np.ndarray]]:
    """Minimum total presses over non-negative integer solutions within bounds.

    Returns (total, solution) or None if no assignment of the free variables
    yields non-negative integer pivot values.
    """
    if not form.consistent:
        raise ValueError("bounded_integer_search needs a consistent system")
    best = BoundedIntegerSearch(form, bounds, epsilon, tolerance).run()
    if best.total is None:
        return None
    return best.total, best.solution
