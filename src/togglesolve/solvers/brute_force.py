from __future__ import annotations

import itertools

import numpy as np

from ..config import SolverLimits
from ..machine import Machine
from ..search import free_variable_bounds, integer_search_space
from .base import InconsistentSystemError, NoIntegerSolutionError, Solver
from .elimination import check_search_space


class BruteForceLightsSolver(Solver):
    """
    Try press sets in order of increasing size until one lights the target.
    Exponential in the number of buttons; meant as a reference for small machines.
    """

    mode = "lights"

    def __init__(self, limits: SolverLimits | None = None):
        self.limits = limits or SolverLimits()

    def plan(self, machine: Machine) -> list[int]:
        A = machine.effect_matrix(self.mode).astype(np.int64)
        b = np.asarray(machine.target(self.mode), dtype=np.int64)
        n = machine.n_buttons
        check_search_space(n, 1 << n, self.limits)

        for r in range(n + 1):
            for combo in itertools.combinations(range(n), r):
                x = np.zeros((n,), dtype=np.int64)
                x[list(combo)] = 1
                if np.array_equal((A @ x) % 2, b):
                    return [int(v) for v in x]
        raise InconsistentSystemError("No press combination lights the target")

    def fewest_presses(self, machine: Machine) -> int:
        return sum(self.plan(machine))


class BruteForceJoltageSolver(Solver):
    """
    Enumerate every press-count vector within the per-button bounds.
    Each button is bounded by the smallest target among the counters it touches.
    """

    mode = "joltage"

    def __init__(self, limits: SolverLimits | None = None):
        self.limits = limits or SolverLimits()

    def plan(self, machine: Machine) -> list[int]:
        A = machine.effect_matrix(self.mode).astype(np.int64)
        b = np.asarray(machine.target(self.mode), dtype=np.int64)
        n = machine.n_buttons
        bounds = free_variable_bounds(
            machine.n_counters(self.mode), machine.buttons, b, range(n)
        )
        check_search_space(n, integer_search_space(bounds), self.limits)

        best_key = None
        best_plan = None
        for counts in itertools.product(*(range(bd + 1) for bd in bounds)):
            x = np.asarray(counts, dtype=np.int64)
            if not np.array_equal(A @ x, b):
                continue
            key = int(x.sum())
            if best_key is None or key < best_key:
                best_key = key
                best_plan = x

        if best_plan is None:
            raise NoIntegerSolutionError(
                "No non-negative press counts reach the joltage targets"
            )
        return [int(v) for v in best_plan]

    def fewest_presses(self, machine: Machine) -> int:
        return sum(self.plan(machine))
