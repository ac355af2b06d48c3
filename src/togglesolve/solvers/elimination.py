from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..algebra import reduce_machine
from ..config import SolverLimits
from ..machine import Machine
from ..search import (
    bounded_integer_search,
    free_variable_bounds,
    gf2_min_presses,
    gf2_search_space,
    integer_search_space,
)
from .base import (
    InconsistentSystemError,
    NoIntegerSolutionError,
    SearchSpaceTooLargeError,
    Solver,
)


def check_search_space(free_count: int, space: int, limits: SolverLimits) -> None:
    """Refuse enumerations larger than the configured limits."""
    if limits.max_free_vars is not None and free_count > limits.max_free_vars:
        raise SearchSpaceTooLargeError(
            f"{free_count} free variables exceeds limit of {limits.max_free_vars}"
        )
    if limits.max_search_space is not None and space > limits.max_search_space:
        raise SearchSpaceTooLargeError(
            f"search space of {space:,} assignments exceeds limit of "
            f"{limits.max_search_space:,}"
        )


def binary_plan(
    n_counters: int,
    buttons: Sequence[Sequence[int]],
    target: Sequence[bool],
    limits: Optional[SolverLimits] = None,
) -> np.ndarray:
    """Return a minimum-weight 0/1 press vector reaching the target lights."""
    limits = limits or SolverLimits()
    form = reduce_machine(n_counters, buttons, target, "lights")
    if not form.consistent:
        raise InconsistentSystemError("No solution found for machine")
    check_search_space(len(form.free_cols), gf2_search_space(form), limits)
    _, solution = gf2_min_presses(form)
    return solution


def integer_plan(
    n_counters: int,
    buttons: Sequence[Sequence[int]],
    target: Sequence[int],
    limits: Optional[SolverLimits] = None,
) -> Optional[np.ndarray]:
    """Return a minimum-total press-count vector reaching the target counters.

    None means the rational system itself is inconsistent.
    """
    limits = limits or SolverLimits()
    form = reduce_machine(
        n_counters, buttons, target, "joltage", epsilon=limits.epsilon
    )
    if not form.consistent:
        return None
    bounds = free_variable_bounds(n_counters, buttons, target, form.free_cols)
    check_search_space(len(bounds), integer_search_space(bounds), limits)
    found = bounded_integer_search(
        form, bounds, epsilon=limits.epsilon, tolerance=limits.integrality_tol
    )
    if found is None:
        raise NoIntegerSolutionError("No solution found for machine")
    return found[1]


def solve_binary(
    n_counters: int,
    buttons: Sequence[Sequence[int]],
    target: Sequence[bool],
    limits: Optional[SolverLimits] = None,
) -> int:
    """Fewest presses (each button at most once) that light exactly `target`.

    Raises InconsistentSystemError if no press combination works.
    """
    return int(binary_plan(n_counters, buttons, target, limits).sum())


def solve_integer(
    n_counters: int,
    buttons: Sequence[Sequence[int]],
    target: Sequence[int],
    limits: Optional[SolverLimits] = None,
) -> int:
    """Fewest total presses that bring every counter to its target value.

    Returns 0 if the real-valued system is inconsistent and raises
    NoIntegerSolutionError if it is consistent but has no non-negative
    integer solution within the per-button bounds.
    """
    solution = integer_plan(n_counters, buttons, target, limits)
    if solution is None:
        return 0
    return int(solution.sum())


class GF2EliminationSolver(Solver):
    """Indicator lights via elimination over GF(2) and free-variable enumeration."""

    mode = "lights"

    def __init__(self, limits: SolverLimits | None = None):
        self.limits = limits or SolverLimits()

    def plan(self, machine: Machine) -> list[int]:
        solution = binary_plan(
            machine.n_counters(self.mode),
            machine.buttons,
            machine.target(self.mode),
            self.limits,
        )
        return [int(x) for x in solution]

    def fewest_presses(self, machine: Machine) -> int:
        return sum(self.plan(machine))


class IntegerEliminationSolver(Solver):
    """Joltage counters via real-valued elimination and bounded integer search."""

    mode = "joltage"

    def __init__(self, limits: SolverLimits | None = None):
        self.limits = limits or SolverLimits()

    def plan(self, machine: Machine) -> list[int]:
        solution = integer_plan(
            machine.n_counters(self.mode),
            machine.buttons,
            machine.target(self.mode),
            self.limits,
        )
        if solution is None:
            return [0] * machine.n_buttons
        return [int(x) for x in solution]

    def fewest_presses(self, machine: Machine) -> int:
        return sum(self.plan(machine))
