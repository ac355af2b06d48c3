from __future__ import annotations

from typing import Protocol

from ..machine import Machine


class SolverError(Exception):
    """Base class for failures while solving a single machine."""

    pass


class InconsistentSystemError(SolverError):
    """Raised when the GF(2) system reduces to an equation 0 = 1."""

    pass


class NoIntegerSolutionError(SolverError):
    """Raised when no non-negative integer assignment survives the bounded search."""

    pass


class SearchSpaceTooLargeError(SolverError):
    """Raised before enumeration when the search exceeds the configured limits."""

    pass


class Solver(Protocol):
    mode: str

    def plan(self, machine: Machine) -> list[int]: ...
    def fewest_presses(self, machine: Machine) -> int: ...
