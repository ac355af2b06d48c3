from togglesolve.solvers.base import (
    InconsistentSystemError,
    NoIntegerSolutionError,
    SearchSpaceTooLargeError,
    Solver,
    SolverError,
)
from togglesolve.solvers.brute_force import (
    BruteForceJoltageSolver,
    BruteForceLightsSolver,
)
from togglesolve.solvers.elimination import (
    GF2EliminationSolver,
    IntegerEliminationSolver,
    solve_binary,
    solve_integer,
)
