import itertools

import numpy as np
import pytest

from togglesolve.algebra import reduce_machine
from togglesolve.search import (
    BestTotal,
    BoundedIntegerSearch,
    bounded_integer_search,
    free_variable_bounds,
    gf2_min_presses,
    integer_search_space,
)


def test_gf2_min_presses_reference_machine():
    buttons = [(3,), (1, 3), (2,), (2, 3), (0, 2), (0, 1)]
    form = reduce_machine(4, buttons, [False, True, True, False], "lights")
    presses, solution = gf2_min_presses(form)
    assert presses == 2
    assert int(solution.sum()) == 2
    A = np.zeros((4, 6), dtype=int)
    for j, b in enumerate(buttons):
        A[list(b), j] = 1
    np.testing.assert_array_equal((A @ solution) % 2, [0, 1, 1, 0])


def test_gf2_min_presses_small_blocks_match_single_block(random_buttons):
    rng = np.random.default_rng(3)
    for _ in range(10):
        buttons = random_buttons(rng, 3, 9)
        target = rng.random(3) < 0.5
        form = reduce_machine(3, buttons, target, "lights")
        if not form.consistent:
            continue
        assert gf2_min_presses(form, block_size=3)[0] == gf2_min_presses(form)[0]


def test_gf2_min_presses_requires_consistency():
    form = reduce_machine(2, [(0, 1), (0, 1)], [True, False], "lights")
    with pytest.raises(ValueError):
        gf2_min_presses(form)


def test_free_variable_bounds():
    buttons = [(0, 1), (2,), (5,), (1, 2)]
    bounds = free_variable_bounds(3, buttons, [4, 7, 2], [0, 1, 2, 3])
    assert bounds == [4, 2, 0, 2]


def test_integer_search_space():
    assert integer_search_space([]) == 1
    assert integer_search_space([2, 0, 3]) == 12


def test_best_total_cuts_only_after_a_solution():
    best = BestTotal()
    assert not best.cuts(10**9)
    assert best.beaten_by(5)
    best.update(5, np.zeros(1, dtype=np.int64))
    assert best.cuts(5)
    assert not best.cuts(4)
    assert not best.beaten_by(5)


def test_bounded_search_reference_machine():
    buttons = [(3,), (1, 3), (2,), (2, 3), (0, 2), (0, 1)]
    target = [3, 5, 4, 7]
    form = reduce_machine(4, buttons, target, "joltage")
    bounds = free_variable_bounds(4, buttons, target, form.free_cols)
    total, solution = bounded_integer_search(form, bounds)
    assert total == 10
    A = np.zeros((4, 6), dtype=int)
    for j, b in enumerate(buttons):
        A[list(b), j] = 1
    np.testing.assert_array_equal(A @ solution, target)
    assert (solution >= 0).all()


def test_bounded_search_rejects_fractional_solution():
    # unique solution is x = (1/2, 1/2, 1/2)
    buttons = [(0, 1), (1, 2), (0, 2)]
    form = reduce_machine(3, buttons, [1, 1, 1], "joltage")
    assert form.free_cols == []
    assert bounded_integer_search(form, []) is None


def test_bounded_search_rejects_negative_pivot():
    form = reduce_machine(2, [(0,), (0, 1)], [0, 1], "joltage")
    assert bounded_integer_search(form, []) is None


def test_bounded_search_buffer_is_reset_between_runs():
    buttons = [(0,), (0,), (0, 1)]
    target = [3, 1]
    form = reduce_machine(2, buttons, target, "joltage")
    bounds = free_variable_bounds(2, buttons, target, form.free_cols)
    search = BoundedIntegerSearch(form, bounds)
    first = search.run()
    assert not search.values.any()
    second = search.run()
    assert first.total == second.total == 3


def test_bounded_search_checks_bound_count():
    form = reduce_machine(1, [(0,), (0,)], [2], "joltage")
    with pytest.raises(ValueError):
        BoundedIntegerSearch(form, [])


def _brute_force_min_total(n_counters, buttons, target):
    A = np.zeros((n_counters, len(buttons)), dtype=int)
    for j, b in enumerate(buttons):
        A[list(b), j] = 1
    limit = max(target) if target else 0
    best = None
    for x in itertools.product(range(limit + 1), repeat=len(buttons)):
        if np.array_equal(A @ np.asarray(x, dtype=int), target):
            s = sum(x)
            best = s if best is None else min(best, s)
    return best


def test_bounds_never_cut_off_the_optimum(random_buttons):
    # exhaustive search over [0, max(target)] for every button, no per-button bounds
    rng = np.random.default_rng(2024)
    for _ in range(25):
        n_counters = int(rng.integers(1, 4))
        buttons = random_buttons(rng, n_counters, int(rng.integers(1, 5)))
        A = np.zeros((n_counters, len(buttons)), dtype=int)
        for j, b in enumerate(buttons):
            A[list(b), j] = 1
        target = [int(v) for v in A @ rng.integers(0, 3, size=len(buttons))]
        form = reduce_machine(n_counters, buttons, target, "joltage")
        bounds = free_variable_bounds(n_counters, buttons, target, form.free_cols)
        found = bounded_integer_search(form, bounds)
        assert found is not None
        assert found[0] == _brute_force_min_total(n_counters, buttons, target)
