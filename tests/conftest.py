import numpy as np
import pytest

from togglesolve.machine import Machine

EXAMPLE_LINES = [
    "[.##.] (3) (1,3) (2) (2,3) (0,2) (0,1) {3,5,4,7}",
    "[...#.] (0,2,3,4) (2,3) (0,4) (0,1,2) (1,2,3,4) {7,5,12,7,2}",
    "[.###.#] (0,1,2,3,4) (0,3,4) (0,1,2,4,5) (1,2) {10,11,11,5,10,5}",
]


@pytest.fixture
def example_machines():
    return [Machine.from_line(line) for line in EXAMPLE_LINES]


@pytest.fixture
def random_buttons():
    def make(rng, n_counters, n_buttons):
        # every button touches at least one counter
        buttons = []
        for _ in range(n_buttons):
            mask = rng.random(n_counters) < 0.5
            if not mask.any():
                mask[rng.integers(n_counters)] = True
            buttons.append(tuple(int(i) for i in np.flatnonzero(mask)))
        return buttons

    return make
