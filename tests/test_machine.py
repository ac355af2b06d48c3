import pytest

from togglesolve.machine import Machine, MachineFormatError, parse_machines


def test_from_line():
    machine = Machine.from_line("[.##.] (3) (1,3) (2) (2,3) (0,2) (0,1) {3,5,4,7}")
    assert machine.lights == (False, True, True, False)
    assert machine.buttons == ((3,), (1, 3), (2,), (2, 3), (0, 2), (0, 1))
    assert machine.joltages == (3, 5, 4, 7)
    assert machine.n_buttons == 6
    assert machine.n_counters() == 4


def test_str_matches_input_line():
    line = "[...#.] (0,2,3,4) (2,3) (0,4) (0,1,2) (1,2,3,4) {7,5,12,7,2}"
    assert str(Machine.from_line(line)) == line
    assert Machine.from_line(line) == Machine.from_line(line + "  ")


@pytest.mark.parametrize(
    "line",
    [
        "[.#] {1,2}",
        ".#] (0) {1,2}",
        "[.x] (0) {1,2}",
        "[.#] 0,1 {1,2}",
        "[.#] (0,a) {1,2}",
        "[.#] (0) 1,2",
        "[.#] (0) {1,-2}",
    ],
)
def test_from_line_rejects_malformed(line):
    with pytest.raises(MachineFormatError):
        Machine.from_line(line)


def test_target_and_effect_matrix():
    machine = Machine.from_line("[#.] (0,1) (1,4) {2,3}")
    assert machine.target("lights") == (True, False)
    assert machine.target("joltage") == (2, 3)
    assert machine.effect_matrix().tolist() == [[1, 0], [1, 1]]
    with pytest.raises(ValueError):
        machine.target("voltage")


def test_parse_machines_skips_blank_lines():
    text = "[#] (0) {1}\n\n[.] (0) {0}\n"
    machines = parse_machines(text)
    assert len(machines) == 2
    assert machines[1].lights == (False,)
