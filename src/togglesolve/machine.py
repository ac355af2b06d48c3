from __future__ import annotations

from typing import Tuple

import numpy as np


class MachineFormatError(ValueError):
    """Raised when a machine description line cannot be parsed."""

    pass


def _split_ints(body: str, what: str) -> Tuple[int, ...]:
    try:
        return tuple(int(s) for s in body.split(","))
    except ValueError:
        raise MachineFormatError(f"Invalid {what} number in {body!r}") from None


class Machine:
    """Indicator lights, buttons and joltage targets of one machine.

    Button j lists the counters it affects; it is also variable j of the
    linear systems built from the machine.
    """

    def __init__(self, lights, buttons, joltages):
        self.lights: Tuple[bool, ...] = tuple(bool(x) for x in lights)
        self.buttons: Tuple[Tuple[int, ...], ...] = tuple(
            tuple(int(i) for i in b) for b in buttons
        )
        self.joltages: Tuple[int, ...] = tuple(int(x) for x in joltages)

    @staticmethod
    def from_line(line: str) -> "Machine":
        """Parse `[.##.] (3) (1,3) ... {3,5,4,7}`."""
        parts = line.split()
        if len(parts) < 3:
            raise MachineFormatError("Invalid input format: too few parts")

        lights_str = parts[0]
        if not (lights_str.startswith("[") and lights_str.endswith("]")):
            raise MachineFormatError("Invalid lights format")
        lights = []
        for ch in lights_str[1:-1]:
            if ch not in ".#":
                raise MachineFormatError(f"Invalid light character {ch!r}")
            lights.append(ch == "#")

        joltages_str = parts[-1]
        if not (joltages_str.startswith("{") and joltages_str.endswith("}")):
            raise MachineFormatError("Invalid joltages format")
        joltages = _split_ints(joltages_str[1:-1], "joltage")
        if any(j < 0 for j in joltages):
            raise MachineFormatError("Joltage targets must be non-negative")

        buttons = []
        for button_str in parts[1:-1]:
            if not (button_str.startswith("(") and button_str.endswith(")")):
                raise MachineFormatError(f"Invalid button format {button_str!r}")
            buttons.append(_split_ints(button_str[1:-1], "button"))

        return Machine(lights, buttons, joltages)

    @property
    def n_buttons(self) -> int:
        return len(self.buttons)

    def n_counters(self, mode: str = "lights") -> int:
        return len(self.target(mode))

    def target(self, mode: str) -> tuple:
        if mode == "lights":
            return self.lights
        if mode == "joltage":
            return self.joltages
        raise ValueError(f"Unknown mode: {mode}")

    def effect_matrix(self, mode: str = "lights") -> np.ndarray:
        """Return the (n_counters, n_buttons) 0/1 matrix of button effects."""
        n = self.n_counters(mode)
        A = np.zeros((n, self.n_buttons), dtype=np.uint8)
        for j, button in enumerate(self.buttons):
            for i in button:
                if 0 <= i < n:
                    A[i, j] = 1
        return A

    def __eq__(self, other) -> bool:
        if not isinstance(other, Machine):
            return NotImplemented
        return (self.lights, self.buttons, self.joltages) == (
            other.lights,
            other.buttons,
            other.joltages,
        )

    def __hash__(self) -> int:
        return hash((self.lights, self.buttons, self.joltages))

    def __repr__(self):
        return (
            f"Machine(counters={len(self.lights)}, buttons={self.n_buttons})"
        )

    def __str__(self) -> str:
        lights = "".join("#" if x else "." for x in self.lights)
        buttons = " ".join(
            "(" + ",".join(str(i) for i in b) + ")" for b in self.buttons
        )
        joltages = ",".join(str(j) for j in self.joltages)
        return f"[{lights}] {buttons} {{{joltages}}}"


def parse_machines(text: str) -> list[Machine]:
    """Parse one machine per non-blank line."""
    return [Machine.from_line(line) for line in text.splitlines() if line.strip()]
