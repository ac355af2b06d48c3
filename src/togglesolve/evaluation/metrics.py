from __future__ import annotations

FIELDNAMES = [
    "machine_id",
    "mode",
    "solver",
    "n_counters",
    "n_buttons",
    "presses",
    "status",
    "time_ms",
]


def result_row(machine_id, machine, mode, solver, presses, status, time_ms):
    # presses is "" for a machine that failed
    return {
        "machine_id": int(machine_id),
        "mode": mode,
        "solver": solver,
        "n_counters": machine.n_counters(mode),
        "n_buttons": machine.n_buttons,
        "presses": "" if presses is None else int(presses),
        "status": status,
        "time_ms": float(time_ms),
    }


def total_presses(rows, mode: str) -> int:
    return sum(
        int(r["presses"])
        for r in rows
        if r["mode"] == mode and r["status"] == "ok"
    )


def failure_count(rows, mode: str) -> int:
    return sum(1 for r in rows if r["mode"] == mode and r["status"] != "ok")
