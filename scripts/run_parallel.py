import argparse
import csv
import multiprocessing as mp
import os
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from togglesolve.config import limits_from_config, load_config
from togglesolve.evaluation.metrics import (
    FIELDNAMES,
    failure_count,
    result_row,
    total_presses,
)
from togglesolve.machine import parse_machines
from togglesolve.solvers import (
    BruteForceJoltageSolver,
    BruteForceLightsSolver,
    GF2EliminationSolver,
    IntegerEliminationSolver,
    SolverError,
)

# Limit threads per worker
os.environ["OMP_NUM_THREADS"] = "1"
os.environ["OPENBLAS_NUM_THREADS"] = "1"
os.environ["MKL_NUM_THREADS"] = "1"
mp.freeze_support()


def make_solver(name: str, mode: str, limits=None):
    name = name.lower()
    if name == "elimination":
        if mode == "lights":
            return GF2EliminationSolver(limits)
        if mode == "joltage":
            return IntegerEliminationSolver(limits)
    if name == "brute_force":
        if mode == "lights":
            return BruteForceLightsSolver(limits)
        if mode == "joltage":
            return BruteForceJoltageSolver(limits)
    raise ValueError(f"Unknown solver/mode: {name}/{mode}")


def make_batches(machines, modes, batch_size):
    """Create job batches for parallel processing."""
    n_machines = len(machines)
    ranges = [
        (i, min(i + batch_size, n_machines))
        for i in range(0, n_machines, batch_size)
    ]
    for mode in modes:
        for lo, hi in ranges:
            yield {
                "mode": mode,
                "idx_lo": lo,
                "idx_hi": hi,
                "machines": machines[lo:hi],
            }


def _run_batch(job):
    """Solve one batch of machines in one mode."""
    mode = job["mode"]
    solver_name = job["solver"]
    limits = limits_from_config(job["cfg"])
    solver = make_solver(solver_name, mode, limits)

    rows = []
    for offset, machine in enumerate(job["machines"]):
        machine_id = job["idx_lo"] + offset
        start_time = time.perf_counter()
        try:
            presses = solver.fewest_presses(machine)
            status = "ok"
        except SolverError as e:
            # failure stays confined to this machine's row
            presses = None
            status = type(e).__name__
        time_ms = (time.perf_counter() - start_time) * 1000
        rows.append(
            result_row(
                machine_id, machine, mode, solver_name, presses, status, time_ms
            )
        )
    return rows


def run_pool(jobs, writer, workers, max_inflight=None, total_jobs=None):
    """Run jobs in parallel, write rows as they complete and return all rows."""
    ctx = mp.get_context("spawn")
    if max_inflight is None:
        max_inflight = workers * 3

    inflight = set()
    all_rows = []
    done = 0
    start_time = time.time()

    with ProcessPoolExecutor(max_workers=workers, mp_context=ctx) as ex:
        jobs_iter = iter(jobs)
        while len(inflight) < max_inflight:
            try:
                j = next(jobs_iter)
            except StopIteration:
                break
            inflight.add(ex.submit(_run_batch, j))

        while inflight:
            for fut in as_completed(inflight):
                inflight.remove(fut)
                rows = fut.result()
                writer.writerows(rows)
                all_rows.extend(rows)
                done += 1

                elapsed = time.time() - start_time
                pct = done / total_jobs if total_jobs else 0.0
                print(
                    f"\r[progress] {done}/{total_jobs} batches ({pct:>6.1%}) | "
                    f"{len(all_rows):>7,} machines | "
                    f"elapsed: {int(elapsed // 60)}m {int(elapsed % 60)}s",
                    end="",
                    flush=True,
                )
                # Submit next job to keep inflight bounded
                try:
                    j = next(jobs_iter)
                    inflight.add(ex.submit(_run_batch, j))
                except StopIteration:
                    pass
                break  # re-enter as_completed with updated set
    print()
    return all_rows


def main():
    n_cpus = os.cpu_count() or 1
    default_workers = max(n_cpus - 1, 1)

    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--config",
        default=str(ROOT / "experiments" / "configs" / "example.yaml"),
    )
    ap.add_argument("--input", default=None, help="Machine description file")
    ap.add_argument("--out", default=None, help="Output CSV path")
    ap.add_argument(
        "--solver",
        choices=["elimination", "brute_force"],
        default=None,
        help="Overrides the solver named in the config",
    )
    ap.add_argument(
        "--workers", type=int, default=default_workers, help="Number of workers"
    )
    ap.add_argument(
        "--batch-size", type=int, default=50, help="Machines per batch"
    )
    args = ap.parse_args()

    cfg = load_config(args.config)
    modes = list(cfg.get("modes", ["lights", "joltage"]))
    solver_name = args.solver or cfg.get("solver", "elimination")
    input_path = Path(args.input or (ROOT / cfg["input"]))
    out_dir = Path(cfg.get("output_dir", "results/runs"))
    out_dir.mkdir(parents=True, exist_ok=True)
    out_csv = args.out or str(out_dir / f"{input_path.stem}.csv")

    machines = parse_machines(input_path.read_text(encoding="utf-8"))
    limits_from_config(cfg)  # fail fast on a bad limits section

    num_ranges = (len(machines) + args.batch_size - 1) // args.batch_size
    total_jobs = num_ranges * len(modes)

    def job_stream():
        for j in make_batches(machines, modes, args.batch_size):
            j.update({"solver": solver_name, "cfg": cfg})
            yield j

    print(
        f"\nSolving {len(machines):,} machines ({total_jobs:,} batches) "
        f"with {args.workers} workers...\n"
    )

    start_time = time.time()
    with open(out_csv, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        rows = run_pool(
            job_stream(),
            writer,
            workers=args.workers,
            max_inflight=args.workers * 3,
            total_jobs=total_jobs,
        )

    elapsed = time.time() - start_time
    for mode in modes:
        print(
            f"{mode}: {total_presses(rows, mode)} presses, "
            f"{failure_count(rows, mode)} failed"
        )
    print(f"\nDone in {int(elapsed/60)}m {int(elapsed%60)}s")
    print(f"Output: {out_csv}\n")


if __name__ == "__main__":
    main()
