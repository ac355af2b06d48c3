from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class SolverLimits:
    """Numeric tolerances and enumeration guards shared by the solvers."""

    max_free_vars: Optional[int] = 24
    max_search_space: Optional[int] = None
    epsilon: float = 1e-9
    integrality_tol: float = 1e-3


def load_config(path: str | Path) -> dict:
    """Read an experiment YAML file and return its `experiment` mapping."""
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if "experiment" not in cfg:
        raise ValueError(f"{path}: missing top-level 'experiment' section")
    return cfg["experiment"]


def limits_from_config(cfg: dict | None) -> SolverLimits:
    """Build SolverLimits from the `limits` and `tolerances` sections."""
    if not cfg:
        return SolverLimits()

    known = {f.name for f in fields(SolverLimits)}
    values = {}
    for section in ("limits", "tolerances"):
        for key, value in (cfg.get(section) or {}).items():
            if key not in known:
                raise ValueError(f"Unknown {section} key: {key}")
            values[key] = value

    for key in ("max_free_vars", "max_search_space"):
        if values.get(key) is not None:
            values[key] = int(values[key])
    for key in ("epsilon", "integrality_tol"):
        if key in values:
            values[key] = float(values[key])
    return SolverLimits(**values)
