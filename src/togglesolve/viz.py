import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle


def _outline_columns(ax, cols, n_rows, color, linewidth=2):
    for c in cols:
        ax.add_patch(
            Rectangle(
                (c - 0.5, -0.5),
                1,
                n_rows,
                edgecolor=color,
                facecolor="none",
                linewidth=linewidth,
            )
        )


def show_effect_matrix(
    machine,
    presses=None,
    mode="lights",
    ax=None,
    pressed_color="red",
    cmap="Greys",
):
    """
    Show which counters each button affects, one column per button.

    Parameters
    ----------
    machine : Machine
        Machine to draw.
    presses : iterable[int], optional
        Press counts per button (a solver plan). Pressed buttons are outlined
        and their counts used as column labels.
    mode : str
        "lights" or "joltage"; selects the counters shown.
    """
    A = machine.effect_matrix(mode)
    n_counters, n_buttons = A.shape
    if ax is None:
        _, ax = plt.subplots(figsize=(0.5 * n_buttons + 2, 0.5 * n_counters + 1.5))
    ax.imshow(A, cmap=cmap, vmin=0, vmax=1, aspect="auto")

    if presses is not None:
        presses = np.asarray(presses)
        _outline_columns(ax, np.flatnonzero(presses), n_counters, pressed_color)
        ax.set_xticks(range(n_buttons))
        ax.set_xticklabels([f"{j}\nx{int(p)}" for j, p in enumerate(presses)])
    else:
        ax.set_xticks(range(n_buttons))
    ax.set_yticks(range(n_counters))
    ax.set_yticklabels([str(t) for t in machine.target(mode)])
    ax.set_xlabel("button")
    ax.set_ylabel("counter target")
    return ax


def show_echelon_form(form, ax=None, cmap="coolwarm", pivot_color="black"):
    """
    Reduced augmented matrix [R | r]; pivot columns outlined, rhs split off by a line.
    """
    data = np.asarray(form.matrix, dtype=float)
    m, width = data.shape
    if ax is None:
        _, ax = plt.subplots(figsize=(0.5 * width + 2, 0.5 * m + 1.5))
    v = max(float(np.abs(data).max()) if data.size else 1.0, 1.0)
    im = ax.imshow(data, cmap=cmap, vmin=-v, vmax=v, aspect="auto")
    pivots = [pc for pc in form.pivot_cols if pc is not None]
    _outline_columns(ax, pivots, m, pivot_color, linewidth=1.5)
    ax.axvline(width - 1.5, color="black", linewidth=1)
    ax.set_title(f"rank {form.rank}, free {list(form.free_cols)}")
    plt.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    return ax
