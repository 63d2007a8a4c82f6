"""Plotting utilities for SIRD simulations.

This module provides reusable Matplotlib helpers to visualize:
- the four compartment curves of a daily series, with the peak marked
- the Euler trajectory against the continuous-time reference solution

It can also be used as a script to plot a stored result from a history
file, e.g.:
  python -m src.visualization.visualize --history data/history/simulacoes.json --id 1735000000000
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from src.sird.config import DEFAULTS  # noqa: E402
from src.sird.io import ensure_dir, load_json  # noqa: E402
from src.sird.results import SERIES_KEYS, display_series, from_record  # noqa: E402
from src.sird.simulate import DailySnapshot, PeakRecord, Trajectory, reference_solution  # noqa: E402


# Line colors used by the web charts.
COLORS = {
    "S": "#95E1D3",
    "I": "#FF6B6B",
    "R": "#4ECDC4",
    "D": "#F38181",
}


def save_figure(fig: plt.Figure, path: Path | str, dpi: int = 150) -> Path:
    """Save a Matplotlib figure, creating the parent directory, and close it."""
    path = Path(path)
    ensure_dir(path.parent)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path


def series_arrays(series: Sequence[DailySnapshot]) -> Tuple[np.ndarray, Dict[str, np.ndarray]]:
    """Split a daily series into a day array and one array per compartment."""
    days = np.array([snap.day for snap in series], dtype=int)
    curves = {
        name: np.array([getattr(snap, name) for snap in series], dtype=float)
        for name in COLORS
    }
    return days, curves


def plot_compartments(
    series: Sequence[DailySnapshot],
    peak: Optional[PeakRecord] = None,
    title: Optional[str] = None,
    ax: Optional[plt.Axes] = None,
) -> plt.Axes:
    """Plot S, I, R, D over days; optionally mark the infection peak."""
    ax = ax or plt.gca()
    days, curves = series_arrays(series)
    for name, values in curves.items():
        ax.plot(days, values, label=SERIES_KEYS[name], color=COLORS[name], lw=2)
    if peak is not None:
        ax.axvline(peak.day, color=COLORS["I"], ls="--", lw=1)
        ax.annotate(
            f"pico {peak.value:,.0f} (dia {peak.day})",
            xy=(peak.day, peak.value),
            xytext=(5, 5),
            textcoords="offset points",
            fontsize=8,
        )
    if title:
        ax.set_title(title)
    ax.set_xlabel("Dias")
    ax.set_ylabel("População")
    ax.legend(fontsize=8)
    return ax


def plot_reference_comparison(
    trajectory: Trajectory,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (10, 4),
) -> plt.Figure:
    """Euler I(t) vs the odeint reference, and their absolute difference."""
    days = trajectory.days
    reference = reference_solution(trajectory.config, days.astype(float))
    euler_i = trajectory.states[:, 1]

    fig, axes = plt.subplots(1, 2, figsize=figsize)
    axes[0].plot(days, euler_i, label="Euler (dt=%g)" % DEFAULTS.dt, color=COLORS["I"])
    axes[0].plot(days, reference[:, 1], "k--", lw=1, label="odeint")
    axes[0].set_xlabel("Dias")
    axes[0].set_ylabel("I(t)")
    axes[0].legend(fontsize=8)

    axes[1].plot(days, np.abs(euler_i - reference[:, 1]), color="gray")
    axes[1].set_xlabel("Dias")
    axes[1].set_ylabel("|error|")
    axes[1].set_title("discretization error")

    if title:
        fig.suptitle(title)
    return fig


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plot a stored SIRD result.")
    parser.add_argument("--history", type=str, default=str(DEFAULTS.history_path))
    parser.add_argument("--id", type=int, required=True)
    parser.add_argument("--out", type=str, default=None)
    parser.add_argument("--dpi", type=int, default=150)
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    records = load_json(args.history, default=[])
    matches = [rec for rec in records if rec.get("id") == args.id]
    if not matches:
        raise SystemExit(f"No record with id {args.id} in {args.history}")

    result = from_record(matches[0])
    fig, ax = plt.subplots(figsize=(9, 5))
    plot_compartments(display_series(result), peak=result.peak, title=result.config.name, ax=ax)
    out = Path(args.out) if args.out else DEFAULTS.runs_dir / f"result_{args.id}.png"
    print(save_figure(fig, out, dpi=args.dpi))


if __name__ == "__main__":
    main()
