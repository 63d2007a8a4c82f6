"""Tests for src.visualization.visualize."""

import numpy as np

from src.sird.simulate import simulate_sird
from src.visualization.visualize import (
    plot_compartments,
    plot_reference_comparison,
    save_figure,
    series_arrays,
)

import matplotlib.pyplot as plt


def test_series_arrays(scenario):
    series = simulate_sird(scenario).series
    days, curves = series_arrays(series)
    np.testing.assert_array_equal(days, np.arange(51))
    assert set(curves) == {"S", "I", "R", "D"}
    assert curves["S"][0] == 990


def test_plot_compartments_marks_peak(scenario, tmp_path):
    trajectory = simulate_sird(scenario)
    fig, ax = plt.subplots()
    plot_compartments(trajectory.series, peak=trajectory.peak, title="t", ax=ax)
    # Four compartment curves plus the peak marker.
    assert len(ax.get_lines()) == 5
    assert [t.get_text() for t in ax.get_legend().get_texts()] == [
        "Suscetíveis", "Infetados", "Recuperados", "Óbitos",
    ]
    path = save_figure(fig, tmp_path / "plots" / "curves.png")
    assert path.exists()


def test_plot_reference_comparison(scenario):
    fig = plot_reference_comparison(simulate_sird(scenario), title="ref")
    assert len(fig.axes) == 2
    plt.close(fig)
