"""Drawing fitted decay-time spectra."""

from __future__ import annotations

from os import PathLike
from pathlib import Path

import numpy as np
from matplotlib.figure import Figure

from muonfit.chi2fit import FitResult
from muonfit.data import Histogram
from muonfit.models import (
    double_exp_background,
    exp_components,
    exponential,
    single_exp_background,
)

_COMPONENT_COLORS = {1: ("dimgray",), 2: ("black", "gray")}


def _model_for(result: FitResult):
    count = len(result.values)
    if count == 3:
        return single_exp_background
    if count == 5:
        return double_exp_background
    raise ValueError(f"no decay model with {count} parameters")


def tau_labels(result: FitResult) -> list[str]:
    """Text lines giving every fitted lifetime with its error in microseconds."""
    components = exp_components(result.values)
    labels = []
    for k in range(len(components)):
        index = 2 * k + 1
        labels.append(
            f"{result.names[index]} = {result.values[index]:.3f} "
            f"± {result.errors[index]:.3f} μs"
        )
    return labels


def _stats_text(result: FitResult) -> str:
    lines = [f"χ² / ndf = {result.fval:.4g} / {result.ndf}"]
    lines.extend(
        f"{name} = {value:.4g} ± {error:.3g}"
        for name, value, error in zip(result.names, result.values, result.errors)
    )
    return "\n".join(lines)


def plot_fit(
    hist: Histogram,
    result: FitResult,
    path: str | PathLike[str],
    label: str,
    color: str,
) -> Path:
    """Draw the histogram, the fitted model and its exponential components.

    The figure is saved to ``path``, whose suffix selects the format, and
    the path is returned.
    """
    model = _model_for(result)
    figure = Figure(figsize=(12, 10))
    axes = figure.add_subplot()

    axes.stairs(hist.counts, hist.edges, color=color, alpha=0.3, fill=True)
    axes.stairs(hist.counts, hist.edges, color=color, linewidth=1, label=label)

    x = np.linspace(hist.low, hist.high, 500)
    axes.plot(
        x, model(x, *result.values), color="black", linewidth=2, label="Overall fit"
    )
    components = exp_components(result.values)
    colors = _COMPONENT_COLORS.get(len(components), ())
    for (norm, tau), line_color in zip(components, colors):
        axes.plot(x, exponential(x, norm, tau), linestyle="--", color=line_color)

    axes.set_xlabel(r"$\Delta t$ [$\mu$s]")
    axes.set_ylabel("Normalized Counts")
    for offset, text in enumerate(tau_labels(result)):
        axes.text(0.15, 0.83 - 0.06 * offset, text, transform=axes.transAxes,
                  fontsize=14)
    axes.text(
        0.98, 0.72, _stats_text(result), transform=axes.transAxes,
        ha="right", va="top", fontsize=10,
        bbox={"boxstyle": "square", "facecolor": "white", "edgecolor": "black"},
    )
    axes.legend(loc="upper right")

    target = Path(path)
    figure.savefig(target)
    return target