"""Decay-time models: exponentials with an optional flat background."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike


def exponential(x: ArrayLike, norm: float, tau: float) -> np.ndarray | float:
    """Return ``norm * exp(-x / tau)``."""
    result = norm * np.exp(-np.asarray(x, dtype=float) / tau)
    return float(result) if np.ndim(result) == 0 else result


def single_exp_background(
    x: ArrayLike, norm: float, tau: float, background: float
) -> np.ndarray | float:
    """One exponential decay plus a constant background."""
    return exponential(x, norm, tau) + background


def double_exp_background(
    x: ArrayLike,
    norm1: float,
    tau1: float,
    norm2: float,
    tau2: float,
    background: float,
) -> np.ndarray | float:
    """Two exponential decays plus a constant background."""
    return exponential(x, norm1, tau1) + exponential(x, norm2, tau2) + background


def exp_components(params: Sequence[float]) -> list[tuple[float, float]]:
    """Return the ``(norm, tau)`` pairs of the exponentials in a parameter set.

    Three parameters describe a single exponential plus background, five
    describe two exponentials plus background. Any other count has no
    recognised components and yields an empty list.
    """
    values = [float(p) for p in params]
    if len(values) == 3:
        return [(values[0], values[1])]
    if len(values) == 5:
        return [(values[0], values[1]), (values[2], values[3])]
    return []