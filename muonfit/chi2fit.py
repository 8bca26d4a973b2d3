"""Least-squares fits of binned decay-time spectra and their correlation output."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

import numpy as np
from scipy.optimize import curve_fit

from muonfit.data import Histogram

Model = Callable[..., "np.ndarray | float"]


@dataclass(frozen=True)
class Parameter:
    """A named fit parameter with a starting value and optional limits."""

    name: str
    value: float
    low: float | None = None
    high: float | None = None

    def __post_init__(self) -> None:
        if (self.low is None) != (self.high is None):
            raise ValueError(f"parameter {self.name!r} needs both limits or none")
        if self.low is not None and self.high is not None:
            if not self.high > self.low:
                raise ValueError(f"parameter {self.name!r} has an empty range")
            if not self.low <= self.value <= self.high:
                raise ValueError(
                    f"starting value of {self.name!r} lies outside its limits"
                )

    @property
    def limited(self) -> bool:
        return self.low is not None

    @property
    def bounds(self) -> tuple[float, float]:
        """Limits as a pair, unbounded sides given as infinities."""
        low = -math.inf if self.low is None else self.low
        high = math.inf if self.high is None else self.high
        return low, high


@dataclass(frozen=True, eq=False)
class FitResult:
    """Best-fit values, errors and covariance of a fit.

    ``fval`` is the minimised objective: the chi-square for least-squares
    fits, the negative log-likelihood for likelihood fits.
    """

    parameters: tuple[Parameter, ...]
    values: np.ndarray
    errors: np.ndarray
    covariance: np.ndarray
    fval: float
    ndf: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "values", np.asarray(self.values, dtype=float))
        object.__setattr__(self, "errors", np.asarray(self.errors, dtype=float))
        object.__setattr__(
            self, "covariance", np.asarray(self.covariance, dtype=float)
        )
        n = len(self.parameters)
        if self.values.shape != (n,) or self.errors.shape != (n,):
            raise ValueError("values and errors must match the parameters")
        if self.covariance.shape != (n, n):
            raise ValueError("covariance must be a square matrix over the parameters")

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def _index(self, name: str) -> int:
        try:
            return self.names.index(name)
        except ValueError:
            raise KeyError(name) from None

    def value(self, name: str) -> float:
        """Best-fit value of the named parameter."""
        return float(self.values[self._index(name)])

    def error(self, name: str) -> float:
        """Symmetric error of the named parameter."""
        return float(self.errors[self._index(name)])

    def correlation(self) -> np.ndarray:
        """Correlation matrix derived from the covariance."""
        sigma = np.sqrt(np.clip(np.diag(self.covariance), 0.0, None))
        scale = np.outer(sigma, sigma)
        corr = np.zeros_like(self.covariance)
        valid = scale > 0
        corr[valid] = self.covariance[valid] / scale[valid]
        return corr


def fit_histogram(
    hist: Histogram, model: Model, parameters: Sequence[Parameter]
) -> FitResult:
    """Chi-square fit of ``model(x, *params)`` to the bin contents.

    Bins with zero error carry no information and are left out.
    """
    params = tuple(parameters)
    if not params:
        raise ValueError("at least one parameter is required")

    x = hist.centers()
    y = np.asarray(hist.counts, dtype=float)
    sigma = np.asarray(hist.errors, dtype=float)
    used = sigma > 0
    npoints = int(np.count_nonzero(used))
    if npoints < len(params):
        raise ValueError("not enough non-empty bins for the number of parameters")

    def evaluate(xx: np.ndarray, *p: float) -> np.ndarray:
        return np.broadcast_to(
            np.asarray(model(xx, *p), dtype=float), np.shape(xx)
        ).astype(float)

    lower = [p.bounds[0] for p in params]
    upper = [p.bounds[1] for p in params]
    start = [p.value for p in params]

    values, covariance = curve_fit(
        evaluate,
        x[used],
        y[used],
        p0=start,
        sigma=sigma[used],
        absolute_sigma=True,
        bounds=(lower, upper),
    )
    covariance = np.atleast_2d(covariance)
    residuals = (y[used] - evaluate(x[used], *values)) / sigma[used]
    chi2 = float(np.sum(residuals**2))
    errors = np.sqrt(np.clip(np.diag(covariance), 0.0, None))
    return FitResult(
        parameters=params,
        values=values,
        errors=errors,
        covariance=covariance,
        fval=chi2,
        ndf=npoints - len(params),
    )


def correlation_csv_text(result: FitResult) -> str:
    """Render the correlation matrix as CSV: a header of names, then rows."""
    lines = [",".join(result.names)]
    lines.extend(
        ",".join(f"{value:.6f}" for value in row) for row in result.correlation()
    )
    return "\n".join(lines) + "\n"


def write_correlation_csv(result: FitResult, path: str | PathLike[str]) -> None:
    """Write the correlation matrix of a fit to a CSV file."""
    Path(path).write_text(correlation_csv_text(result))