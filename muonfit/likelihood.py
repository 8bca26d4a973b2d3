"""Poisson likelihood fits with Gaussian penalty terms on parameters."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
from scipy.optimize import brentq, minimize

from muonfit.chi2fit import FitResult, Model, Parameter
from muonfit.data import Histogram

ERROR_DEF = 0.5
_MIN_EXPECTED = 1e-300


@dataclass(frozen=True)
class PullTerm:
    """Gaussian constraint pulling parameter ``index`` towards ``value``."""

    index: int
    value: float
    error: float

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("parameter index must not be negative")
        if not self.error > 0:
            raise ValueError("constraint width must be positive")


def poisson_nll(hist: Histogram, model: Model, params: Sequence[float]) -> float:
    """Negative log-likelihood of the bin contents for Poisson expectations.

    The saturated-model form is used, so a model that reproduces every bin
    exactly gives zero.
    """
    counts = np.asarray(hist.counts, dtype=float)
    with np.errstate(all="ignore"):
        expected = np.broadcast_to(
            np.asarray(model(hist.centers(), *params), dtype=float), counts.shape
        )
        expected = np.maximum(expected, _MIN_EXPECTED)
        terms = expected - counts
        filled = counts > 0
        terms[filled] += counts[filled] * np.log(counts[filled] / expected[filled])
        total = float(np.sum(terms))
    return total if math.isfinite(total) else math.inf


@dataclass(frozen=True)
class ConstrainedLikelihood:
    """An objective function plus quadratic penalties from pull terms."""

    function: Callable[[np.ndarray], float]
    pulls: Sequence[PullTerm] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "pulls", tuple(self.pulls))

    def penalty(self, params: Sequence[float]) -> float:
        """Sum of ``0.5 * ((p - value) / error)**2`` over the pull terms."""
        values = np.asarray(params, dtype=float)
        return float(
            sum(0.5 * ((values[t.index] - t.value) / t.error) ** 2 for t in self.pulls)
        )

    def __call__(self, params: Sequence[float]) -> float:
        values = np.asarray(params, dtype=float)
        return float(self.function(values)) + self.penalty(values)


def _scipy_bounds(bounds: Sequence[tuple[float | None, float | None]]):
    return list(bounds) if any(b != (None, None) for b in bounds) else None


def _minimize(
    fun: Callable[[np.ndarray], float],
    start: np.ndarray,
    bounds: Sequence[tuple[float | None, float | None]],
) -> tuple[np.ndarray, float]:
    limits = _scipy_bounds(bounds)
    simplex = minimize(
        fun,
        start,
        method="Nelder-Mead",
        bounds=limits,
        options={
            "maxiter": 20000,
            "maxfev": 40000,
            "xatol": 1e-10,
            "fatol": 1e-12,
            "adaptive": True,
        },
    )
    polished = minimize(fun, simplex.x, method="L-BFGS-B", bounds=list(bounds))
    candidates = [(simplex.x, float(simplex.fun)), (polished.x, float(polished.fun))]
    best_x, best_f = min(candidates, key=lambda item: item[1])
    if not math.isfinite(best_f):
        raise RuntimeError("minimisation did not reach a finite minimum")
    return np.asarray(best_x, dtype=float), best_f


def _hessian(fun: Callable[[np.ndarray], float], point: np.ndarray) -> np.ndarray:
    n = len(point)
    steps = 1e-4 * np.maximum(np.abs(point), 1.0)
    hess = np.empty((n, n))
    centre = fun(point)
    for i in range(n):
        ei = np.zeros(n)
        ei[i] = steps[i]
        hess[i, i] = (fun(point + ei) - 2 * centre + fun(point - ei)) / steps[i] ** 2
        for j in range(i):
            ej = np.zeros(n)
            ej[j] = steps[j]
            value = (
                fun(point + ei + ej)
                - fun(point + ei - ej)
                - fun(point - ei + ej)
                + fun(point - ei - ej)
            ) / (4 * steps[i] * steps[j])
            hess[i, j] = hess[j, i] = value
    return hess


def fit_constrained(
    hist: Histogram,
    model: Model,
    parameters: Sequence[Parameter],
    pulls: Sequence[PullTerm] = (),
) -> FitResult:
    """Minimise the Poisson likelihood plus pull penalties.

    Errors come from the inverse Hessian of the negative log-likelihood,
    which corresponds to an error definition of 0.5.
    """
    params = tuple(parameters)
    if not params:
        raise ValueError("at least one parameter is required")
    pulls = tuple(pulls)
    for term in pulls:
        if term.index >= len(params):
            raise ValueError(f"pull term refers to missing parameter {term.index}")

    likelihood = ConstrainedLikelihood(
        lambda p: poisson_nll(hist, model, p), pulls
    )
    bounds = [(p.low, p.high) for p in params]
    start = np.array([p.value for p in params], dtype=float)
    best, fval = _minimize(likelihood, start, bounds)

    hess = _hessian(likelihood, best) / (2 * ERROR_DEF)
    try:
        covariance = np.linalg.inv(hess)
    except np.linalg.LinAlgError:
        covariance = np.linalg.pinv(hess)
    covariance = 0.5 * (covariance + covariance.T)
    diag = np.diag(covariance)
    errors = np.where(diag >= 0, np.sqrt(np.abs(diag)), np.nan)

    return FitResult(
        parameters=params,
        values=best,
        errors=errors,
        covariance=covariance,
        fval=fval,
        ndf=hist.nbins - len(params),
    )


def minos_errors(
    likelihood: Callable[[np.ndarray], float],
    result: FitResult,
    index: int,
) -> tuple[float, float]:
    """Asymmetric errors of one parameter from the profile likelihood.

    Returns ``(lower, upper)`` offsets from the best-fit value; ``lower`` is
    negative. Each is where the profiled objective rises by the error
    definition of 0.5.
    """
    values = np.array(result.values, dtype=float)
    n = len(values)
    if not 0 <= index < n:
        raise IndexError(f"parameter index {index} out of range")
    fmin = float(likelihood(values))
    free = [i for i in range(n) if i != index]
    free_bounds = [(result.parameters[i].low, result.parameters[i].high) for i in free]
    warm = {"x": values[free]}

    def profile(v: float) -> float:
        trial = values.copy()
        trial[index] = v
        if not free:
            return float(likelihood(trial)) - fmin - ERROR_DEF

        def restricted(q: np.ndarray) -> float:
            point = trial.copy()
            point[free] = q
            return float(likelihood(point))

        best, fbest = _minimize(restricted, warm["x"], free_bounds)
        warm["x"] = best
        return fbest - fmin - ERROR_DEF

    centre = float(values[index])
    low_limit, high_limit = result.parameters[index].bounds
    initial = float(result.errors[index])
    if not (math.isfinite(initial) and initial > 0):
        initial = 0.1 * max(abs(centre), 1.0)

    offsets = []
    for sign, limit in ((-1.0, low_limit), (1.0, high_limit)):
        warm["x"] = values[free]
        step = initial
        for _ in range(60):
            far = centre + sign * step
            at_limit = (far <= limit) if sign < 0 else (far >= limit)
            if at_limit:
                far = limit
            if profile(far) > 0:
                break
            if at_limit:
                raise RuntimeError(
                    f"profile of parameter {index} does not cross before its limit"
                )
            step *= 2
        else:
            raise RuntimeError(f"profile of parameter {index} never crosses")
        warm["x"] = values[free]
        root = brentq(profile, centre, far, xtol=1e-8 * max(abs(centre), 1.0))
        offsets.append(root - centre)
    return offsets[0], offsets[1]