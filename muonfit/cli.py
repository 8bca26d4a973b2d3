"""Command-line fits of muon lifetime measurements in aluminium."""

from __future__ import annotations

import argparse
import math
from os import PathLike
from pathlib import Path

from muonfit.chi2fit import FitResult, Parameter, fit_histogram, write_correlation_csv
from muonfit.data import histogram, load_values
from muonfit.likelihood import (
    ConstrainedLikelihood,
    PullTerm,
    fit_constrained,
    minos_errors,
    poisson_nll,
)
from muonfit.models import double_exp_background
from muonfit.plotting import plot_fit, tau_labels

NBINS = 50
SIDE_RANGE = (1.4, 10.0)
BOTH_RANGE = (1.4, 16.0)
DEFAULT_FILE = "misura_vita_media_Al_25_04_14_dati_mu_alluminio_{side}.txt"

_SIDE_COLORS = {"up": "blue", "down": "red"}
_SIDE_TAU_AL_LOW = {"up": 0.75, "down": 0.5}
_BOTH_COLORS = {"up": "red", "down": "blue"}


def _side_parameters(side: str) -> list[Parameter]:
    return [
        Parameter("A", 0.4, 0.0, 100.0),
        Parameter("tau_PVT", 2.2, 2.1, 2.3),
        Parameter("B", 0.2, 0.0, 100.0),
        Parameter("tau_Al", 0.864, _SIDE_TAU_AL_LOW[side], 0.9),
        Parameter("C", 0.01, 0.0, 0.1),
    ]


def _both_parameters() -> list[Parameter]:
    return [
        Parameter("A1", 0.4, 0.0, 100.0),
        Parameter("tau1", 2.2, 1.5, 2.5),
        Parameter("A2", 0.2, 0.0, 100.0),
        Parameter("tau2", 0.864, 0.7, 1.0),
        Parameter("C", 0.01, 0.0, 0.1),
    ]


def _check_side(side: str) -> str:
    if side not in _SIDE_COLORS:
        raise ValueError(f"side must be 'up' or 'down', not {side!r}")
    return side


def fit_side(
    path: str | PathLike[str], side: str, output_dir: str | PathLike[str] = "."
) -> FitResult:
    """Fit one detector side and write its plot and correlation matrix.

    The plot goes to ``fit_muoni_Al_<side>.pdf`` and the correlation matrix
    to ``correlation_matrix_Al_<side>.csv`` inside ``output_dir``.
    """
    side = _check_side(side)
    hist = histogram(load_values(path), NBINS, *SIDE_RANGE).normalized()
    result = fit_histogram(hist, double_exp_background, _side_parameters(side))
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    plot_fit(
        hist,
        result,
        out / f"fit_muoni_Al_{side}.pdf",
        f"{side.capitalize()} Decays in Al",
        _SIDE_COLORS[side],
    )
    write_correlation_csv(result, out / f"correlation_matrix_Al_{side}.csv")
    return result


def fit_both(
    up_path: str | PathLike[str],
    down_path: str | PathLike[str],
    output_dir: str | PathLike[str] | None = None,
) -> dict[str, FitResult]:
    """Fit both sides over the wide time window.

    When ``output_dir`` is given, a plot ``fit_vita_muoni_Al_<side>.pdf``
    is written there for each side.
    """
    results: dict[str, FitResult] = {}
    for side, path in (("up", up_path), ("down", down_path)):
        hist = histogram(load_values(path), NBINS, *BOTH_RANGE).normalized()
        result = fit_histogram(hist, double_exp_background, _both_parameters())
        if output_dir is not None:
            out = Path(output_dir)
            out.mkdir(parents=True, exist_ok=True)
            plot_fit(
                hist,
                result,
                out / f"fit_vita_muoni_Al_{side}.pdf",
                f"Muon {side.capitalize()}",
                _BOTH_COLORS[side],
            )
        results[side] = result
    return results


def fit_constrained_file(
    path: str | PathLike[str],
) -> tuple[FitResult, list[tuple[float, float]]]:
    """Poisson likelihood fit of raw counts with a constraint on the PVT lifetime.

    Returns the fit and, for every parameter, the ``(lower, upper)`` profile
    errors; a side that cannot be found is reported as NaN.
    """
    hist = histogram(load_values(path), NBINS, *SIDE_RANGE)
    parameters = [
        Parameter("N_PVT", 1000.0),
        Parameter("tau_PVT", 2.2),
        Parameter("N_Al", 600.0),
        Parameter("tau_Al", 0.864),
        Parameter("Bkg", 50.0),
    ]
    pulls = [PullTerm(1, 2.197, 0.05)]
    result = fit_constrained(hist, double_exp_background, parameters, pulls)
    likelihood = ConstrainedLikelihood(
        lambda p: poisson_nll(hist, double_exp_background, p), pulls
    )
    minos = []
    for index in range(len(parameters)):
        try:
            minos.append(minos_errors(likelihood, result, index))
        except RuntimeError:
            minos.append((math.nan, math.nan))
    return result, minos


def _minos_lines(result: FitResult, minos: list[tuple[float, float]]) -> list[str]:
    return [
        f"{name} BestFit: {value:g} (ErrFit: {error:g}) - Minos: {low:g} - {high:g}"
        for name, value, error, (low, high) in zip(
            result.names, result.values, result.errors, minos
        )
    ]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="muonfit", description="Fit muon decay-time spectra."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    side = commands.add_parser("side", help="fit one detector side")
    side.add_argument("side", choices=sorted(_SIDE_COLORS))
    side.add_argument("path", nargs="?", help="data file")
    side.add_argument("--output-dir", default=".")

    both = commands.add_parser("both", help="fit both sides over the wide window")
    both.add_argument("up", nargs="?", default=DEFAULT_FILE.format(side="up"))
    both.add_argument("down", nargs="?", default=DEFAULT_FILE.format(side="down"))
    both.add_argument("--output-dir", default=None)

    constrained = commands.add_parser(
        "constrained", help="likelihood fit with a lifetime constraint"
    )
    constrained.add_argument(
        "path", nargs="?", default=DEFAULT_FILE.format(side="down")
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line; returns the exit status."""
    args = _build_parser().parse_args(argv)
    if args.command == "side":
        path = args.path or DEFAULT_FILE.format(side=args.side)
        result = fit_side(path, args.side, args.output_dir)
        for line in tau_labels(result):
            print(line)
    elif args.command == "both":
        results = fit_both(args.up, args.down, args.output_dir)
        for side, result in results.items():
            print(f"{side}:")
            for line in tau_labels(result):
                print(f"  {line}")
    else:
        result, minos = fit_constrained_file(args.path)
        for line in _minos_lines(result, minos):
            print(line)
    return 0