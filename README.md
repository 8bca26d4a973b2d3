# muonfit

Measure the mean lifetime of muons that stop in a detector, starting from a
list of decay times. The decay-time spectrum is binned into a histogram and
fitted with two exponentials plus a flat background. One exponential is for
free muons decaying in the plastic scintillator (PVT). The other is for muons
captured in aluminium.

## Installation

```
pip install .
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install ".[test]"
pytest
```

## Input

The input is a plain text file of decay times in microseconds, separated by
whitespace. Reading stops at the first token that is not a number. Everything
read before that token is used.

## Command line

```
muonfit --help
```

`muonfit` has three subcommands. If no data file is given, each one looks in
the current directory for
`misura_vita_media_Al_25_04_14_dati_mu_alluminio_<side>.txt`, with `<side>`
being `up` or `down`.

### `muonfit side {up,down} [PATH] [--output-dir DIR]`

This subcommand makes a least-squares fit of one run.

- Binning: 50 bins over 1.4–10 µs, normalised to unit integral.
- Aluminium lifetime limits: 0.75–0.9 µs for `up`, 0.5–0.9 µs for `down`.
- Output files, written to `DIR` (default: the current directory):
  - `fit_muoni_Al_<side>.pdf`: the spectrum, the overall fit and its
    exponential components.
  - `correlation_matrix_Al_<side>.csv`: a header line of parameter names,
    then the correlation matrix rows with six decimals.
- Printed output: the fitted lifetimes.

### `muonfit both [UP] [DOWN] [--output-dir DIR]`

This subcommand fits the up and down runs with the same model.

- Binning: a wider window, 1.4–16 µs.
- Lifetime limits: looser than for `side`.
- Printed output: the fitted lifetimes of each run.
- Plots: `fit_vita_muoni_Al_<side>.pdf`, written only when `--output-dir`
  is given.

### `muonfit constrained [PATH]`

This subcommand makes a binned Poisson likelihood fit.

- Data: the raw counts, not normalised, with 50 bins over 1.4–10 µs.
- Constraint: a Gaussian pull term holds the PVT lifetime at 2.197 ± 0.05 µs.
- Printed output, one line per parameter:
  - the best-fit value;
  - its error from the Hessian;
  - asymmetric profile-likelihood (MINOS-style) errors. If an interval cannot
    be found, it is printed as `nan`.

## Library use

- `muonfit.models`:
  - `exponential`, `single_exp_background` and `double_exp_background`: the
    model functions.
  - `exp_components`: splits a parameter set into `(norm, tau)` pairs.
- `muonfit.data`:
  - `load_values`: reads a data file.
  - `histogram`: bins values into a `Histogram`. A `Histogram` has `centers()`,
    `bin_width()`, `integral()`, `normalized()`, and underflow/overflow counts.
- `muonfit.chi2fit`:
  - `Parameter`: a name, a start value and optional limits.
  - `fit_histogram`: a chi-square fit that returns a `FitResult`. A
    `FitResult` has `value(name)`, `error(name)`, `correlation()`,
    `covariance`, `fval` and `ndf`.
  - `correlation_csv_text` and `write_correlation_csv`: the correlation matrix
    as CSV text, or written to a file.
- `muonfit.likelihood`:
  - `poisson_nll`: the Poisson negative log-likelihood.
  - `PullTerm` and `ConstrainedLikelihood`: Gaussian penalties added to an
    objective.
  - `fit_constrained`: minimises that objective.
  - `minos_errors`: profile-likelihood intervals.
- `muonfit.plotting`:
  - `plot_fit`: saves a figure.
  - `tau_labels`: returns the lifetime text lines.
- `muonfit.cli`: `fit_side`, `fit_both` and `fit_constrained_file` run the
  same analyses as the subcommands.

```python
from muonfit.data import load_values, histogram
from muonfit.models import double_exp_background
from muonfit.chi2fit import Parameter, fit_histogram, write_correlation_csv

hist = histogram(load_values("decays.txt"), 50, 1.4, 10.0).normalized()
params = [
    Parameter("A", 0.4, 0.0, 100.0),
    Parameter("tau_PVT", 2.2, 2.1, 2.3),
    Parameter("B", 0.2, 0.0, 100.0),
    Parameter("tau_Al", 0.864, 0.5, 0.9),
    Parameter("C", 0.01, 0.0, 0.1),
]
result = fit_histogram(hist, double_exp_background, params)
print(result.value("tau_Al"), result.error("tau_Al"))
write_correlation_csv(result, "correlation.csv")
```

## What it does not do

- It opens no interactive plot windows. Figures are only written to files.
- It does not generate toy datasets.
- It does not store fit results other than the plots and the correlation
  CSV files described above.