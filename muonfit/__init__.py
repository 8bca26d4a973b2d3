"""Muon lifetime fits on decay-time histograms: models, binning, chi-square and
constrained Poisson likelihood fits, plotting and a command line."""

__version__ = "0.1.0"