"""Reading decay-time samples and binning them into histograms."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike


def load_values(path: str | PathLike[str]) -> list[float]:
    """Read whitespace-separated numbers from a file.

    Reading stops at the first token that is not a number, and everything
    read up to that point is returned.
    """
    values: list[float] = []
    for token in Path(path).read_text().split():
        try:
            values.append(float(token))
        except ValueError:
            break
    return values


@dataclass(frozen=True, eq=False)
class Histogram:
    """Fixed-width binned counts over ``[low, high)``."""

    counts: np.ndarray
    errors: np.ndarray
    low: float
    high: float
    underflow: float = 0.0
    overflow: float = 0.0
    edges: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.counts) == 0:
            raise ValueError("a histogram needs at least one bin")
        if not self.high > self.low:
            raise ValueError("upper edge must be greater than lower edge")
        if len(self.errors) != len(self.counts):
            raise ValueError("errors and counts must have the same length")
        edges = np.linspace(self.low, self.high, len(self.counts) + 1)
        object.__setattr__(self, "edges", edges)

    @property
    def nbins(self) -> int:
        return len(self.counts)

    def centers(self) -> np.ndarray:
        """Centre of every bin."""
        return 0.5 * (self.edges[:-1] + self.edges[1:])

    def bin_width(self) -> float:
        """Width shared by all bins."""
        return (self.high - self.low) / self.nbins

    def integral(self) -> float:
        """Sum of the in-range bin contents."""
        return float(np.sum(self.counts))

    def normalized(self) -> Histogram:
        """Return a copy scaled so that the in-range contents sum to one."""
        total = self.integral()
        if total == 0:
            raise ValueError("cannot normalise an empty histogram")
        scale = 1.0 / total
        return Histogram(
            counts=self.counts * scale,
            errors=self.errors * scale,
            low=self.low,
            high=self.high,
            underflow=self.underflow * scale,
            overflow=self.overflow * scale,
        )


def histogram(values: ArrayLike, nbins: int, low: float, high: float) -> Histogram:
    """Bin values into ``nbins`` equal bins over ``[low, high)``.

    Values below ``low`` count as underflow and values at or above ``high``
    count as overflow; neither enters the bins.
    """
    if nbins <= 0:
        raise ValueError("number of bins must be positive")
    if not high > low:
        raise ValueError("upper edge must be greater than lower edge")
    data = np.asarray(values, dtype=float).ravel()
    inside = (data >= low) & (data < high)
    indices = np.floor((data[inside] - low) * nbins / (high - low)).astype(int)
    indices = np.clip(indices, 0, nbins - 1)
    counts = np.bincount(indices, minlength=nbins).astype(float)
    return Histogram(
        counts=counts,
        errors=np.sqrt(counts),
        low=float(low),
        high=float(high),
        underflow=float(np.count_nonzero(data < low)),
        overflow=float(np.count_nonzero(data >= high)),
    )