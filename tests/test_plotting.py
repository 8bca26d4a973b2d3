import numpy as np
import pytest

from muonfit.chi2fit import FitResult, Parameter
from muonfit.data import histogram
from muonfit.plotting import plot_fit, tau_labels


def _result(names, values, errors):
    n = len(names)
    return FitResult(
        parameters=tuple(Parameter(name, value) for name, value in zip(names, values)),
        values=np.array(values, dtype=float),
        errors=np.array(errors, dtype=float),
        covariance=np.diag(np.square(errors)),
        fval=42.0,
        ndf=40,
    )


@pytest.fixture
def double_result():
    return _result(
        ["A", "tau_PVT", "B", "tau_Al", "C"],
        [0.4, 2.1972, 0.2, 0.8641, 0.01],
        [0.01, 0.0104, 0.01, 0.0205, 0.001],
    )


@pytest.fixture
def hist():
    rng = np.random.default_rng(3)
    return histogram(rng.exponential(2.2, 2000) + 1.4, 50, 1.4, 10.0).normalized()


def test_tau_labels_double_exponential(double_result):
    assert tau_labels(double_result) == [
        "tau_PVT = 2.197 ± 0.010 μs",
        "tau_Al = 0.864 ± 0.021 μs",
    ]


def test_tau_labels_single_exponential():
    result = _result(["N", "tau", "C"], [1.0, 2.5, 0.1], [0.1, 0.25, 0.01])
    assert tau_labels(result) == ["tau = 2.500 ± 0.250 μs"]


def test_tau_labels_without_components():
    result = _result(["a", "b", "c", "d"], [1, 2, 3, 4], [1, 1, 1, 1])
    assert tau_labels(result) == []


def test_plot_fit_writes_pdf(tmp_path, hist, double_result):
    target = tmp_path / "fit.pdf"
    written = plot_fit(hist, double_result, target, "Up Decays in Al", "blue")
    assert written == target
    assert target.read_bytes().startswith(b"%PDF")


def test_plot_fit_writes_png(tmp_path, hist, double_result):
    target = tmp_path / "fit.png"
    plot_fit(hist, double_result, str(target), "Down Decays in Al", "red")
    assert target.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_plot_fit_rejects_unknown_model(tmp_path, hist):
    result = _result(["a", "b", "c", "d"], [1, 2, 3, 4], [1, 1, 1, 1])
    with pytest.raises(ValueError):
        plot_fit(hist, result, tmp_path / "bad.png", "x", "red")
    assert not (tmp_path / "bad.png").exists()