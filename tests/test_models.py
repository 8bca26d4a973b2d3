import math

import numpy as np
import pytest

from muonfit.models import (
    double_exp_background,
    exp_components,
    exponential,
    single_exp_background,
)


def test_exponential_at_zero_is_norm():
    assert exponential(0.0, 1000, 2.2) == pytest.approx(1000)


def test_exponential_returns_float_for_scalar():
    value = exponential(1.0, 600, 0.864)
    assert isinstance(value, float)
    assert value == pytest.approx(600 * math.exp(-1.0 / 0.864))


def test_exponential_decreasing_over_array():
    x = np.linspace(1.4, 10.0, 20)
    y = exponential(x, 0.4, 2.2)
    assert y.shape == x.shape
    assert np.all(np.diff(y) < 0)


def test_exponential_ratio_over_one_lifetime():
    tau = 2.2
    ratio = exponential(3.0 + tau, 5.0, tau) / exponential(3.0, 5.0, tau)
    assert ratio == pytest.approx(math.exp(-1))


def test_single_exp_background_adds_constant():
    x = np.array([1.4, 5.0, 9.9])
    diff = single_exp_background(x, 0.4, 2.2, 0.01) - exponential(x, 0.4, 2.2)
    assert np.allclose(diff, 0.01)


def test_double_exp_is_sum_of_components():
    x = np.linspace(1.4, 16.0, 30)
    total = double_exp_background(x, 0.4, 2.2, 0.2, 0.864, 0.01)
    parts = exponential(x, 0.4, 2.2) + exponential(x, 0.2, 0.864)
    assert np.allclose(total - parts, 0.01)


def test_double_exp_tends_to_background():
    far = double_exp_background(1e4, 1000, 2.2, 600, 0.864, 50)
    assert far == pytest.approx(50)


def test_exp_components_three_params():
    assert exp_components([0.4, 2.2, 0.01]) == [(0.4, 2.2)]


def test_exp_components_five_params():
    assert exp_components((0.4, 2.2, 0.2, 0.864, 0.01)) == [(0.4, 2.2), (0.2, 0.864)]


@pytest.mark.parametrize("params", [[], [1.0], [1.0, 2.0], [1, 2, 3, 4], [1] * 6])
def test_exp_components_other_counts_empty(params):
    assert exp_components(params) == []