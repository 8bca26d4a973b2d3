import math

import numpy as np
import pytest

from muonfit.cli import fit_both, fit_constrained_file, fit_side, main


def _sample(seed, n=20000):
    rng = np.random.default_rng(seed)
    kind = rng.choice(3, size=n, p=[0.6, 0.3, 0.1])
    values = np.where(
        kind == 0,
        rng.exponential(2.2, n),
        np.where(kind == 1, rng.exponential(0.864, n), rng.uniform(0.0, 16.0, n)),
    )
    return values


def _write(path, values):
    path.write_text("\n".join(f"{v:.5f}" for v in values) + "\n")
    return path


@pytest.fixture
def up_file(tmp_path):
    return _write(tmp_path / "up.txt", _sample(1))


@pytest.fixture
def down_file(tmp_path):
    return _write(tmp_path / "down.txt", _sample(2))


@pytest.fixture(scope="module")
def constrained(tmp_path_factory):
    path = _write(tmp_path_factory.mktemp("data") / "down.txt", _sample(5))
    return fit_constrained_file(path)


def test_fit_side_writes_outputs(up_file, tmp_path):
    out = tmp_path / "out"
    result = fit_side(up_file, "up", out)
    assert (out / "fit_muoni_Al_up.pdf").read_bytes().startswith(b"%PDF")
    lines = (out / "correlation_matrix_Al_up.csv").read_text().splitlines()
    assert lines[0] == "A,tau_PVT,B,tau_Al,C"
    assert len(lines) == 6
    assert all(len(line.split(",")) == 5 for line in lines[1:])
    assert result.names == ("A", "tau_PVT", "B", "tau_Al", "C")


def test_fit_side_respects_limits(down_file, tmp_path):
    result = fit_side(down_file, "down", tmp_path)
    assert 2.1 <= result.value("tau_PVT") <= 2.3
    assert 0.5 <= result.value("tau_Al") <= 0.9
    assert 0.0 <= result.value("C") <= 0.1
    corr = result.correlation()
    assert np.allclose(corr, corr.T)


def test_fit_side_rejects_unknown_side(up_file, tmp_path):
    with pytest.raises(ValueError):
        fit_side(up_file, "left", tmp_path)


def test_fit_both(up_file, down_file, tmp_path):
    results = fit_both(up_file, down_file, tmp_path)
    assert set(results) == {"up", "down"}
    for side, result in results.items():
        assert 1.5 <= result.value("tau1") <= 2.5
        assert 0.7 <= result.value("tau2") <= 1.0
        assert (tmp_path / f"fit_vita_muoni_Al_{side}.pdf").exists()


def test_fit_both_without_output(up_file, down_file, tmp_path):
    results = fit_both(up_file, down_file)
    assert list(results) == ["up", "down"]
    assert not list(tmp_path.glob("*.pdf"))


def test_fit_constrained_file(constrained):
    result, minos = constrained
    assert result.names == ("N_PVT", "tau_PVT", "N_Al", "tau_Al", "Bkg")
    assert abs(result.value("tau_PVT") - 2.2) < 0.2
    assert len(minos) == 5
    for low, high in minos:
        if not math.isnan(low):
            assert low < 0 < high


def test_main_side(up_file, tmp_path, capsys):
    status = main(["side", "up", str(up_file), "--output-dir", str(tmp_path)])
    assert status == 0
    printed = capsys.readouterr().out.splitlines()
    assert printed[0].startswith("tau_PVT = ")
    assert printed[1].startswith("tau_Al = ")
    assert (tmp_path / "correlation_matrix_Al_up.csv").exists()


def test_main_rejects_bad_side():
    with pytest.raises(SystemExit):
        main(["side", "sideways"])