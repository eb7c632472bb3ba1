from __future__ import annotations

import numpy as np
import pytest

from wfd_analysis.analysis.amplitude import extract_amplitude, fit_amplitude
from wfd_analysis.errors import EmptyInput, InsufficientPoints, NonFiniteInput
from wfd_analysis.validation.synthetic import gaussian_pulse, sampled_parabola


def test_sampled_parabola_depth_is_recovered() -> None:
    # negative-going pulse of depth 12.5 whose vertex falls between samples
    x = sampled_parabola(30, vertex_value=-12.5, vertex=10.3, curvature=0.7)

    res = fit_amplitude(x)

    assert res.i_min == 10
    assert res.window == (7, 13)
    assert res.amplitude == pytest.approx(12.5, abs=1e-6)
    assert res.fit.p1 == pytest.approx(10.3, abs=1e-6)


@pytest.mark.parametrize("i0", [1.2, 4.0, 25.6, 28.0])
def test_parabola_near_the_edges(i0: float) -> None:
    # the fit window is clipped to the sequence but the vertex is still exact
    x = sampled_parabola(30, vertex_value=-3.0, vertex=i0, curvature=0.25)
    assert extract_amplitude(x) == pytest.approx(3.0, abs=1e-6)


def test_concrete_eight_sample_pulse() -> None:
    x = [0, 0, 0, -10, -8, -5, 0, 0]

    res = fit_amplitude(x)

    assert res.i_min == 3
    assert res.window == (0, 6)
    assert res.fit.t.tolist() == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    # 7-point least-squares vertex: depth 19/3 + 1701/12544
    assert res.amplitude == pytest.approx(19.0 / 3.0 + 1701.0 / 12544.0, abs=1e-6)
    assert 0.0 < res.amplitude < 10.0


def test_first_sample_is_never_the_peak() -> None:
    x = sampled_parabola(20, vertex_value=-4.0, vertex=9.0, curvature=0.5)
    x[0] = -1000.0  # artifact in sample 0

    res = fit_amplitude(x)

    assert res.i_min == 9
    assert res.amplitude == pytest.approx(4.0, abs=1e-6)


def test_gaussian_amplitude_close_to_true_depth_and_linear() -> None:
    a1 = extract_amplitude(gaussian_pulse(100, amplitude=10.0, center=40.0, sigma=3.0))
    a2 = extract_amplitude(gaussian_pulse(100, amplitude=40.0, center=40.0, sigma=3.0))

    assert a1 == pytest.approx(10.0, rel=0.03)
    assert a2 / a1 == pytest.approx(4.0, rel=1e-5)


def test_half_window_changes_fit_window() -> None:
    x = gaussian_pulse(100, amplitude=10.0, center=40.0, sigma=3.0)
    res = fit_amplitude(x, half_window=1)
    assert res.window == (39, 41)
    assert res.fit.ndf == 0


@pytest.mark.parametrize("x", [[], [1.0]])
def test_too_short_input(x) -> None:
    with pytest.raises(EmptyInput):
        extract_amplitude(x)


def test_two_samples_cannot_be_fitted() -> None:
    with pytest.raises(InsufficientPoints):
        extract_amplitude([0.0, -1.0])


def test_input_is_not_modified() -> None:
    x = gaussian_pulse(50, amplitude=2.0, center=20.0, sigma=2.0)
    before = x.copy()
    extract_amplitude(x)
    assert np.array_equal(x, before)


def test_nan_sample_is_rejected() -> None:
    x = gaussian_pulse(100, amplitude=10.0, center=40.0, sigma=3.0)
    x[70] = np.nan
    with pytest.raises(NonFiniteInput):
        extract_amplitude(x)
