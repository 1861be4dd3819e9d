"""Easing function tests."""
import pytest

from motion_engines.common.errors import InvalidParameterError, UnsupportedEasingError
from motion_engines.easing.models import EasingKind
from motion_engines.easing.service import cubic_bezier, ease, validate_easing


@pytest.mark.parametrize(
    "kind,progress,expected",
    [
        ("linear", 0.3, 0.3),
        ("ease-in", 0.5, 0.25),
        ("ease-out", 0.5, 0.75),
        ("ease-in-out", 0.25, 0.125),
        ("ease-in-out", 0.75, 0.875),
        (EasingKind.EASE_IN, 0.1, 0.01),
    ],
)
def test_named_easings(kind, progress, expected):
    assert ease(kind, progress) == pytest.approx(expected)


@pytest.mark.parametrize("kind", ["linear", "ease-in", "ease-out", "ease-in-out"])
def test_endpoints_are_fixed(kind):
    assert ease(kind, 0.0) == 0.0
    assert ease(kind, 1.0) == 1.0


def test_progress_is_clamped():
    assert ease("ease-in", 1.5) == 1.0
    assert ease("linear", -0.2) == 0.0
    assert ease("bezier", 2.0, (0.25, 0.1, 0.25, 1.0)) == 1.0


def test_bezier_requires_control_points():
    with pytest.raises(InvalidParameterError):
        ease("bezier", 0.5)


@pytest.mark.parametrize(
    "points",
    [
        (0.25, 0.1, 0.25),
        (0.25, 0.1, 1.5, 1.0),
        (-0.1, 0.0, 0.5, 1.0),
        (0.25, "a", 0.25, 1.0),
    ],
)
def test_bezier_rejects_bad_points(points):
    with pytest.raises(InvalidParameterError):
        cubic_bezier(0.5, points)


def test_bezier_diagonal_is_linear():
    for p in (0.1, 0.3, 0.5, 0.9):
        assert ease("bezier", p, (0.0, 0.0, 1.0, 1.0)) == pytest.approx(p, abs=1e-6)


def test_bezier_css_ease_curve():
    # cubic-bezier(0.25, 0.1, 0.25, 1.0) at x=0.5 is ~0.802
    assert ease("bezier", 0.5, (0.25, 0.1, 0.25, 1.0)) == pytest.approx(0.802, abs=2e-3)


def test_bezier_is_monotonic_and_bounded():
    points = (0.42, 0.0, 0.58, 1.0)
    samples = [ease("bezier", i / 50, points) for i in range(51)]
    assert all(0.0 <= s <= 1.0 for s in samples)
    assert samples == sorted(samples)


def test_unknown_easing_fails_in_strict_mode():
    with pytest.raises(UnsupportedEasingError):
        ease("spring", 0.5, lenient=False)


def test_unknown_easing_is_linear_in_lenient_mode():
    assert ease("spring", 0.4, lenient=True) == pytest.approx(0.4)


def test_lenient_mode_from_environment(monkeypatch):
    monkeypatch.setenv("MOTION_EASING_MODE", "lenient")
    assert ease("spring", 0.4) == pytest.approx(0.4)
    monkeypatch.setenv("MOTION_EASING_MODE", "strict")
    with pytest.raises(UnsupportedEasingError):
        ease("spring", 0.4)


def test_validate_easing():
    assert validate_easing(EasingKind.EASE_OUT) == "ease-out"
    assert validate_easing("bezier", [0.1, 0.2, 0.3, 0.4]) == "bezier"
    assert validate_easing("spring", lenient=True) == "spring"
    with pytest.raises(UnsupportedEasingError):
        validate_easing("spring", lenient=False)
    with pytest.raises(InvalidParameterError):
        validate_easing("bezier")
