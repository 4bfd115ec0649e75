"""Tests for resize directives and dimension resolution."""

from __future__ import annotations

import pytest

from imagescaler.imaging.dimensions import (
    KEEP_DIMENSION,
    Explicit,
    NoResize,
    Percentage,
    directive_from_params,
    resolve,
)


class TestDirectiveFromParams:
    def test_new_file_type_only_wins(self) -> None:
        directive = directive_from_params(10, 20, percentage=50, new_file_type_only=True)
        assert directive == NoResize()

    def test_percentage_wins_over_explicit(self) -> None:
        assert directive_from_params(10, 20, percentage=50) == Percentage(50)

    def test_explicit_when_no_percentage(self) -> None:
        assert directive_from_params(10, 20) == Explicit(10, 20)

    @pytest.mark.parametrize("percentage", [0, -25])
    def test_non_positive_percentage_falls_through_to_explicit(self, percentage: int) -> None:
        assert directive_from_params(10, 20, percentage=percentage) == Explicit(10, 20)

    def test_defaults_keep_both_axes(self) -> None:
        assert directive_from_params() == Explicit(KEEP_DIMENSION, KEEP_DIMENSION)


class TestResolve:
    def test_no_resize_returns_source(self) -> None:
        assert resolve(640, 480, NoResize()) == (640, 480)

    @pytest.mark.parametrize(
        ("percent", "expected"),
        [(50, (100, 50)), (150, (300, 150)), (100, (200, 100))],
    )
    def test_percentage(self, percent: int, expected: tuple[int, int]) -> None:
        assert resolve(200, 100, Percentage(percent)) == expected

    def test_percentage_rounds_ties_away_from_zero(self) -> None:
        # 5 * 0.5 = 2.5 and 3 * 0.5 = 1.5
        assert resolve(5, 3, Percentage(50)) == (3, 2)

    def test_percentage_rounds_to_nearest(self) -> None:
        assert resolve(400, 300, Percentage(33)) == (132, 99)

    def test_explicit_returned_as_given(self) -> None:
        assert resolve(200, 100, Explicit(31, 17)) == (31, 17)

    def test_explicit_sentinel_passes_through(self) -> None:
        assert resolve(200, 100, Explicit(KEEP_DIMENSION, KEEP_DIMENSION)) == (-1, -1)

    def test_zero_percentage_leaves_source(self) -> None:
        assert resolve(200, 100, Percentage(0)) == (200, 100)
