"""
Unit tests for the Lo Shu Grid.
"""

import pytest

from name_corrector.grid import build_grid, calculate_lo_shu_grid_with_details


class TestBuildGrid:
    """Tests for digit tallying and name folding."""

    def test_birth_date_only(self):
        grid = build_grid("1990-05-15")

        assert {d: c for d, c in grid.counts.items() if c} == {1: 2, 5: 2, 9: 2}
        assert grid.missing == (2, 3, 4, 6, 7, 8)
        assert grid.updated_by_name is False

    def test_folding_an_expression_number(self):
        grid = build_grid("1990-05-15", 7)

        assert grid.counts[7] == 1
        assert grid.missing == (2, 3, 4, 6, 8)
        assert grid.updated_by_name is True

    def test_folded_number_is_reduced(self):
        grid = build_grid("1990-05-15", 16)
        assert grid.counts[7] == 1

    @pytest.mark.parametrize("name_number", [11, 29])
    def test_master_values_are_not_tallied(self, name_number):
        grid = build_grid("1990-05-15", name_number)

        assert sum(grid.counts.values()) == 6
        assert grid.missing == (2, 3, 4, 6, 7, 8)

    @pytest.mark.parametrize("birth_date, name_number", [
        ("1990-05-15", None),
        ("1990-05-15", 7),
        ("2008-12-31", 4),
        ("15/05/1990", None),
        ("", 3),
    ])
    def test_counts_sum_to_date_digits_plus_fold(self, birth_date, name_number):
        grid = build_grid(birth_date, name_number)

        date_digits = sum(1 for d in birth_date if d in "123456789")
        folded = 1 if name_number is not None else 0
        assert sum(grid.counts.values()) == date_digits + folded
        assert list(grid.missing) == [d for d in range(1, 10) if grid.counts[d] == 0]

    def test_has(self):
        grid = build_grid("1990-05-15")
        assert grid.has(5)
        assert not grid.has(8)


class TestGridDetails:
    """Tests for the service's JSON form of the grid."""

    def test_details(self):
        details = calculate_lo_shu_grid_with_details("1990-05-15")

        assert details["grid_counts"] == {1: 2, 5: 2, 9: 2}
        assert details["missing_numbers"] == [2, 3, 4, 6, 7, 8]
        assert [lesson["number"] for lesson in details["missing_lessons"]] == [2, 3, 4, 6, 7, 8]
        assert details["has_5"] is True
        assert details["has_8"] is False
        assert details["grid_updated_by_name"] is False
