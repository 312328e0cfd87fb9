import math

import pytest

from accident_dashboard.errors import NoData, NoValidData
from accident_dashboard.normalizer import normalize_single, pivot_multi_year, validate_rows


def test_pivot_fills_missing_pairs_with_zero():
    rows = [
        {"label": "A", "year": 2020, "value": 5},
        {"label": "A", "year": 2021, "value": 3},
        {"label": "B", "year": 2021, "value": 7},
    ]
    pivoted = pivot_multi_year(rows)

    assert pivoted.years == [2020, 2021]
    assert pivoted.series_by_label == {"A": [5, 3], "B": [0, 7]}


def test_pivot_sorts_years_and_keeps_label_order():
    rows = [
        {"label": "Zeta", "year": 2022, "value": 1},
        {"label": "Alpha", "year": 2019, "value": 2},
        {"label": "Zeta", "year": 2019, "value": 4},
    ]
    pivoted = pivot_multi_year(rows)

    assert pivoted.years == [2019, 2022]
    assert list(pivoted.series_by_label) == ["Zeta", "Alpha"]
    assert pivoted.series_by_label["Zeta"] == [4, 1]
    assert pivoted.series_by_label["Alpha"] == [2, 0]


def test_pivot_series_are_rectangular():
    rows = [{"label": str(i), "year": 2000 + i, "value": i} for i in range(5)]
    pivoted = pivot_multi_year(rows)

    assert all(len(values) == len(pivoted.years) for values in pivoted.series_by_label.values())


def test_pivot_later_duplicate_wins():
    rows = [
        {"label": "A", "year": 2020, "value": 1},
        {"label": "A", "year": 2020, "value": 9},
    ]
    assert pivot_multi_year(rows).series_by_label == {"A": [9]}


def test_pivot_drops_rows_without_year():
    rows = [
        {"label": "A", "year": 2020, "value": 1},
        {"label": "B", "value": 2},
    ]
    assert pivot_multi_year(rows).series_by_label == {"A": [1]}


def test_malformed_value_is_dropped():
    rows = [{"label": "X", "value": "n/a"}, {"label": "Y", "value": 4}]
    assert normalize_single(rows) == [{"label": "Y", "value": 4}]


def test_numeric_strings_are_coerced():
    assert normalize_single([{"label": "X", "value": "12"}]) == [{"label": "X", "value": 12}]


def test_non_finite_values_are_dropped():
    rows = [
        {"label": "A", "value": math.nan},
        {"label": "B", "value": math.inf},
        {"label": "C", "value": 2.5},
    ]
    assert normalize_single(rows) == [{"label": "C", "value": 2.5}]


def test_missing_labels_are_dropped():
    rows = [{"value": 3}, {"label": None, "value": 1}, {"label": 7, "value": 2}, "junk"]
    assert normalize_single(rows) == [{"label": "7", "value": 2}]


def test_all_malformed_is_no_valid_data():
    with pytest.raises(NoValidData):
        normalize_single([{"label": None, "value": 1}])


@pytest.mark.parametrize("rows", [None, [], ()])
def test_empty_input_is_no_data(rows):
    with pytest.raises(NoData):
        validate_rows(rows)


def test_wrong_shape_is_no_valid_data():
    with pytest.raises(NoValidData):
        validate_rows({"data": []})


def test_no_data_and_no_valid_data_are_distinct():
    assert not issubclass(NoData, NoValidData)
    assert not issubclass(NoValidData, NoData)
