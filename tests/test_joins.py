"""
Test cases for temporal join strategies aligning two series onto a shared
time axis.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest

from config import settings
from engine.aggregation import AlignedData, get_strategy, join
from engine.aggregation.joins import forward_fill, linear, resample
from engine.exceptions import InvalidParameterError
from engine.series import Series


def _at(second):
    return f"2024-01-01T00:{second // 60:02d}:{second % 60:02d}Z"


def _series(name, points):
    return Series.from_arrays(name, [_at(s) for s, _ in points], [v for _, v in points])


A = _series("a", [(0, 1.0), (20, 3.0), (40, 5.0)])
B = _series("b", [(10, 10.0), (30, 30.0)])


def test_forward_fill_carries_last_observation():
    out = forward_fill([A], [B])
    # t=0 is dropped because b has no observation yet
    assert out.timestamps == (_at(10), _at(20), _at(30), _at(40))
    assert out.values_a == (1.0, 3.0, 3.0, 5.0)
    assert out.values_b == (10.0, 10.0, 30.0, 30.0)


def test_linear_restricts_to_overlap_and_interpolates():
    out = linear([A], [B])
    assert out.timestamps == (_at(10), _at(20), _at(30))
    assert out.values_a == pytest.approx((2.0, 3.0, 4.0))
    assert out.values_b == pytest.approx((10.0, 20.0, 30.0))


def test_linear_needs_an_overlapping_interval():
    late = _series("late", [(40, 1.0), (50, 2.0)])
    assert linear([A], [late]).is_empty()
    assert forward_fill([A], [late]).timestamps == (_at(40), _at(50))


def test_disjoint_ranges_are_empty():
    late = _series("late", [(100, 1.0), (110, 2.0)])
    assert forward_fill([A], [late]) == AlignedData()
    assert linear([A], [late]) == AlignedData()


def test_resample_averages_common_buckets():
    out = resample([A], [B], {"interval_seconds": 30})
    assert out.timestamps == (_at(0), _at(30))
    assert out.values_a == pytest.approx((2.0, 5.0))
    assert out.values_b == pytest.approx((10.0, 30.0))


def test_resample_uses_default_interval(monkeypatch):
    monkeypatch.setattr(settings, "join_default_interval_seconds", 60)
    out = resample([A], [B])
    assert out.timestamps == (_at(0),)
    assert out.values_a == pytest.approx((3.0,))
    assert out.values_b == pytest.approx((20.0,))


def test_several_source_series_are_pooled_last_wins():
    a2 = _series("a2", [(20, 7.0)])
    out = linear([A, a2], [B])
    assert out.values_a == pytest.approx((4.0, 7.0, 6.0))


@pytest.mark.parametrize("interval", [0, -5, "soon"])
def test_resample_rejects_bad_interval(interval):
    with pytest.raises(InvalidParameterError):
        resample([A], [B], {"interval_seconds": interval})


@pytest.mark.parametrize("name, expected", [
    ("linear", linear),
    ("Interpolate", linear),
    ("interpolate_linear", linear),
    ("forward_fill", forward_fill),
    (" LOCF ", forward_fill),
    ("resample", resample),
    ("resample_avg", resample),
    ("aggregate", resample),
])
def test_strategy_aliases(name, expected):
    assert get_strategy(name) is expected


@pytest.mark.parametrize("name", [None, "", "  ", "nearest"])
def test_unknown_or_blank_strategy_is_rejected(name):
    with pytest.raises(InvalidParameterError):
        get_strategy(name)


def test_join_with_empty_side_is_empty():
    assert join("locf", [], [B]).is_empty()
    assert len(join("resample", [A], [])) == 0


def test_aligned_data_requires_equal_lengths():
    with pytest.raises(InvalidParameterError):
        AlignedData(timestamps=("x",), values_a=(1.0,), values_b=())
