"""Validation of merged readings and hourly record invariants."""

from dataclasses import replace
from datetime import datetime

import pytest

from dataelect import transform, validate
from dataelect.exceptions import AggregationError


def test_assert_readings_accepts_duplicates_but_not_disorder(make_reading):
    a = make_reading("2024-01-01T08:00")
    b = make_reading("2024-01-01T08:15")
    validate.assert_readings([a, b, b])
    with pytest.raises(AggregationError):
        validate.assert_readings([b, a])


def test_assert_hourly_accepts_aggregator_output(two_day_readings):
    validate.assert_hourly(transform.aggregate_hourly(two_day_readings))


def test_assert_hourly_rejects_unsorted(two_day_readings):
    hourly = transform.aggregate_hourly(two_day_readings)
    with pytest.raises(AggregationError):
        validate.assert_hourly([hourly[1], hourly[0]])
    with pytest.raises(AggregationError):
        validate.assert_hourly([hourly[0], hourly[0]])


def test_assert_hourly_rejects_untruncated_hour(two_day_readings):
    rec = transform.aggregate_hourly(two_day_readings)[0]
    with pytest.raises(AggregationError, match="truncated"):
        validate.assert_hourly([replace(rec, hour_start=datetime(2024, 1, 1, 0, 30))])


def test_assert_hourly_rejects_avg_outside_range(two_day_readings):
    rec = transform.aggregate_hourly(two_day_readings)[5]
    with pytest.raises(AggregationError, match="active"):
        validate.assert_hourly([replace(rec, active_avg=rec.active_max + 1)])
