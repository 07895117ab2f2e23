"""Tests for year reconstruction over ordered feed records."""


import pytest

from driftrack.decoding.decoder import decode_record
from driftrack.decoding.year import (
    YearReconstructor,
    reconstruct_points,
    reconstruct_source,
    utc_epoch_seconds,
)
from driftrack.errors import StoreFrozenError
from driftrack.models.config import SourceConfig
from driftrack.models.points import DataPoint, FeedRecord

from feeds import row, utc


def _record(esn: int, fractional_day: float, month=1, day=1, hour=0, minute=0) -> FeedRecord:
    return FeedRecord(
        transmitter_id=esn,
        month=month,
        day=day,
        hour=hour,
        minute=minute,
        fractional_day=fractional_day,
        latitude=0.0,
        longitude=0.0,
    )


def _years(records, base_year=2020) -> list[int]:
    state = YearReconstructor(base_year)
    return [state.advance(r) for r in records]


class TestUtcEpochSeconds:
    """Verify calendar arithmetic, including overflow normalization."""

    def test_matches_datetime(self):
        assert utc_epoch_seconds(2014, 7, 4, 12, 30) == utc(2014, 7, 4, 12, 30)
        assert utc_epoch_seconds(1970, 1, 1, 0, 0) == 0

    def test_leap_day(self):
        assert utc_epoch_seconds(2020, 2, 29, 0, 0) == utc(2020, 2, 29)

    def test_month_zero_is_previous_december(self):
        assert utc_epoch_seconds(2021, 0, 15, 0, 0) == utc(2020, 12, 15)

    def test_day_zero_is_last_day_of_previous_month(self):
        assert utc_epoch_seconds(2021, 3, 0, 0, 0) == utc(2021, 2, 28)

    def test_all_zero_fields(self):
        assert utc_epoch_seconds(2021, 0, 0, 0, 0) == utc(2020, 11, 30)

    def test_minute_and_hour_overflow(self):
        assert utc_epoch_seconds(2021, 12, 31, 23, 75) == utc(2022, 1, 1, 0, 15)

    def test_far_years_do_not_raise(self):
        assert utc_epoch_seconds(1, 0, 1, 0, 0) < utc_epoch_seconds(1, 1, 1, 0, 0)
        assert utc_epoch_seconds(9999, 13, 1, 0, 0) > utc_epoch_seconds(9999, 12, 1, 0, 0)


class TestYearReconstructor:
    """Verify the year state machine."""

    def test_single_wrap_increments_once(self):
        records = [_record(5, d) for d in (364.0, 364.9, 0.1, 1.2)]
        assert _years(records) == [2020, 2020, 2021, 2021]

    def test_increments_exactly_at_wrap_point(self):
        days = [300.0, 310.5, 320.0, 364.99, 0.5, 10.0, 20.0, 40.0]
        years = _years([_record(5, d) for d in days])
        assert years == [2020] * 4 + [2021] * 4

    def test_two_wraps(self):
        days = [360.0, 1.0, 200.0, 365.5, 3.0]
        assert _years([_record(5, d) for d in days]) == [2020, 2021, 2021, 2021, 2022]

    def test_equal_fractional_day_is_not_a_wrap(self):
        assert _years([_record(5, 10.0), _record(5, 10.0)]) == [2020, 2020]

    def test_transmitter_change_resets_instead_of_incrementing(self):
        years = _years([_record(5, 300.0), _record(7, 10.0)])
        assert years == [2020, 2020]

    def test_reset_after_rollover(self):
        records = [
            _record(5, 364.0),
            _record(5, 0.5),
            _record(7, 100.0),
            _record(5, 1.0),
        ]
        assert _years(records) == [2020, 2021, 2020, 2020]

    def test_first_record_uses_base_year(self):
        assert _years([_record(0, 0.0)], base_year=1999) == [1999]

    def test_state_updates_after_advance(self):
        state = YearReconstructor(2014)
        state.advance(_record(9, 42.5))
        assert state.last_transmitter_id == 9
        assert state.last_fractional_day == 42.5
        assert state.year == 2014


class TestReconstructPoints:
    """Verify point emission and filtering by the source's transmitters."""

    def test_scenario_year_assignment(self):
        source = SourceConfig(url="feed.dat", year=2020, esns=[5])
        records = [
            _record(5, 364.0, month=12, day=30, hour=6),
            _record(5, 364.9, month=12, day=30, hour=21),
            _record(5, 0.1, month=1, day=1, hour=2),
            _record(5, 1.2, month=1, day=2, hour=4),
        ]
        store = reconstruct_points(records, source)
        timestamps = [p.timestamp for p in store.series(5)]
        assert timestamps == [
            utc(2020, 12, 30, 6),
            utc(2020, 12, 30, 21),
            utc(2021, 1, 1, 2),
            utc(2021, 1, 2, 4),
        ]

    def test_only_wanted_transmitters_emitted(self):
        source = SourceConfig(url="feed.dat", year=2020, esns=[5])
        records = [_record(5, 1.0), _record(6, 2.0), _record(5, 3.0)]
        store = reconstruct_points(records, source)
        assert store.transmitter_ids() == [5]
        assert 6 not in store

    def test_unwanted_records_still_advance_state(self):
        # 5 -> 9 -> 5 is two transmitter changes, so the last record of 5
        # restarts at the base year even though its fractional day dropped.
        source = SourceConfig(url="feed.dat", year=2020, esns=[5])
        records = [
            _record(5, 364.0, month=12, day=30),
            _record(9, 0.5, month=1, day=1),
            _record(5, 0.1, month=1, day=1),
        ]
        store = reconstruct_points(records, source)
        assert [p.timestamp for p in store.series(5)] == [
            utc(2020, 12, 30),
            utc(2020, 1, 1),
        ]

    def test_points_carry_positions(self):
        source = SourceConfig(url="feed.dat", year=2014, esns=[5])
        records = [FeedRecord(5, 7, 4, 12, 0, 185.5, latitude=41.5, longitude=-70.0)]
        store = reconstruct_points(records, source)
        assert store.series(5) == [DataPoint(utc(2014, 7, 4, 12), 41.5, -70.0)]

    def test_store_is_frozen(self):
        source = SourceConfig(url="feed.dat", year=2020, esns=[5])
        store = reconstruct_points([_record(5, 1.0)], source)
        assert store.frozen
        with pytest.raises(StoreFrozenError):
            store.append(5, DataPoint(0, 0.0, 0.0))

    def test_reconstruct_source_decodes_rows(self):
        source = SourceConfig(url="feed.dat", year=2014, esns=[995094])
        rows = [
            row(995094, 12, 31, 23, 0, 364.958),
            row(995094, 1, 1, 5, 30, 0.229),
        ]
        store = reconstruct_source(rows, source, "source_1")
        assert [p.timestamp for p in store.series(995094)] == [
            utc(2014, 12, 31, 23),
            utc(2015, 1, 1, 5, 30),
        ]

    def test_lenient_fields_do_not_abort(self):
        source = SourceConfig(url="feed.dat", year=2020, esns=[5])
        fields = row(5, 3, 1, 0, 0, 60.0)
        fields[2] = "??"
        store = reconstruct_points([decode_record(fields)], source)
        assert store.series(5)[0].timestamp == utc(2019, 12, 1)
