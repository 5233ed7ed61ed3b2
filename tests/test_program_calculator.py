from __future__ import annotations

import datetime as dt

import pytest
from dateutil import tz

from quit_plan import config
from quit_plan.core.entities.consumption_event import ConsumptionEvent
from quit_plan.core.entities.program import InvalidProgramParameters
from quit_plan.core.services import program_calculator as calc

T0 = dt.date(2024, 1, 1)


def _events(*stamps: dt.datetime) -> list[ConsumptionEvent]:
    return [ConsumptionEvent(occurred_at=s) for s in stamps]


def _noon(day: dt.date) -> dt.datetime:
    return dt.datetime.combine(day, dt.time(12), tzinfo=tz.UTC)


@pytest.mark.parametrize("months,expected", [(1, 4), (2, 8), (6, 24), (0, 1)])
def test_total_weeks(months, expected):
    assert calc.total_weeks(months) == expected


@pytest.mark.parametrize(
    "days_after_start,expected",
    [(-10, 1), (0, 1), (6, 1), (7, 2), (14, 3), (56, 9), (200, 29)],
)
def test_current_week_number(days_after_start, expected):
    now = _noon(T0 + dt.timedelta(days=days_after_start))
    assert calc.current_week_number(T0, now, tz.UTC) == expected


def test_current_week_number_accepts_datetime_start():
    start = dt.datetime(2024, 1, 1, 23, 30, tzinfo=tz.UTC)
    assert calc.current_week_number(start, _noon(dt.date(2024, 1, 15)), tz.UTC) == 3


class TestLimitForWeek:
    def test_scenario_week_three(self):
        # 20 - 15 * 3 / 8 = 14.375
        assert calc.limit_for_week(3, 20, 5, 8) == 14

    def test_endpoints(self):
        assert calc.limit_for_week(0, 20, 5, 8) == 20
        assert calc.limit_for_week(8, 20, 5, 8) == 5

    def test_beyond_program_clamps_to_target(self):
        assert calc.limit_for_week(40, 20, 5, 8) == 5

    def test_negative_week_never_exceeds_start(self):
        assert calc.limit_for_week(-3, 20, 5, 8) == 20

    def test_ties_round_away_from_zero(self):
        # 10 - 7.5 = 2.5 -> 3 (half-to-even would give 2)
        assert calc.limit_for_week(3, 10, 0, 4) == 3
        # 10 - 2.5 = 7.5 -> 8
        assert calc.limit_for_week(1, 10, 0, 4) == 8

    @pytest.mark.parametrize(
        "start,target,weeks",
        [(20, 5, 8), (10, 0, 4), (3, 0, 24), (7, 7, 12), (40, 1, 1), (0, 0, 4)],
    )
    def test_monotonic_within_bounds(self, start, target, weeks):
        limits = [calc.limit_for_week(w, start, target, weeks) for w in range(weeks + 1)]
        assert limits[0] == start
        assert limits[-1] == target
        assert all(a >= b for a, b in zip(limits, limits[1:]))
        assert all(target <= limit <= start for limit in limits)

    @pytest.mark.parametrize(
        "start,target,weeks",
        [(5, 6, 8), (-1, 0, 8), (5, -1, 8), (20, 5, 0)],
    )
    def test_invalid_parameters(self, start, target, weeks):
        with pytest.raises(InvalidProgramParameters):
            calc.limit_for_week(1, start, target, weeks)


class TestCurrentDailyLimit:
    def test_scenario_two_weeks_in(self):
        now = _noon(T0 + dt.timedelta(days=14))
        assert calc.current_daily_limit(20, 5, 2, T0, now, tz.UTC) == 14

    def test_program_end_reaches_target(self):
        now = _noon(T0 + dt.timedelta(weeks=8))
        assert calc.current_week_number(T0, now, tz.UTC) == 9
        assert calc.current_daily_limit(20, 5, 2, T0, now, tz.UTC) == 5

    def test_always_within_bounds(self):
        for day in range(0, 120, 3):
            now = _noon(T0 + dt.timedelta(days=day))
            assert 5 <= calc.current_daily_limit(20, 5, 2, T0, now, tz.UTC) <= 20

    def test_zero_duration_is_rejected(self):
        with pytest.raises(InvalidProgramParameters):
            calc.current_daily_limit(20, 5, 0, T0, _noon(T0), tz.UTC)

    def test_target_above_start_is_rejected(self):
        with pytest.raises(InvalidProgramParameters):
            calc.current_daily_limit(5, 20, 2, T0, _noon(T0), tz.UTC)


class TestWeeklyCompliance:
    monday = dt.date(2024, 3, 11)
    now = dt.datetime(2024, 3, 13, 15, 0, tzinfo=tz.UTC)  # Wednesday

    def _week_events(self):
        mon, tue, wed, thu = (self.monday + dt.timedelta(days=i) for i in range(4))
        return _events(
            _noon(mon), _noon(mon), _noon(mon),
            _noon(tue),
            _noon(wed), _noon(wed),
            _noon(thu), _noon(thu), _noon(thu),  # future day, not considered
            _noon(self.monday - dt.timedelta(days=1)),  # previous week
        )

    def test_days_in_plan_counts_only_past_days(self):
        result = calc.days_in_plan_this_week(self._week_events(), 2, self.monday, self.now, tz.UTC)
        assert result == calc.DaysInPlan(in_plan=2, total=3)
        assert result.in_plan <= result.total

    def test_rate(self):
        rate = calc.week_compliance_rate(self._week_events(), 2, self.monday, self.now, tz.UTC)
        assert rate == pytest.approx(2 / 3)

    def test_no_events_is_full_compliance(self):
        assert calc.week_compliance_rate([], 0, self.monday, self.now, tz.UTC) == 1.0

    def test_future_week_yields_zero(self):
        future = self.monday + dt.timedelta(days=7)
        assert calc.week_compliance_rate(self._week_events(), 2, future, self.now, tz.UTC) == 0.0
        assert calc.days_in_plan_this_week([], 2, future, self.now, tz.UTC) == (0, 0)

    def test_whole_past_week(self):
        later = self.now + dt.timedelta(days=30)
        in_plan, total = calc.days_in_plan_this_week(self._week_events(), 2, self.monday, later, tz.UTC)
        assert (in_plan, total) == (5, 7)

    def test_days_follow_local_calendar(self):
        plus_two = tz.tzoffset(None, 2 * 3600)
        # 23:30 UTC on Tuesday is Wednesday 01:30 in UTC+2
        late = dt.datetime(2024, 3, 12, 23, 30, tzinfo=tz.UTC)
        events = _events(late, late)
        utc_result = calc.days_in_plan_this_week(events, 1, self.monday, self.now, tz.UTC)
        local_result = calc.days_in_plan_this_week(events, 1, self.monday, self.now, plus_two)
        assert utc_result == (2, 3)
        assert local_result == (2, 3)
        tuesday_only = calc.days_in_plan_this_week(
            events, 1, self.monday, dt.datetime(2024, 3, 12, 20, 0, tzinfo=tz.UTC), plus_two
        )
        assert tuesday_only == (2, 2)

    def test_negative_limit_is_rejected(self):
        with pytest.raises(InvalidProgramParameters):
            calc.week_compliance_rate([], -1, self.monday, self.now, tz.UTC)


@pytest.mark.parametrize(
    "now,expected",
    [
        (dt.datetime(2024, 3, 13, 15, 0, tzinfo=tz.UTC), dt.date(2024, 3, 11)),
        (dt.datetime(2024, 3, 11, 0, 0, tzinfo=tz.UTC), dt.date(2024, 3, 11)),
        (dt.datetime(2024, 3, 17, 23, 59, tzinfo=tz.UTC), dt.date(2024, 3, 11)),
        (dt.datetime(2024, 1, 3, 8, 0), dt.date(2024, 1, 1)),
    ],
)
def test_start_of_current_week_is_monday(now, expected):
    assert calc.start_of_current_week(now, tz.UTC) == expected


class TestAveragePerDay:
    now = dt.datetime(2024, 3, 13, 15, 0, tzinfo=tz.UTC)

    def test_only_window_is_counted(self):
        today = self.now.date()
        events = _events(*(_noon(today - dt.timedelta(days=d)) for d in range(1, 11)))
        assert calc.average_per_day(events, 7, self.now, tz.UTC) == 1.0

    def test_naive_timestamps_are_utc(self):
        events = _events(dt.datetime(2024, 3, 12, 9, 0), dt.datetime(2024, 3, 13, 9, 0))
        assert calc.average_per_day(events, 2, self.now, tz.UTC) == 1.0

    @pytest.mark.parametrize("days", [0, -3])
    def test_non_positive_window(self, days):
        assert calc.average_per_day(_events(self.now), days, self.now, tz.UTC) == 0.0


class TestProjectedCompletionDate:
    now = dt.datetime(2024, 3, 13, 15, 0, tzinfo=tz.UTC)
    start = dt.date(2024, 3, 3)  # 10 days before now

    def test_goal_met_returns_now(self):
        assert calc.projected_completion_date(4.0, 5, self.start, 20, self.now, tz.UTC) == self.now
        assert calc.projected_completion_date(5.0, 5, self.start, 20, self.now, tz.UTC) == self.now

    @pytest.mark.parametrize("average", [20.0, 25.0])
    def test_no_reduction_returns_none(self, average):
        assert calc.projected_completion_date(average, 5, self.start, 20, self.now, tz.UTC) is None

    def test_linear_projection(self):
        # reduction 0.5/day, 10 left -> 20 days
        projected = calc.projected_completion_date(15.0, 5, self.start, 20, self.now, tz.UTC)
        assert projected == self.now + dt.timedelta(days=20)

    def test_partial_days_are_floored(self):
        # reduction 0.4/day, 7 left -> 17.5 days
        projected = calc.projected_completion_date(16.0, 9, self.start, 20, self.now, tz.UTC)
        assert projected == self.now + dt.timedelta(days=17)

    def test_same_day_start_uses_one_day(self):
        projected = calc.projected_completion_date(18.0, 10, self.now.date(), 20, self.now, tz.UTC)
        assert projected == self.now + dt.timedelta(days=4)

    def test_horizon_is_capped(self):
        projected = calc.projected_completion_date(
            19.9999, 0, self.start, 20, self.now, tz.UTC, max_days=100
        )
        assert projected == self.now + dt.timedelta(days=100)

    def test_default_horizon_comes_from_config(self, monkeypatch):
        monkeypatch.setattr(config, "MAX_PROJECTION_DAYS", 30)
        projected = calc.projected_completion_date(19.9999, 0, self.start, 20, self.now, tz.UTC)
        assert projected == self.now + dt.timedelta(days=30)

    def test_default_horizon_leaves_short_projections_alone(self):
        projected = calc.projected_completion_date(15.0, 5, self.start, 20, self.now, tz.UTC)
        assert projected == self.now + dt.timedelta(days=20)
        assert projected > self.now

    @pytest.mark.parametrize("max_days", [0, -30])
    def test_non_positive_horizon_is_rejected(self, max_days):
        with pytest.raises(InvalidProgramParameters):
            calc.projected_completion_date(
                15.0, 5, self.start, 20, self.now, tz.UTC, max_days=max_days
            )

    def test_invalid_inputs(self):
        with pytest.raises(InvalidProgramParameters):
            calc.projected_completion_date(10.0, 25, self.start, 20, self.now, tz.UTC)
        with pytest.raises(InvalidProgramParameters):
            calc.projected_completion_date(-1.0, 5, self.start, 20, self.now, tz.UTC)

    def test_idempotent(self):
        first = calc.projected_completion_date(15.0, 5, self.start, 20, self.now, tz.UTC)
        second = calc.projected_completion_date(15.0, 5, self.start, 20, self.now, tz.UTC)
        assert first == second
