"""Unit tests for the goal completion point rules."""

from datetime import date, datetime, timedelta, timezone

from roadmap.core.config import PointsConfig
from roadmap.services.points_rules import (
    REASON_COMPLETED,
    REASON_COMPLETED_ON_TIME,
    REASON_REOPENED,
    REASON_REOPENED_ON_TIME,
    GoalCompletedEvent,
    PointsAward,
    evaluate_completion,
    evaluate_reopen,
)


def _event(completed_at, target_date):
    return GoalCompletedEvent(student_id=1, goal_id=1, completed_at=completed_at, target_date=target_date)


class TestEvaluateCompletion:
    """Base award and on-time bonus."""

    def test_on_time_completion_awards_base_and_bonus(self):
        awards = evaluate_completion(_event(datetime(2025, 10, 14, 9), date(2025, 10, 15)), PointsConfig())

        assert awards == [
            PointsAward(2, REASON_COMPLETED),
            PointsAward(1, REASON_COMPLETED_ON_TIME),
        ]
        assert sum(award.amount for award in awards) == 3

    def test_completion_on_target_day_counts_as_on_time(self):
        awards = evaluate_completion(_event(datetime(2025, 10, 15, 23, 59), date(2025, 10, 15)), PointsConfig())

        assert len(awards) == 2

    def test_late_completion_awards_base_only(self):
        awards = evaluate_completion(_event(datetime(2025, 10, 5, 16), date(2025, 10, 1)), PointsConfig())

        assert awards == [PointsAward(2, REASON_COMPLETED)]

    def test_no_target_date_never_earns_bonus(self):
        awards = evaluate_completion(_event(datetime(2025, 10, 5), None), PointsConfig())

        assert awards == [PointsAward(2, REASON_COMPLETED)]

    def test_aware_timestamp_is_compared_in_utc(self):
        # 2025-10-16 01:00 at UTC+3 is still 2025-10-15 in UTC.
        completed_at = datetime(2025, 10, 16, 1, tzinfo=timezone(timedelta(hours=3)))

        awards = evaluate_completion(_event(completed_at, date(2025, 10, 15)), PointsConfig())

        assert len(awards) == 2

    def test_configured_values_are_used(self):
        config = PointsConfig(complete_goal=10, complete_on_time=4)

        awards = evaluate_completion(_event(datetime(2025, 1, 1), date(2025, 1, 2)), config)

        assert [award.amount for award in awards] == [10, 4]


class TestEvaluateReopen:
    """Reserved reopen deductions."""

    def test_default_config_produces_no_deductions(self):
        # Both reopen values default to 0: reopening is deliberately inert.
        config = PointsConfig()
        assert config.reopen_goal == 0
        assert config.reopen_on_time == 0

        assert evaluate_reopen(_event(datetime(2025, 10, 14), date(2025, 10, 15)), config) == []
        assert evaluate_reopen(_event(datetime(2025, 10, 20), date(2025, 10, 15)), config) == []

    def test_configured_deductions_are_negative(self):
        config = PointsConfig(reopen_goal=2, reopen_on_time=1)

        on_time = evaluate_reopen(_event(datetime(2025, 10, 14), date(2025, 10, 15)), config)
        late = evaluate_reopen(_event(datetime(2025, 10, 20), date(2025, 10, 15)), config)

        assert on_time == [
            PointsAward(-2, REASON_REOPENED),
            PointsAward(-1, REASON_REOPENED_ON_TIME),
        ]
        assert late == [PointsAward(-2, REASON_REOPENED)]
