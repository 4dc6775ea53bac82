from datetime import datetime, timedelta

from conftest import at
from uph_tracker.services.schedule import ProjectionState, schedule_status


class TestAheadBehind:

    def test_exactly_on_schedule_at_midpoint(self, make_log, make_target):
        """10 UPH, 8h shift, 40 units at 4h elapsed -> expected 40 -> 0s."""
        status = schedule_status(make_log(documents_completed=40), make_target(), at(12))
        assert status.ahead_behind_seconds == 0
        assert status.state is ProjectionState.PROJECTED

    def test_ten_units_short_is_one_hour_behind(self, make_log, make_target):
        status = schedule_status(make_log(documents_completed=30), make_target(), at(12))
        assert status.ahead_behind_seconds == -3600.0

    def test_ahead_is_positive_seconds(self, make_log, make_target):
        status = schedule_status(make_log(documents_completed=45), make_target(), at(12))
        assert status.ahead_behind_seconds == 1800.0

    def test_goal_exactly_met_at_shift_end(self, make_log, make_target):
        """50 docs / 5 per unit = 10 units; 5h at 2 UPH = 10 required."""
        log = make_log(start_time="09:00", end_time="14:00", documents_completed=50)
        status = schedule_status(log, make_target(docs_per_unit=5, target_uph=2), at(14))
        assert status.ahead_behind_seconds == 0
        assert status.state is ProjectionState.REACHED
        assert status.projected_hit_time is None


class TestProjection:

    def test_on_pace_projects_shift_end(self, make_log, make_target):
        status = schedule_status(make_log(documents_completed=40), make_target(), at(12))
        assert status.projected_hit_time == at(16)

    def test_behind_pace_projects_past_shift_end(self, make_log, make_target):
        # 30 units in 4h = 7.5 UPH; 50 more units take 6h40m
        status = schedule_status(make_log(documents_completed=30), make_target(), at(12))
        expected = at(18, 40)
        assert abs(status.projected_hit_time - expected) < timedelta(seconds=1)

    def test_aware_as_of_keeps_its_zone(self, make_log, make_target):
        import pytz
        as_of = pytz.utc.localize(at(12))
        status = schedule_status(make_log(documents_completed=40), make_target(), as_of)
        assert status.projected_hit_time == pytz.utc.localize(at(16))

    def test_no_progress_is_indeterminate(self, make_log, make_target):
        status = schedule_status(make_log(documents_completed=0), make_target(), at(10))
        assert status.state is ProjectionState.INDETERMINATE
        assert status.projected_hit_time is None

    def test_before_start_is_indeterminate(self, make_log, make_target):
        status = schedule_status(make_log(documents_completed=5), make_target(), at(7))
        assert status.state is ProjectionState.INDETERMINATE
        assert status.ahead_behind_seconds == 1800.0


class TestGoalMetLock:

    def test_recorded_goal_suppresses_projection(self, make_log, make_target):
        log = make_log(documents_completed=0, goal_met_times={"t-std": "2024-07-15T11:00:00"})
        for hour in (12, 14, 23):
            status = schedule_status(log, make_target(), at(hour))
            assert status.state is ProjectionState.MET
            assert status.ahead_behind_seconds is None
            assert status.projected_hit_time is None
            assert status.met_at == datetime(2024, 7, 15, 11, 0)

    def test_other_targets_are_still_projected(self, make_log, make_target):
        log = make_log(documents_completed=40, goal_met_times={"t-other": "2024-07-15T11:00:00"})
        assert schedule_status(log, make_target(), at(12)).state is ProjectionState.PROJECTED


class TestUnavailable:

    def test_zero_target_uph_is_indeterminate_not_nan(self, make_log, make_target):
        status = schedule_status(make_log(documents_completed=40), make_target(target_uph=0), at(12))
        assert status.state is ProjectionState.UNAVAILABLE
        assert status.ahead_behind_seconds is None
        assert status.projected_hit_time is None

    def test_missing_target(self, make_log):
        assert schedule_status(make_log(), None, at(12)).state is ProjectionState.UNAVAILABLE

    def test_unparseable_shift(self, make_log, make_target):
        status = schedule_status(make_log(end_time="5pm"), make_target(), at(12))
        assert status.state is ProjectionState.UNAVAILABLE
        assert status.ahead_behind_seconds is None

    def test_zero_hour_shift_has_no_projection(self, make_log, make_target):
        log = make_log(break_minutes=480, documents_completed=10)
        status = schedule_status(log, make_target(), at(12))
        assert status.state is ProjectionState.UNAVAILABLE
        assert status.projected_hit_time is None


def test_identical_inputs_give_identical_outputs(make_log, make_target):
    log = make_log(documents_completed=37, video_sessions_completed=4, break_minutes=45)
    target = make_target(docs_per_unit=3, videos_per_unit=2, target_uph=7)
    assert schedule_status(log, target, at(13, 7)) == schedule_status(log, target, at(13, 7))


class TestAgreesWithGoalTracker:

    def test_goal_covered_at_display_precision_is_reached(self, make_log, make_target):
        """2499 / 250 = 9.996 units, shown as 10.00 against 10.00 required."""
        from uph_tracker.services.goal_met import GoalState, evaluate_goal

        log = make_log(documents_completed=2499)
        target = make_target(docs_per_unit=250, target_uph=1.25)
        goal = evaluate_goal(log, target, at(15))
        status = schedule_status(log, target, at(15))
        assert goal.state is GoalState.MET
        assert status.state is ProjectionState.REACHED
        assert status.projected_hit_time is None
