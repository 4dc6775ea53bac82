import math

from conftest import at
from uph_tracker.services.rates import (
    final_uph,
    goal_covered,
    live_metrics,
    required_units,
    unit_difference,
    units_still_needed,
)


class TestFinalUPH:

    def test_units_over_net_hours(self, make_log, make_target):
        log = make_log(start_time="09:00", end_time="14:00", documents_completed=50)
        assert final_uph(log, make_target(docs_per_unit=5)) == 2.0

    def test_zero_hours_is_zero_for_any_count(self, make_log, make_target):
        for docs in (0, 1, 500):
            log = make_log(start_time="09:00", end_time="09:00", documents_completed=docs)
            assert final_uph(log, make_target()) == 0

    def test_unparseable_shift_is_zero(self, make_log, make_target):
        log = make_log(start_time="", documents_completed=10)
        assert final_uph(log, make_target()) == 0


class TestRequiredUnits:

    def test_hours_times_rate(self):
        assert required_units(5, 2) == 10.0
        assert required_units(7.5, 13) == 97.5

    def test_non_positive_inputs_are_zero(self):
        assert required_units(0, 10) == 0
        assert required_units(8, 0) == 0
        assert required_units(8, -1) == 0


class TestLiveMetrics:

    def test_current_uph_uses_elapsed_net_time(self, make_log, make_target):
        log = make_log(documents_completed=40)
        m = live_metrics(log, make_target(), at(12))
        assert m.current_units == 40.0
        assert m.current_uph == 10.0
        assert m.net_elapsed_work_minutes == 240

    def test_counts_are_not_apportioned(self, make_log, make_target):
        log = make_log(documents_completed=40, break_minutes=60)
        m = live_metrics(log, make_target(), at(12))
        assert m.current_units == 40.0
        assert m.current_uph == round(40 / 3.5, 2)

    def test_before_start_rate_is_zero_not_infinite(self, make_log, make_target):
        m = live_metrics(make_log(documents_completed=5), make_target(), at(6))
        assert m.current_units == 5.0
        assert m.current_uph == 0
        assert math.isfinite(m.current_uph)


class TestUnitDifference:

    def test_shortfall_is_negative(self, make_log, make_target):
        log = make_log(documents_completed=30)
        assert unit_difference(log, make_target()) == -50.0

    def test_surplus_is_positive(self, make_log, make_target):
        log = make_log(documents_completed=95)
        assert unit_difference(log, make_target()) == 15.0


class TestGoalCoverage:

    def test_compared_at_display_precision(self):
        assert units_still_needed(10.0, 9.996) == 0.0
        assert goal_covered(10.0, 9.996)
        assert not goal_covered(10.0, 9.99)

    def test_zero_requirement_is_never_covered(self):
        assert not goal_covered(0.0, 5.0)
        assert not goal_covered(0.004, 5.0)
