"""
Tests for the working-day aggregator.
"""

import pytest
from datetime import date

from pi_capacity.models import DayType, Employee, HolidayType, Team
from pi_capacity.resolver import HolidayResolver
from pi_capacity.working_days import WorkingDayAggregator, round_half_up


@pytest.fixture
def team():
    return Team(id="alpha", name="Alpha", members=["alice", "bob"])


@pytest.fixture
def members():
    return [
        Employee(id="alice", name="Alice", role="Developer"),
        Employee(id="bob", name="Bob", role="QA"),
    ]


class TestRoundHalfUp:
    """Tests for the rounding helper."""

    def test_halves_round_up(self):
        """Test that .5 always goes up, unlike banker's rounding."""
        assert round_half_up(2.5) == 3
        assert round_half_up(17.5) == 18

    def test_nearest(self):
        assert round_half_up(17.83) == 18
        assert round_half_up(4.25) == 4
        assert round_half_up(0) == 0


class TestTeamWorkingDays:
    """Tests for team and combined working days."""

    def test_week_with_public_holiday(self, make_holiday, team):
        """Test one public holiday in a Monday-Friday week leaves 4 days."""
        resolver = HolidayResolver([make_holiday("h", HolidayType.PUBLIC, date(2024, 1, 3))])
        aggregator = WorkingDayAggregator(resolver)
        members = [Employee(id="alice", name="Alice", role="Developer")]

        days = aggregator.team_working_days(date(2024, 1, 1), date(2024, 1, 5), team, members)
        assert days == 4

    def test_no_members_is_zero(self, team):
        """Test that an empty team has no working days."""
        aggregator = WorkingDayAggregator(HolidayResolver([]))
        assert aggregator.team_working_days(date(2024, 1, 1), date(2024, 1, 5), team, []) == 0

    def test_average_of_fractional_members(self, make_holiday, team, members):
        """Test that half days are averaged across members before rounding."""
        resolver = HolidayResolver([
            make_holiday("p", HolidayType.PERSONAL, date(2024, 1, 2),
                         day_type=DayType.HALF, employee_id="bob")
        ])
        aggregator = WorkingDayAggregator(resolver)

        assert aggregator.member_working_days(
            date(2024, 1, 1), date(2024, 1, 5), ["alpha"], members[1]
        ) == 4.5
        # (5 + 4.5) / 2 = 4.75
        assert aggregator.team_working_days(date(2024, 1, 1), date(2024, 1, 5), team, members) == 5

    def test_team_off_day_only_in_team_context(self, make_holiday, members):
        resolver = HolidayResolver([
            make_holiday("t", HolidayType.TEAM, date(2024, 1, 2), team_id="alpha")
        ])
        aggregator = WorkingDayAggregator(resolver)
        start, end = date(2024, 1, 1), date(2024, 1, 5)

        assert aggregator.combined_working_days(start, end, ["alpha"], members) == 4
        assert aggregator.combined_working_days(start, end, ["beta"], members) == 5

    def test_weekends_excluded(self, members):
        aggregator = WorkingDayAggregator(HolidayResolver([]))
        days = aggregator.combined_working_days(date(2024, 1, 1), date(2024, 1, 14), ["alpha"], members)
        assert days == 10


class TestOffDayCount:
    """Tests for off-day counting."""

    def test_counts_per_member_day(self, make_holiday, members):
        """Test that a public holiday counts once for each member."""
        resolver = HolidayResolver([make_holiday("h", HolidayType.PUBLIC, date(2024, 1, 3))])
        aggregator = WorkingDayAggregator(resolver)

        count = aggregator.off_day_count(date(2024, 1, 1), date(2024, 1, 5), ["alpha"], members)
        assert count == 2

    def test_overlapping_holidays_count_once(self, make_holiday, members):
        day = date(2024, 1, 3)
        resolver = HolidayResolver([
            make_holiday("h", HolidayType.PUBLIC, day),
            make_holiday("t", HolidayType.TEAM, day, team_id="alpha"),
            make_holiday("p", HolidayType.PERSONAL, day, employee_id="alice"),
        ])
        aggregator = WorkingDayAggregator(resolver)

        count = aggregator.off_day_count(date(2024, 1, 1), date(2024, 1, 5), ["alpha"], members)
        assert count == 2

    def test_half_days_count_as_off_days(self, make_holiday, members):
        resolver = HolidayResolver([
            make_holiday("p", HolidayType.PERSONAL, date(2024, 1, 2),
                         day_type=DayType.HALF, employee_id="alice")
        ])
        aggregator = WorkingDayAggregator(resolver)

        count = aggregator.off_day_count(date(2024, 1, 1), date(2024, 1, 5), [], members)
        assert count == 1

    def test_weekend_holidays_not_counted(self, make_holiday, members):
        resolver = HolidayResolver([make_holiday("h", HolidayType.PUBLIC, date(2024, 1, 6))])
        aggregator = WorkingDayAggregator(resolver)

        assert aggregator.off_day_count(date(2024, 1, 1), date(2024, 1, 7), [], members) == 0


class TestOrganizationWorkingDays:
    """Tests for organization-level working days."""

    def test_only_public_holidays_apply(self, make_holiday):
        resolver = HolidayResolver([
            make_holiday("h", HolidayType.PUBLIC, date(2024, 1, 3)),
            make_holiday("t", HolidayType.TEAM, date(2024, 1, 4), team_id="alpha"),
            make_holiday("p", HolidayType.PERSONAL, date(2024, 1, 5), employee_id="alice"),
        ])
        aggregator = WorkingDayAggregator(resolver)

        assert aggregator.organization_working_days(date(2024, 1, 1), date(2024, 1, 7)) == 4

    def test_public_half_day(self, make_holiday):
        resolver = HolidayResolver([
            make_holiday("h", HolidayType.PUBLIC, date(2024, 1, 3), day_type=DayType.HALF)
        ])
        aggregator = WorkingDayAggregator(resolver)

        assert aggregator.organization_working_days(date(2024, 1, 1), date(2024, 1, 5)) == 4.5
