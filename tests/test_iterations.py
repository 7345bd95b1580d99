"""
Tests for the iteration partitioner and PI configuration.
"""

from datetime import date

from pi_capacity.iterations import get_iteration, partition
from pi_capacity.models import PIConfig


class TestPIConfig:
    """Tests for derived PI values."""

    def test_total_days_inclusive(self, pi_config):
        assert pi_config.total_days == 28
        assert pi_config.iteration_days == 14
        assert pi_config.number_of_iterations == 2

    def test_partial_last_iteration_rounds_up(self):
        cfg = PIConfig(start_date=date(2024, 1, 1), end_date=date(2024, 1, 20))
        assert cfg.number_of_iterations == 2

    def test_not_configured(self):
        cfg = PIConfig()
        assert not cfg.is_configured
        assert cfg.total_days == 0
        assert cfg.number_of_iterations == 0

    def test_end_before_start(self):
        """Test that an inverted range gives zero days and iterations."""
        cfg = PIConfig(start_date=date(2024, 1, 10), end_date=date(2024, 1, 1))
        assert cfg.is_configured
        assert not cfg.has_valid_range
        assert cfg.total_days == 0
        assert cfg.number_of_iterations == 0

    def test_same_start_and_end(self):
        cfg = PIConfig(start_date=date(2024, 1, 1), end_date=date(2024, 1, 1))
        assert cfg.total_days == 0


class TestPartition:
    """Tests for iteration boundaries."""

    def test_exact_fit(self, pi_config):
        iterations = list(partition(pi_config))

        assert [i.number for i in iterations] == [1, 2]
        assert iterations[0].start_date == date(2024, 1, 1)
        assert iterations[0].end_date == date(2024, 1, 14)
        assert iterations[1].start_date == date(2024, 1, 15)
        assert iterations[1].end_date == date(2024, 1, 28)

    def test_last_iteration_clamped(self):
        """Test that the final iteration ends on the PI end date."""
        cfg = PIConfig(start_date=date(2024, 1, 1), end_date=date(2024, 1, 20))
        iterations = list(partition(cfg))

        assert len(iterations) == 2
        assert iterations[1].start_date == date(2024, 1, 15)
        assert iterations[1].end_date == date(2024, 1, 20)
        assert iterations[1].days == 6

    def test_iterations_are_contiguous(self):
        cfg = PIConfig(
            start_date=date(2024, 1, 3),
            end_date=date(2024, 3, 29),
            iteration_duration_weeks=3
        )
        iterations = list(partition(cfg))

        assert iterations[0].start_date == cfg.start_date
        assert iterations[-1].end_date == cfg.end_date
        for previous, current in zip(iterations, iterations[1:]):
            assert (current.start_date - previous.end_date).days == 1

    def test_one_week_iterations(self):
        cfg = PIConfig(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 28),
            iteration_duration_weeks=1
        )
        assert len(list(partition(cfg))) == 4

    def test_invalid_range_has_no_iterations(self):
        cfg = PIConfig(start_date=date(2024, 1, 10), end_date=date(2024, 1, 1))
        assert list(partition(cfg)) == []


class TestGetIteration:
    """Tests for iteration lookup."""

    def test_existing(self, pi_config):
        iteration = get_iteration(pi_config, 2)
        assert iteration.start_date == date(2024, 1, 15)

    def test_missing(self, pi_config):
        assert get_iteration(pi_config, 3) is None
        assert get_iteration(pi_config, 0) is None
