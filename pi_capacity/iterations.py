"""
Iteration Partitioner

Splits a Program Increment into fixed-length iterations.
"""

from datetime import timedelta
from typing import Iterator, Optional

from .models import Iteration, PIConfig


def partition(pi_config: PIConfig) -> Iterator[Iteration]:
    """
    Yield the iterations of a PI in order.

    The iteration count is ceil(total days / iteration days). Generation
    stops as soon as a computed start falls after the PI end, and the last
    iteration's end is clamped to the PI end date.

    Example:
        >>> cfg = PIConfig(start_date=date(2024, 1, 1), end_date=date(2024, 1, 20))
        >>> [(i.start_date, i.end_date) for i in partition(cfg)][-1]
        (datetime.date(2024, 1, 15), datetime.date(2024, 1, 20))
    """
    length = pi_config.iteration_days

    for n in range(pi_config.number_of_iterations):
        start = pi_config.start_date + timedelta(days=n * length)
        if start > pi_config.end_date:
            break

        end = min(start + timedelta(days=length - 1), pi_config.end_date)
        yield Iteration(number=n + 1, start_date=start, end_date=end)


def get_iteration(pi_config: PIConfig, number: int) -> Optional[Iteration]:
    """Look up a single iteration by its 1-based number."""
    for iteration in partition(pi_config):
        if iteration.number == number:
            return iteration
    return None
