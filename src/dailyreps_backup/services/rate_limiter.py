"""Per-identity write quotas enforced inside the caller's write transaction."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from dailyreps_backup.core.errors import RateLimitedError
from dailyreps_backup.core.logging import short_id
from dailyreps_backup.core.settings import RateLimitPolicy
from dailyreps_backup.models import RateLimitCounter

logger = logging.getLogger(__name__)


def new_counter(owner_id: str, now: int, policy: RateLimitPolicy) -> RateLimitCounter:
    """Return a zeroed counter whose windows start at `now`."""
    return RateLimitCounter(
        owner_id=owner_id,
        count_this_hour=0,
        count_today=0,
        hour_window_end=now + policy.hour_window_seconds,
        day_window_end=now + policy.day_window_seconds,
        last_write_at=None,
    )


def check_and_increment(counter: RateLimitCounter, now: int, policy: RateLimitPolicy) -> None:
    """Admit one write against `counter` or raise without touching it.

    Expired windows are reset (count 0, end `now + length`) before the limits
    are evaluated. On rejection the counter object is left exactly as it was.

    Raises:
        RateLimitedError: If either the hourly or the daily quota is exhausted.
    """
    hour_count, hour_end = counter.count_this_hour, counter.hour_window_end
    day_count, day_end = counter.count_today, counter.day_window_end

    if now >= hour_end:
        hour_count, hour_end = 0, now + policy.hour_window_seconds
    if now >= day_end:
        day_count, day_end = 0, now + policy.day_window_seconds

    if hour_count >= policy.hourly_limit:
        logger.warning("Hourly rate limit reached for %s", short_id(counter.owner_id))
        raise RateLimitedError()
    if day_count >= policy.daily_limit:
        logger.warning("Daily rate limit reached for %s", short_id(counter.owner_id))
        raise RateLimitedError()

    counter.count_this_hour = hour_count + 1
    counter.hour_window_end = hour_end
    counter.count_today = day_count + 1
    counter.day_window_end = day_end
    counter.last_write_at = now


class RateLimiter:
    """Loads, evaluates and updates a counter as one read-modify-write.

    `consume` must be called with a session opened by
    `RecordStore.write_transaction`, whose write lock is held until commit, so
    concurrent requests for one identity cannot both pass the check.
    """

    def __init__(self, policy: RateLimitPolicy) -> None:
        self.policy = policy

    def consume(self, session: Session, owner_id: str, now: int) -> RateLimitCounter:
        counter = session.get(RateLimitCounter, owner_id, with_for_update=True)
        if counter is None:
            counter = new_counter(owner_id, now, self.policy)
            session.add(counter)
        check_and_increment(counter, now, self.policy)
        return counter
