# src/dailyreps_backup/models/rate_limit.py
"""Per-identity write counters over rolling hour/day windows."""

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dailyreps_backup.db.session import Base
from dailyreps_backup.models.identity import IDENTIFIER_LENGTH


class RateLimitCounter(Base):
    """Abuse tracker for one identity.

    Each counter resets to zero once its window end is reached; the window
    ends are stored as Unix seconds.
    """

    __tablename__ = "rate_limits"

    owner_id: Mapped[str] = mapped_column(String(IDENTIFIER_LENGTH), primary_key=True)
    count_this_hour: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    count_today: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hour_window_end: Mapped[int] = mapped_column(BigInteger, nullable=False)
    day_window_end: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_write_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
