"""Persisted sequence counters and their display configuration."""
import datetime

from sqlalchemy import BigInteger, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from hims_sequencing.db.session import Base


class SequenceStateRecord(Base):
    """Last issued value of a named sequence.

    Rows are only written through the allocator's check-and-set on ``version``.
    """

    __tablename__ = "sequence_state"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    last_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_reset_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class SequenceConfigRecord(Base):
    """Saved display format and reset policy of a named sequence."""

    __tablename__ = "sequence_config"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    prefix: Mapped[str] = mapped_column(Text, nullable=False, default="")
    separator: Mapped[str] = mapped_column(Text, nullable=False, default="")
    number_length: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # One of ResetPeriod's values.
    reset_period: Mapped[str] = mapped_column(Text, nullable=False, default="never")
    start_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
