"""Sequence numbering helpers.

Pure value types and functions for sequential identifiers: formatting, calendar
period boundaries and next-value computation. Nothing here touches storage or
reads the clock; callers pass ``now`` explicitly so the same inputs always give
the same identifier.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Mapping


class ResetPeriod(str, Enum):
    """When a sequence counter restarts from its start value."""

    NEVER = "never"
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class SequenceConfig:
    """Display format and reset policy of a named sequence."""

    prefix: str = ""
    number_length: int = 1
    separator: str = ""
    reset_period: ResetPeriod = ResetPeriod.NEVER
    start_value: int = 1

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SequenceConfig:
        """Build a config from loosely typed values (settings, JSON, DB rows)."""
        return cls(
            prefix=str(data.get("prefix", "")),
            number_length=int(data.get("number_length", 1)),
            separator=str(data.get("separator", "")),
            reset_period=ResetPeriod(str(data.get("reset_period", ResetPeriod.NEVER.value)).lower()),
            start_value=int(data.get("start_value", 1)),
        )


@dataclass(frozen=True)
class SequenceState:
    """Persisted counter of a named sequence.

    ``version`` counts committed writes; stores compare it to detect that
    another writer committed between a read and the following write.
    """

    last_value: int = 0
    last_reset_at: datetime | None = None
    version: int = 0


@dataclass(frozen=True)
class FormattedIdentifier:
    """A single allocated identifier."""

    raw: int
    display: str


def zero_pad(value: int, width: int) -> str:
    """Left-pad ``value`` with zeros to at least ``width`` digits.

    Values wider than ``width`` keep all their digits.
    """
    return str(value).zfill(width)


def format_identifier(raw: int, config: SequenceConfig) -> str:
    """Return the display string for ``raw`` under ``config``."""
    return f"{config.prefix}{config.separator}{zero_pad(raw, config.number_length)}"


def period_key(moment: datetime, period: ResetPeriod, tz: tzinfo) -> tuple[int, ...]:
    """Return the calendar period containing ``moment`` as a sortable tuple."""
    local = moment.astimezone(tz)
    if period is ResetPeriod.DAILY:
        return (local.year, local.month, local.day)
    if period is ResetPeriod.MONTHLY:
        return (local.year, local.month)
    if period is ResetPeriod.YEARLY:
        return (local.year,)
    return ()


def crossed_boundary(
    last_reset_at: datetime | None,
    now: datetime,
    period: ResetPeriod,
    tz: tzinfo,
) -> bool:
    """Return True if ``now`` falls in a later calendar period than ``last_reset_at``.

    A clock that moved backwards never triggers a reset.
    """
    if period is ResetPeriod.NEVER or last_reset_at is None:
        return False
    return period_key(now, period, tz) > period_key(last_reset_at, period, tz)


def next_identifier(
    state: SequenceState,
    config: SequenceConfig,
    now: datetime,
    tz: tzinfo,
) -> tuple[FormattedIdentifier, SequenceState]:
    """Compute the next identifier and the state that commits it.

    Args:
        state: Current persisted state of the sequence.
        config: Active configuration of the sequence.
        now: Timezone-aware current time.
        tz: Calendar used for reset boundaries.

    Returns:
        The identifier and the state to persist once it is committed. The
        returned state carries ``version + 1``.
    """
    last_reset_at = state.last_reset_at
    if crossed_boundary(state.last_reset_at, now, config.reset_period, tz):
        base = config.start_value - 1
        last_reset_at = now
    elif state.last_reset_at is None:
        # First allocation: never go below the start value, keep imported counters.
        base = config.start_value - 1
        if state.last_value:
            base = max(state.last_value, base)
        last_reset_at = now
    else:
        base = state.last_value

    raw = base + 1
    identifier = FormattedIdentifier(raw=raw, display=format_identifier(raw, config))
    new_state = replace(
        state,
        last_value=raw,
        last_reset_at=last_reset_at,
        version=state.version + 1,
    )
    return identifier, new_state
