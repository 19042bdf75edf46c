"""Tests for the sequence allocator."""

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, timedelta

import pytest

from hims_sequencing.core.sequence import ResetPeriod, SequenceConfig, SequenceState
from hims_sequencing.services.errors import (
    ConcurrentAllocationError,
    InvalidConfigError,
    PersistenceError,
    UnknownSequenceError,
)
from hims_sequencing.services.sequence import SequenceAllocator
from hims_sequencing.services.sequence_store import InMemoryConfigStore, InMemorySequenceStore

MR_CONFIG = SequenceConfig(
    prefix="MR", number_length=5, separator="-", reset_period=ResetPeriod.NEVER, start_value=1
)


class FailingStore(InMemorySequenceStore):
    """Store whose writes fail, as when storage is unavailable."""

    def compare_and_set(self, name, expected_version, state):
        raise PersistenceError("storage unavailable")


class RacingStore(InMemorySequenceStore):
    """Store where another writer commits right after each read, ``races`` times."""

    def __init__(self, races: int) -> None:
        super().__init__()
        self.races = races

    def read(self, name):
        state = super().read(name)
        if self.races > 0:
            self.races -= 1
            current = state or SequenceState()
            self.write(
                name,
                SequenceState(
                    last_value=current.last_value + 1,
                    last_reset_at=current.last_reset_at,
                    version=current.version + 1,
                ),
            )
        return state


def test_end_to_end_mr_numbers(allocator) -> None:
    """Configured MR sequence issues MR-00001 then MR-00002."""
    allocator.configure("mrNumber", MR_CONFIG)

    first = allocator.commit("mrNumber")
    second = allocator.commit("mrNumber")

    assert (first.raw, first.display) == (1, "MR-00001")
    assert (second.raw, second.display) == (2, "MR-00002")


def test_peek_is_idempotent_until_commit(allocator) -> None:
    allocator.configure("mrNumber", MR_CONFIG)

    peeks = {allocator.peek_next("mrNumber") for _ in range(5)}
    assert len(peeks) == 1

    committed = allocator.commit("mrNumber")
    assert committed == peeks.pop()
    assert allocator.peek_next("mrNumber").raw == committed.raw + 1


def test_peek_does_not_touch_state(allocator, state_store) -> None:
    allocator.peek_next("mrNumber")
    assert state_store.read("mrNumber") is None


def test_consecutive_commits_increment_by_one(allocator) -> None:
    raws = [allocator.commit("token").raw for _ in range(10)]
    assert raws == list(range(1, 11))


def test_padding_grows_past_number_length(allocator) -> None:
    allocator.configure("mrNumber", SequenceConfig(prefix="MR", number_length=4, separator="-"))

    first = allocator.commit("mrNumber")
    assert first.display.endswith("0001")

    for _ in range(9998):
        last = allocator.commit("mrNumber")
    assert last.raw == 9999
    assert last.display == "MR-9999"

    overflow = allocator.commit("mrNumber")
    assert overflow.raw == 10000
    assert overflow.display == "MR-10000"


def test_daily_reset_restarts_at_start_value(clock) -> None:
    store = InMemorySequenceStore(
        {"token": SequenceState(last_value=57, last_reset_at=clock() - timedelta(days=1), version=57)}
    )
    allocator = SequenceAllocator(store, clock=clock, tz=UTC)
    allocator.configure(
        "token",
        SequenceConfig(prefix="T", number_length=3, separator="-",
                       reset_period=ResetPeriod.DAILY, start_value=1),
    )

    assert allocator.commit("token").raw == 1
    assert allocator.commit("token").raw == 2

    clock.advance(days=1)
    assert allocator.peek_next("token").display == "T-001"
    assert allocator.commit("token").raw == 1
    assert store.read("token").last_reset_at == clock()


def test_monthly_reset_waits_for_calendar_month(allocator, clock) -> None:
    allocator.configure(
        "lab",
        SequenceConfig(prefix="LAB", number_length=4, separator="/",
                       reset_period=ResetPeriod.MONTHLY, start_value=1),
    )
    allocator.commit("lab")
    clock.advance(days=10)
    assert allocator.commit("lab").display == "LAB/0002"
    clock.advance(days=30)
    assert allocator.commit("lab").display == "LAB/0001"


def test_configure_rejects_non_positive_number_length(allocator) -> None:
    allocator.configure("mrNumber", MR_CONFIG)

    with pytest.raises(InvalidConfigError):
        allocator.configure("mrNumber", SequenceConfig(prefix="MR", number_length=0))

    assert allocator.get_config("mrNumber") == MR_CONFIG


def test_configure_rejects_negative_start_value(allocator) -> None:
    with pytest.raises(InvalidConfigError):
        allocator.configure("mrNumber", SequenceConfig(number_length=3, start_value=-1))


def test_configure_saves_to_config_store(state_store, clock) -> None:
    configs = InMemoryConfigStore()
    SequenceAllocator(state_store, configs, clock=clock, tz=UTC).configure("mrNumber", MR_CONFIG)

    fresh = SequenceAllocator(state_store, configs, clock=clock, tz=UTC)
    assert fresh.get_config("mrNumber") == MR_CONFIG


def test_builtin_defaults_cover_mr_and_token(allocator) -> None:
    assert allocator.peek_next("mrNumber").display == "MR-00001"
    assert allocator.peek_next("token").display == "T-001"
    assert allocator.get_config("token").reset_period is ResetPeriod.DAILY


def test_unknown_sequence(allocator) -> None:
    with pytest.raises(UnknownSequenceError):
        allocator.commit("invoice")


def test_persistence_error_leaves_state_unchanged(clock) -> None:
    store = FailingStore({"mrNumber": SequenceState(last_value=4, last_reset_at=clock(), version=4)})
    allocator = SequenceAllocator(store, clock=clock, tz=UTC)

    with pytest.raises(PersistenceError):
        allocator.commit("mrNumber")

    assert store.read("mrNumber") == SequenceState(last_value=4, last_reset_at=clock(), version=4)


def test_commit_retries_after_concurrent_write(clock) -> None:
    store = RacingStore(races=2)
    allocator = SequenceAllocator(store, clock=clock, tz=UTC)

    identifier = allocator.commit("mrNumber")

    # Two racing writers took 1 and 2.
    assert identifier.raw == 3
    assert store.read("mrNumber").version == 3


def test_commit_gives_up_after_max_attempts(clock) -> None:
    store = RacingStore(races=10)
    allocator = SequenceAllocator(store, clock=clock, tz=UTC, max_attempts=5)

    with pytest.raises(ConcurrentAllocationError) as excinfo:
        allocator.commit("mrNumber")

    assert excinfo.value.attempts == 5
    # Only the competing writers advanced the sequence.
    assert store.read("mrNumber").last_value == 5


def test_concurrent_commits_yield_distinct_values(state_store, clock) -> None:
    allocator = SequenceAllocator(state_store, clock=clock, tz=UTC, max_attempts=1000)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: allocator.commit("token").raw, range(200)))

    assert sorted(results) == list(range(1, 201))


@pytest.mark.parametrize(
    "bad_default",
    [
        SequenceConfig(prefix="MR", number_length=0),
        SequenceConfig(prefix="MR", number_length=5, start_value=-5),
    ],
)
def test_invalid_default_config_is_rejected(state_store, clock, bad_default) -> None:
    allocator = SequenceAllocator(
        state_store, clock=clock, tz=UTC, defaults={"mrNumber": bad_default}
    )

    with pytest.raises(InvalidConfigError):
        allocator.commit("mrNumber")
    with pytest.raises(InvalidConfigError):
        allocator.peek_next("mrNumber")
    assert state_store.read("mrNumber") is None


def test_invalid_saved_config_is_rejected(state_store, clock) -> None:
    configs = InMemoryConfigStore({"token": SequenceConfig(prefix="T", number_length=0)})
    allocator = SequenceAllocator(state_store, configs, clock=clock, tz=UTC)

    with pytest.raises(InvalidConfigError):
        allocator.get_config("token")


def test_explicit_max_attempts_is_honoured(clock) -> None:
    allocator = SequenceAllocator(RacingStore(races=1), clock=clock, tz=UTC, max_attempts=1)

    with pytest.raises(ConcurrentAllocationError) as excinfo:
        allocator.commit("mrNumber")
    assert excinfo.value.attempts == 1


@pytest.mark.parametrize("attempts", [0, -3])
def test_max_attempts_below_one_is_rejected(state_store, attempts) -> None:
    with pytest.raises(ValueError):
        SequenceAllocator(state_store, max_attempts=attempts)
