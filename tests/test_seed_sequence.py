"""Tests for importing counters kept outside the service."""

import pytest

from hims_sequencing.core.sequence import SequenceState
from hims_sequencing.scripts.seed_sequence import seed_sequence


def test_seeded_counter_continues(allocator, state_store) -> None:
    state = seed_sequence(state_store, "mrNumber", 1500)

    assert state.last_value == 1500
    assert allocator.commit("mrNumber").display == "MR-01501"


def test_seed_bumps_version(state_store, clock) -> None:
    state_store.write("token", SequenceState(last_value=3, last_reset_at=clock(), version=3))

    state = seed_sequence(state_store, "token", 10)

    assert state.version == 4
    assert state.last_reset_at == clock()


def test_seed_rejects_negative_values(state_store) -> None:
    with pytest.raises(ValueError):
        seed_sequence(state_store, "token", -1)
