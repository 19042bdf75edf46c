"""Sequence allocation service.

``SequenceAllocator`` is the single entry point that advances a sequence. It
reads the stored state, computes the next identifier and writes the new state
back with a check-and-set, retrying a bounded number of times when another
writer committed in between.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from hims_sequencing.core.sequence import (
    FormattedIdentifier,
    SequenceConfig,
    SequenceState,
    crossed_boundary,
    next_identifier,
)
from hims_sequencing.core.settings import settings
from hims_sequencing.db.time import utcnow

from .errors import ConcurrentAllocationError, InvalidConfigError, UnknownSequenceError
from .sequence_store import ConfigStore, InMemoryConfigStore, SequenceStore

logger = logging.getLogger(__name__)

MR_NUMBER_SEQUENCE = "mrNumber"
TOKEN_SEQUENCE = "token"


def default_configs() -> dict[str, SequenceConfig]:
    """Return the built-in configurations declared in settings."""
    return {
        name: SequenceConfig.from_mapping(values)
        for name, values in settings.default_sequences.items()
    }


def validate_config(config: SequenceConfig) -> None:
    """Raise ``InvalidConfigError`` if ``config`` cannot produce identifiers."""
    if config.number_length < 1:
        raise InvalidConfigError(
            f"number_length must be at least 1, got {config.number_length}"
        )
    if config.start_value < 0:
        raise InvalidConfigError(f"start_value must be non-negative, got {config.start_value}")


class SequenceAllocator:
    """Allocate formatted identifiers for named sequences.

    Args:
        store: Persistence collaborator holding ``SequenceState`` per name.
        configs: Configuration collaborator; defaults to an in-memory store.
        clock: Returns the current timezone-aware time.
        tz: Calendar used for reset boundaries; defaults to ``SEQUENCE_TIMEZONE``.
        max_attempts: Check-and-set attempts per commit before giving up.
        defaults: Fallback configurations for names with no saved configuration.
    """

    def __init__(
        self,
        store: SequenceStore,
        configs: ConfigStore | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        tz: tzinfo | None = None,
        max_attempts: int | None = None,
        defaults: dict[str, SequenceConfig] | None = None,
    ) -> None:
        self.store = store
        self.configs = configs if configs is not None else InMemoryConfigStore()
        self.clock = clock
        self.tz = tz if tz is not None else ZoneInfo(settings.sequence_timezone)
        if max_attempts is None:
            max_attempts = settings.sequence_commit_max_attempts
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.defaults = defaults if defaults is not None else default_configs()
        self._active: dict[str, SequenceConfig] = {}

    def configure(self, name: str, config: SequenceConfig) -> SequenceConfig:
        """Replace the active configuration of ``name``.

        Raises:
            InvalidConfigError: If ``number_length < 1`` or ``start_value < 0``.
            PersistenceError: If the configuration cannot be saved.
        """
        validate_config(config)
        self.configs.save(name, config)
        self._active[name] = config
        logger.info("Configured sequence %s: %s", name, config)
        return config

    def get_config(self, name: str) -> SequenceConfig:
        """Return the active configuration of ``name``.

        Raises:
            UnknownSequenceError: If ``name`` has neither a saved nor a default config.
            InvalidConfigError: If the saved or default config cannot produce identifiers.
        """
        config = self._active.get(name)
        if config is None:
            config = self.configs.load(name) or self.defaults.get(name)
            if config is None:
                raise UnknownSequenceError(f"Sequence {name!r} is not configured")
            validate_config(config)
            self._active[name] = config
        return config

    def current_state(self, name: str) -> SequenceState:
        """Return the stored state of ``name``, treating a missing row as fresh."""
        return self.store.read(name) or SequenceState()

    def peek_next(self, name: str) -> FormattedIdentifier:
        """Return the identifier the next commit would produce, without storing it."""
        identifier, _ = next_identifier(
            self.current_state(name), self.get_config(name), self.clock(), self.tz
        )
        return identifier

    def commit(self, name: str) -> FormattedIdentifier:
        """Allocate the next identifier of ``name`` and persist the new state.

        Raises:
            ConcurrentAllocationError: If every check-and-set attempt lost to another writer.
            PersistenceError: If the store fails; the stored state is left unchanged.
            UnknownSequenceError: If ``name`` is not configured.
        """
        config = self.get_config(name)
        for attempt in range(1, self.max_attempts + 1):
            state = self.current_state(name)
            now = self.clock()
            identifier, new_state = next_identifier(state, config, now, self.tz)
            if self.store.compare_and_set(name, state.version, new_state):
                if crossed_boundary(state.last_reset_at, now, config.reset_period, self.tz):
                    logger.info(
                        "Sequence %s reset to %d for new %s period",
                        name,
                        identifier.raw,
                        config.reset_period.value,
                    )
                logger.info("Allocated %s from sequence %s", identifier.display, name)
                return identifier
            logger.warning(
                "Sequence %s changed during commit (attempt %d/%d)",
                name,
                attempt,
                self.max_attempts,
            )

        logger.error("Giving up on sequence %s after %d attempts", name, self.max_attempts)
        raise ConcurrentAllocationError(name, self.max_attempts)
