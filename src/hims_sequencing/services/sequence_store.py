"""Storage backends for sequence state and sequence configuration.

Two flavours of each store are provided: in-process dictionaries guarded by a
lock (tests, embedding) and SQLAlchemy-backed stores used by the API.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Mapping, Protocol

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hims_sequencing.core.sequence import ResetPeriod, SequenceConfig, SequenceState
from hims_sequencing.db.time import as_utc
from hims_sequencing.models import SequenceConfigRecord, SequenceStateRecord

from .errors import PersistenceError

logger = logging.getLogger(__name__)


class SequenceStore(Protocol):
    """Key-value store of sequence state, keyed by sequence name."""

    def read(self, name: str) -> SequenceState | None:
        """Return the stored state, or None when the sequence was never written."""

    def compare_and_set(self, name: str, expected_version: int, state: SequenceState) -> bool:
        """Write ``state`` only if the stored version still equals ``expected_version``."""

    def write(self, name: str, state: SequenceState) -> None:
        """Unconditionally replace the stored state."""


class ConfigStore(Protocol):
    """Key-value store of sequence configuration, keyed by sequence name."""

    def load(self, name: str) -> SequenceConfig | None:
        """Return the saved configuration, or None if none was saved."""

    def save(self, name: str, config: SequenceConfig) -> None:
        """Persist ``config`` as the configuration of ``name``."""


class InMemorySequenceStore:
    """Process-local sequence state."""

    def __init__(self, initial: Mapping[str, SequenceState] | None = None) -> None:
        self._states: dict[str, SequenceState] = dict(initial or {})
        self._lock = Lock()

    def read(self, name: str) -> SequenceState | None:
        with self._lock:
            return self._states.get(name)

    def compare_and_set(self, name: str, expected_version: int, state: SequenceState) -> bool:
        with self._lock:
            current = self._states.get(name)
            current_version = current.version if current is not None else 0
            if current_version != expected_version:
                return False
            self._states[name] = state
            return True

    def write(self, name: str, state: SequenceState) -> None:
        with self._lock:
            self._states[name] = state


class InMemoryConfigStore:
    """Process-local sequence configuration."""

    def __init__(self, initial: Mapping[str, SequenceConfig] | None = None) -> None:
        self._configs: dict[str, SequenceConfig] = dict(initial or {})
        self._lock = Lock()

    def load(self, name: str) -> SequenceConfig | None:
        with self._lock:
            return self._configs.get(name)

    def save(self, name: str, config: SequenceConfig) -> None:
        with self._lock:
            self._configs[name] = config


class SqlSequenceStore:
    """Sequence state stored in the ``sequence_state`` table.

    Every successful write commits the session; every failed one rolls it
    back so the stored row is never partially updated.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def read(self, name: str) -> SequenceState | None:
        stmt = select(
            SequenceStateRecord.last_value,
            SequenceStateRecord.last_reset_at,
            SequenceStateRecord.version,
        ).where(SequenceStateRecord.name == name)
        try:
            row = self._db.execute(stmt).first()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error("Failed to read sequence %s: %s", name, exc)
            raise PersistenceError(f"Could not read sequence {name!r}") from exc
        if row is None:
            return None
        return SequenceState(
            last_value=int(row.last_value),
            last_reset_at=as_utc(row.last_reset_at),
            version=int(row.version),
        )

    def compare_and_set(self, name: str, expected_version: int, state: SequenceState) -> bool:
        values = {
            "last_value": state.last_value,
            "last_reset_at": state.last_reset_at,
            "version": state.version,
        }
        try:
            result = self._db.execute(
                update(SequenceStateRecord)
                .where(
                    SequenceStateRecord.name == name,
                    SequenceStateRecord.version == expected_version,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                if expected_version != 0:
                    self._db.rollback()
                    return False
                # No row yet; a concurrent first write trips the primary key.
                self._db.execute(insert(SequenceStateRecord).values(name=name, **values))
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            return False
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error("Failed to write sequence %s: %s", name, exc)
            raise PersistenceError(f"Could not write sequence {name!r}") from exc
        return True

    def write(self, name: str, state: SequenceState) -> None:
        try:
            self._db.merge(
                SequenceStateRecord(
                    name=name,
                    last_value=state.last_value,
                    last_reset_at=state.last_reset_at,
                    version=state.version,
                )
            )
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error("Failed to write sequence %s: %s", name, exc)
            raise PersistenceError(f"Could not write sequence {name!r}") from exc


class SqlConfigStore:
    """Sequence configuration stored in the ``sequence_config`` table."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def load(self, name: str) -> SequenceConfig | None:
        try:
            record = self._db.get(SequenceConfigRecord, name)
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise PersistenceError(f"Could not read configuration of {name!r}") from exc
        if record is None:
            return None
        return SequenceConfig(
            prefix=record.prefix,
            number_length=record.number_length,
            separator=record.separator,
            reset_period=ResetPeriod(record.reset_period),
            start_value=record.start_value,
        )

    def save(self, name: str, config: SequenceConfig) -> None:
        try:
            self._db.merge(
                SequenceConfigRecord(
                    name=name,
                    prefix=config.prefix,
                    separator=config.separator,
                    number_length=config.number_length,
                    reset_period=config.reset_period.value,
                    start_value=config.start_value,
                )
            )
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error("Failed to save configuration of %s: %s", name, exc)
            raise PersistenceError(f"Could not save configuration of {name!r}") from exc
