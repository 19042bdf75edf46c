"""Sequence-related Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from hims_sequencing.core.sequence import FormattedIdentifier, ResetPeriod, SequenceConfig


class SequenceConfigPayload(BaseModel):
    """Schema for replacing the configuration of a sequence.

    ``number_length`` is checked by the allocator so that an unusable width is
    reported the same way for library and API callers.
    """

    prefix: str = Field(default="", max_length=32)
    separator: str = Field(default="", max_length=8)
    number_length: int
    reset_period: ResetPeriod = ResetPeriod.NEVER
    start_value: int = 1

    def to_config(self) -> SequenceConfig:
        return SequenceConfig(
            prefix=self.prefix,
            number_length=self.number_length,
            separator=self.separator,
            reset_period=self.reset_period,
            start_value=self.start_value,
        )


class SequenceConfigResponse(BaseModel):
    """Active configuration of a sequence."""

    name: str
    prefix: str
    separator: str
    number_length: int
    reset_period: ResetPeriod
    start_value: int

    @classmethod
    def from_config(cls, name: str, config: SequenceConfig) -> SequenceConfigResponse:
        return cls(
            name=name,
            prefix=config.prefix,
            separator=config.separator,
            number_length=config.number_length,
            reset_period=config.reset_period,
            start_value=config.start_value,
        )


class IdentifierResponse(BaseModel):
    """An identifier computed or allocated from a sequence."""

    name: str
    raw: int
    display: str
    committed: bool

    @classmethod
    def from_identifier(
        cls, name: str, identifier: FormattedIdentifier, *, committed: bool
    ) -> IdentifierResponse:
        return cls(
            name=name,
            raw=identifier.raw,
            display=identifier.display,
            committed=committed,
        )
