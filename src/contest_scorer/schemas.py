from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Callsign: TypeAlias = str
RawContact: TypeAlias = Mapping[str, Any]
Submission: TypeAlias = tuple[Callsign, Sequence[RawContact]]
ScoreRow: TypeAlias = tuple[Callsign, float]
CallsignCount: TypeAlias = tuple[Callsign, int]


class DTOBase(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ContactScoringDetail(DTOBase):
    contact: dict[str, str] = Field(default_factory=dict)
    invalid_rule: str | None = None
    score_rule: str | None = None
    given_score: float = 0.0

    @property
    def is_valid(self) -> bool:
        return self.invalid_rule is None


class ParticipantScoringDetail(DTOBase):
    bonus_rule_applied: str | None = None
    given_bonus: float = 0.0
    has_minimum_appearances: bool = True
    contacts: list[ContactScoringDetail] = Field(default_factory=list)

    @property
    def valid_contact_count(self) -> int:
        return sum(1 for detail in self.contacts if detail.is_valid)


class ContestResult(DTOBase):
    results: list[ScoreRow] = Field(default_factory=list)
    non_competing_results: list[ScoreRow] = Field(default_factory=list)
    scoring_details: dict[Callsign, ParticipantScoringDetail] = Field(default_factory=dict)
    missing_participants: list[CallsignCount] = Field(default_factory=list)
    blacklisted_callsigns_found: list[CallsignCount] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Exchange:
    rst_sent: str = ""
    rst_rcvd: str = ""
    stx: str = ""
    srx: str = ""


@dataclass(slots=True)
class ValidContact:
    """A contact that survived validation; ``score`` is owned by the scoring stages."""

    callsign: Callsign
    contacted_callsign: Callsign
    date: str
    time: str
    freq: str
    band: str
    mode: str
    exchange: Exchange = field(default_factory=Exchange)
    detail_index: int = 0
    timestamp: datetime | None = None
    score: float = 0


class EntryKind(StrEnum):
    SUBMITTED = "submitted"
    PLACEHOLDER = "placeholder"


@dataclass(slots=True)
class ParticipantContacts:
    """Validated contacts for one callsign.

    ``SUBMITTED`` entries come from a real log and may hold zero contacts.
    ``PLACEHOLDER`` entries stand in for missing participants that met the
    appearance threshold: they make the callsign resolvable for others but
    never carry contacts or a rank.
    """

    callsign: Callsign
    kind: EntryKind = EntryKind.SUBMITTED
    contacts: list[ValidContact] = field(default_factory=list)

    @classmethod
    def placeholder(cls, callsign: Callsign) -> ParticipantContacts:
        return cls(callsign=callsign, kind=EntryKind.PLACEHOLDER)

    @property
    def is_placeholder(self) -> bool:
        return self.kind == EntryKind.PLACEHOLDER

    @property
    def total_score(self) -> float:
        return sum(contact.score for contact in self.contacts)
