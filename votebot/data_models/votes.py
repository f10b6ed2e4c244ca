"""
Vote data models for the leaderboard synchronization cycle.

Provides immutable data transfer objects for fetched provider data, the shaped
leaderboard, the persisted sync state and the outcome of one cycle.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar, Union

T = TypeVar('T')


@dataclass(frozen=True)
class VoterStanding:
    """One voter's current total for the reporting window."""
    nickname: str
    vote_count: int


@dataclass(frozen=True)
class VoteEvent:
    """One historical vote as reported by the provider."""
    nickname: str
    occurred_at: str
    epoch_ordinal: float


@dataclass(frozen=True)
class StandingsSnapshot:
    """Validated standings payload."""
    standings: List[VoterStanding]
    entity_label: Optional[str] = None


@dataclass(frozen=True)
class LeaderboardRecord:
    """Single published row. Rank is positional and derived at render time."""
    nickname: str
    vote_count: int
    last_activity_display: str


@dataclass(frozen=True)
class SyncStateRecord:
    """In-memory copy of the persisted SyncState row."""
    tracked_entity_id: str
    last_fingerprint: str = ''
    last_message_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FetchFailureReason(Enum):
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class FetchSuccess(Generic[T]):
    value: T


@dataclass(frozen=True)
class FetchFailure:
    reason: FetchFailureReason
    detail: str = ''


FetchResult = Union[FetchSuccess[T], FetchFailure]


class MessageProbe(Enum):
    """Result of checking whether a published message still exists."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSIENT_ERROR = "transient_error"


class EditOutcome(Enum):
    EDITED = "edited"
    NOT_FOUND = "not_found"


class SyncDecision(Enum):
    """Reconciliation state derived from persisted state plus live verification."""
    NO_PRIOR_STATE = "no_prior_state"
    UNCHANGED_AND_LIVE = "unchanged_and_live"
    UNCHANGED_BUT_MISSING = "unchanged_but_missing"
    CHANGED_EDITABLE = "changed_editable"
    CHANGED_NOT_EDITABLE = "changed_not_editable"


class CycleOutcome(Enum):
    PUBLISHED = "published"
    REPOSTED = "reposted"
    EDITED = "edited"
    SKIPPED = "skipped"
    FETCH_FAILED = "fetch_failed"
    TRANSPORT_UNAVAILABLE = "transport_unavailable"
    PERSISTENCE_FAILED = "persistence_failed"

    @property
    def is_failure(self) -> bool:
        return self in (
            CycleOutcome.FETCH_FAILED,
            CycleOutcome.TRANSPORT_UNAVAILABLE,
            CycleOutcome.PERSISTENCE_FAILED,
        )


@dataclass(frozen=True)
class CycleReport:
    """What one reconciliation cycle decided and did."""
    tracked_entity_id: str
    outcome: CycleOutcome
    decision: Optional[SyncDecision] = None
    fingerprint: Optional[str] = None
    message_id: Optional[int] = None
    detail: str = ''
