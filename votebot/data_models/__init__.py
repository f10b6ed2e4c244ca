from .votes import (
    CycleOutcome,
    CycleReport,
    EditOutcome,
    FetchFailure,
    FetchFailureReason,
    FetchResult,
    FetchSuccess,
    LeaderboardRecord,
    MessageProbe,
    StandingsSnapshot,
    SyncDecision,
    SyncStateRecord,
    VoteEvent,
    VoterStanding,
)

__all__ = [
    'CycleOutcome',
    'CycleReport',
    'EditOutcome',
    'FetchFailure',
    'FetchFailureReason',
    'FetchResult',
    'FetchSuccess',
    'LeaderboardRecord',
    'MessageProbe',
    'StandingsSnapshot',
    'SyncDecision',
    'SyncStateRecord',
    'VoteEvent',
    'VoterStanding',
]
