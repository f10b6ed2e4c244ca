"""
Record shaping and change fingerprinting for the vote leaderboard.

Both functions are pure: the same standings and events always produce the
same ordered records, and the same records always produce the same token.
"""

import hashlib
import json
from typing import Dict, Iterable, List, Sequence

from votebot.constants import SyncConstants, TimeConstants
from votebot.data_models.votes import LeaderboardRecord, VoteEvent, VoterStanding
from votebot.utils.time_normalizer import normalize_timestamp


def latest_events_by_nickname(events: Iterable[VoteEvent]) -> Dict[str, VoteEvent]:
    """
    Pick the most recent vote per nickname.
    
    Ties on ``epoch_ordinal`` fall back to the raw timestamp string so the
    choice does not depend on the order the provider listed the votes in.
    """
    latest: Dict[str, VoteEvent] = {}
    for event in events:
        current = latest.get(event.nickname)
        if current is None or (event.epoch_ordinal, event.occurred_at) > (current.epoch_ordinal, current.occurred_at):
            latest[event.nickname] = event
    return latest


def shape_records(
    standings: Sequence[VoterStanding],
    events: Iterable[VoteEvent]
) -> List[LeaderboardRecord]:
    """
    Join standings with their latest vote into the published ranking.
    
    Args:
        standings: Current vote totals, in provider order
        events: Raw vote log
        
    Returns:
        Records sorted by vote count descending; equal counts keep provider order
    """
    latest = latest_events_by_nickname(events)
    
    records = []
    for standing in standings:
        event = latest.get(standing.nickname)
        display = normalize_timestamp(event.occurred_at) if event else TimeConstants.UNKNOWN
        records.append(LeaderboardRecord(
            nickname=standing.nickname,
            vote_count=standing.vote_count,
            last_activity_display=display,
        ))
    
    # sorted() is stable
    return sorted(records, key=lambda record: -record.vote_count)


def serialize_records(records: Sequence[LeaderboardRecord]) -> str:
    """Canonical text form of the visible ranking."""
    return json.dumps(
        [[r.nickname, r.vote_count, r.last_activity_display] for r in records],
        ensure_ascii=False,
        separators=(',', ':'),
    )


def fingerprint_records(records: Sequence[LeaderboardRecord]) -> str:
    """Short change-detection token for the shaped ranking (not a security hash)."""
    digest = hashlib.sha256(serialize_records(records).encode('utf-8')).hexdigest()
    return digest[:SyncConstants.FINGERPRINT_LENGTH]
