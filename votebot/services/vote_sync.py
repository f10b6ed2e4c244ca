"""
Vote leaderboard synchronization service.

Runs one reconciliation cycle: fetch standings and vote log, shape them into
the ranked leaderboard, fingerprint it, then decide whether the published
message is skipped, edited in place or reposted. Each cycle either completes
with the sync state persisted or stops without touching it; the scheduler's
next tick is the retry mechanism.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from votebot.config import SyncSettings
from votebot.data_models.votes import (
    CycleOutcome,
    CycleReport,
    EditOutcome,
    FetchFailure,
    LeaderboardRecord,
    MessageProbe,
    SyncDecision,
    SyncStateRecord,
)
from votebot.services.message_transport import MessageTransport
from votebot.services.sync_state_store import SyncStateStore
from votebot.services.vote_provider import VoteProviderClient, current_period
from votebot.utils.embeds import build_vote_embed
from votebot.utils.logger import setup_logger
from votebot.utils.sync_exceptions import PersistenceFailure, TransportTransientFailure
from votebot.utils.vote_records import fingerprint_records, shape_records

logger = setup_logger(__name__)


@dataclass
class SyncContext:
    """Collaborators for one tracked entity's sync cycle."""
    settings: SyncSettings
    provider: VoteProviderClient
    transport: MessageTransport
    store: SyncStateStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def decide_sync_state(
    state: Optional[SyncStateRecord],
    fingerprint: str,
    probe: Optional[MessageProbe]
) -> SyncDecision:
    """
    Classify the cycle from persisted state and the live message check.
    
    Args:
        state: Persisted sync state, None when the entity was never synced
        fingerprint: Token of the freshly shaped leaderboard
        probe: Existence check of ``state.last_message_id``; None when no id is stored
        
    Returns:
        The reconciliation state to act on
    """
    if state is None:
        return SyncDecision.NO_PRIOR_STATE
    if probe is MessageProbe.TRANSIENT_ERROR:
        raise ValueError("transient probe results must abort the cycle before deciding")
    
    message_live = state.last_message_id is not None and probe is MessageProbe.FOUND
    
    if state.last_fingerprint == fingerprint:
        return SyncDecision.UNCHANGED_AND_LIVE if message_live else SyncDecision.UNCHANGED_BUT_MISSING
    return SyncDecision.CHANGED_EDITABLE if message_live else SyncDecision.CHANGED_NOT_EDITABLE


class VoteSyncService:
    """Reconciles the published vote leaderboard for one tracked entity."""
    
    def __init__(self, context: SyncContext, clock: Callable[[], datetime] = _utcnow):
        self.context = context
        self._clock = clock
    
    @property
    def tracked_entity_id(self) -> str:
        return self.context.settings.tracked_entity_id
    
    def _report(self, outcome: CycleOutcome, **kwargs) -> CycleReport:
        return CycleReport(tracked_entity_id=self.tracked_entity_id, outcome=outcome, **kwargs)
    
    async def run_cycle(self) -> CycleReport:
        """Fetch, shape, fingerprint and reconcile once."""
        now = self._clock()
        # Host-local month when no period is pinned; recomputed every cycle
        period = self.context.settings.period or current_period(now.astimezone())
        
        standings_result, events_result = await self.context.provider.fetch_all(period)
        for result in (standings_result, events_result):
            if isinstance(result, FetchFailure):
                logger.warning(
                    f"Vote fetch failed ({result.reason.value}: {result.detail}); "
                    f"skipping cycle for {self.tracked_entity_id}"
                )
                return self._report(CycleOutcome.FETCH_FAILED, detail=f"{result.reason.value}: {result.detail}")
        
        snapshot = standings_result.value
        records = shape_records(snapshot.standings, events_result.value)
        fingerprint = fingerprint_records(records)
        logger.debug(f"Shaped {len(records)} leaderboard records for period {period}, fingerprint {fingerprint}")
        
        return await self.reconcile(records, fingerprint, snapshot.entity_label, now)
    
    async def reconcile(
        self,
        records: Sequence[LeaderboardRecord],
        fingerprint: str,
        entity_label: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> CycleReport:
        """
        Drive the transport and store from the shaped leaderboard.
        
        Returns:
            Report describing the decision taken and its outcome
        """
        now = now or self._clock()
        store = self.context.store
        transport = self.context.transport
        
        try:
            state = await store.load(self.tracked_entity_id)
        except PersistenceFailure as e:
            logger.error(f"Could not load sync state for {self.tracked_entity_id}: {e}")
            return self._report(CycleOutcome.PERSISTENCE_FAILED, fingerprint=fingerprint, detail=str(e))
        
        probe = None
        if state is not None and state.last_message_id is not None:
            probe = await transport.fetch_message(state.last_message_id)
            if probe is MessageProbe.TRANSIENT_ERROR:
                logger.warning(
                    f"Could not verify message {state.last_message_id}; "
                    f"leaving sync state for {self.tracked_entity_id} untouched"
                )
                return self._report(
                    CycleOutcome.TRANSPORT_UNAVAILABLE,
                    fingerprint=fingerprint,
                    message_id=state.last_message_id,
                    detail="message probe failed",
                )
        
        decision = decide_sync_state(state, fingerprint, probe)
        logger.info(f"Sync decision for {self.tracked_entity_id}: {decision.value}")
        
        if decision is SyncDecision.UNCHANGED_AND_LIVE:
            return self._report(
                CycleOutcome.SKIPPED,
                decision=decision,
                fingerprint=fingerprint,
                message_id=state.last_message_id,
            )
        
        embed = build_vote_embed(records, entity_label, now)
        
        try:
            if decision is SyncDecision.CHANGED_EDITABLE:
                edit = await transport.edit_message(state.last_message_id, embed)
                if edit is EditOutcome.EDITED:
                    logger.info(f"Updated existing message {state.last_message_id}")
                    updated = replace(state, last_fingerprint=fingerprint, updated_at=now)
                    return await self._persist(updated, decision, CycleOutcome.EDITED)
                
                # Deleted between the probe and the edit
                logger.info(f"Message {state.last_message_id} vanished before edit; reposting")
                decision = SyncDecision.CHANGED_NOT_EDITABLE
            
            message_id = await transport.send_message(embed)
        except TransportTransientFailure as e:
            logger.error(f"Transport failure for {self.tracked_entity_id}: {e}")
            return self._report(
                CycleOutcome.TRANSPORT_UNAVAILABLE,
                decision=decision,
                fingerprint=fingerprint,
                detail=str(e),
            )
        
        if state is None:
            logger.info(f"Sent first vote message {message_id}")
            created = SyncStateRecord(
                tracked_entity_id=self.tracked_entity_id,
                last_fingerprint=fingerprint,
                last_message_id=message_id,
                created_at=now,
                updated_at=now,
            )
            return await self._persist(created, decision, CycleOutcome.PUBLISHED)
        
        outcome = CycleOutcome.REPOSTED if state.last_message_id is not None else CycleOutcome.PUBLISHED
        logger.info(f"Previous message not available, sent new message {message_id}")
        
        if decision is SyncDecision.UNCHANGED_BUT_MISSING:
            updated = replace(state, last_message_id=message_id, updated_at=now)
        else:
            updated = replace(state, last_fingerprint=fingerprint, last_message_id=message_id, updated_at=now)
        if updated.created_at is None:
            updated = replace(updated, created_at=now)
        
        return await self._persist(updated, decision, outcome)
    
    async def _persist(
        self,
        record: SyncStateRecord,
        decision: SyncDecision,
        outcome: CycleOutcome
    ) -> CycleReport:
        try:
            await self.context.store.upsert(record)
        except PersistenceFailure as e:
            # The transport already acted; the next tick may post a duplicate
            logger.critical(
                f"Message {record.last_message_id} is live but sync state for "
                f"{self.tracked_entity_id} was not saved: {e}"
            )
            return self._report(
                CycleOutcome.PERSISTENCE_FAILED,
                decision=decision,
                fingerprint=record.last_fingerprint,
                message_id=record.last_message_id,
                detail=str(e),
            )
        
        return self._report(
            outcome,
            decision=decision,
            fingerprint=record.last_fingerprint,
            message_id=record.last_message_id,
        )
