"""
Persistence for per-server synchronization state.

Maps the ``SyncState`` table to immutable ``SyncStateRecord`` values so the
reconciliation engine never holds a live ORM object across awaits.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from votebot.data_models.votes import SyncStateRecord
from votebot.database.database import Database
from votebot.database.models import SyncState
from votebot.utils.logger import setup_logger
from votebot.utils.sync_exceptions import PersistenceFailure

logger = setup_logger(__name__)


def _to_storage(moment: Optional[datetime]) -> Optional[datetime]:
    """Store timestamps as naive UTC."""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _from_storage(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)


class SyncStateStore:
    """Load and upsert SyncState rows keyed by tracked entity."""
    
    def __init__(self, database: Database):
        self.database = database
    
    async def load(self, tracked_entity_id: str) -> Optional[SyncStateRecord]:
        """
        Load the sync state for a tracked entity.
        
        Returns:
            The stored record, or None if this entity has never been synced
            
        Raises:
            PersistenceFailure: If the database cannot be read
        """
        try:
            async with self.database.get_session() as session:
                result = await session.execute(
                    select(SyncState).where(SyncState.tracked_entity_id == tracked_entity_id)
                )
                row = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceFailure("load", str(e)) from e
        
        if row is None:
            return None
        
        return SyncStateRecord(
            tracked_entity_id=row.tracked_entity_id,
            last_fingerprint=row.last_fingerprint or '',
            last_message_id=row.last_message_id,
            created_at=_from_storage(row.created_at),
            updated_at=_from_storage(row.updated_at),
        )
    
    async def upsert(self, record: SyncStateRecord) -> None:
        """
        Write every field of the record in one transaction.
        
        Raises:
            PersistenceFailure: If the write is rejected or the database is unreachable
        """
        try:
            async with self.database.transaction() as session:
                result = await session.execute(
                    select(SyncState).where(SyncState.tracked_entity_id == record.tracked_entity_id)
                )
                row = result.scalar_one_or_none()
                
                if row is None:
                    row = SyncState(tracked_entity_id=record.tracked_entity_id)
                    session.add(row)
                
                row.last_fingerprint = record.last_fingerprint
                row.last_message_id = record.last_message_id
                if record.created_at is not None:
                    row.created_at = _to_storage(record.created_at)
                if record.updated_at is not None:
                    row.updated_at = _to_storage(record.updated_at)
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceFailure("upsert", str(e)) from e
        
        logger.debug(
            f"Saved sync state for {record.tracked_entity_id}: "
            f"fingerprint={record.last_fingerprint}, message_id={record.last_message_id}"
        )
    
    async def ping(self) -> bool:
        return await self.database.ping()
