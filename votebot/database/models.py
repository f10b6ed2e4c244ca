from sqlalchemy import Column, Integer, String, DateTime, BigInteger
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class SyncState(Base):
    __tablename__ = 'sync_state'
    
    id = Column(Integer, primary_key=True)
    tracked_entity_id = Column(String(200), nullable=False, unique=True, index=True)
    
    # Change detection
    last_fingerprint = Column(String(64), nullable=False, default='')
    
    # Weak reference to the published Discord message; must be re-verified before use
    last_message_id = Column(BigInteger, nullable=True)
    
    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now())
    
    def __repr__(self):
        return (
            f"<SyncState(tracked_entity_id='{self.tracked_entity_id}', "
            f"fingerprint='{self.last_fingerprint}', message_id={self.last_message_id})>"
        )
