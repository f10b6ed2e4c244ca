from .database import Database
from .models import Base, SyncState

__all__ = ['Database', 'Base', 'SyncState']
