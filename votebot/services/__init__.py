"""
Services package for the vote tracker bot.
"""

from .health import HealthMonitor, HealthServer
from .scheduler import SyncScheduler
from .vote_sync import SyncContext, VoteSyncService

__all__ = ['HealthMonitor', 'HealthServer', 'SyncContext', 'SyncScheduler', 'VoteSyncService']
