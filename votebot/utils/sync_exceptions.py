"""
Custom exceptions for the vote synchronization cycle.

Fetch failures are returned as values (see ``votebot.data_models.votes``);
these exceptions cover the collaborators that cannot sensibly return one.
"""

class SyncException(Exception):
    """Base exception for synchronization errors."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class TransportTransientFailure(SyncException):
    """Raised when a transport call fails for a reason other than "not found"."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(f"Transport error during {operation}: {details}")
        self.operation = operation
        self.details = details

class PersistenceFailure(SyncException):
    """Raised when the sync state store is unreachable or rejects a write."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(f"Persistence error during {operation}: {details}")
        self.operation = operation
        self.details = details
