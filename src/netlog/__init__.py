"""
NetLog - net control operator's log

Tracks a radio net (session), the stations checked in and the
communications log, and exports an ICS-309 Communications Log.
"""

from .models import (
    NET_CONTROL_ALIAS,
    LogEntry,
    NetSession,
    Participant,
    SessionStatus,
    normalize_callsign,
)
from .errors import ErrorFeed, StoreError
from .export import NetSnapshot, export_to_csv, default_export_filename, format_duration
from .identity import RenameResult, propagate_rename, display_callsign
from .persistence import (
    LoadedSession,
    NetLogRepository,
    PersistenceError,
    PersistenceWorker,
    SqliteNetLogRepository,
)
from .store import NetLogStore

__all__ = [
    'NET_CONTROL_ALIAS',
    'LogEntry',
    'NetSession',
    'Participant',
    'SessionStatus',
    'normalize_callsign',
    'ErrorFeed',
    'StoreError',
    'NetSnapshot',
    'export_to_csv',
    'default_export_filename',
    'format_duration',
    'RenameResult',
    'propagate_rename',
    'display_callsign',
    'LoadedSession',
    'NetLogRepository',
    'PersistenceError',
    'PersistenceWorker',
    'SqliteNetLogRepository',
    'NetLogStore',
]
