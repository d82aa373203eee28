"""
NetLog Commands Layer

UI-independent operations over stored nets.

Usage:
    from commands import netlog

    result = netlog.list_sessions(repo)
    result = netlog.export_session(repo, session_id)
"""

from . import netlog
from .base import CommandResult, ResultStatus

__all__ = [
    'netlog',
    'CommandResult',
    'ResultStatus',
]
