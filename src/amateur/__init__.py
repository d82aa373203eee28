"""
Amateur radio helpers for the net log.

- Callsign directory lookup (FCC ULS, static rosters)
"""

from .callsign import (
    CallsignDirectory,
    CallsignInfo,
    CallsignLookupError,
    FccCallsignDirectory,
    StaticCallsignDirectory,
)

__all__ = [
    'CallsignDirectory',
    'CallsignInfo',
    'CallsignLookupError',
    'FccCallsignDirectory',
    'StaticCallsignDirectory',
]
