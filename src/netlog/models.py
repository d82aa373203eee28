"""
Net Log Data Model

Session, participant and log entry records for an ICS-309
communications log.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

# Default log entry destination ("Net Control")
NET_CONTROL_ALIAS = "NC"

# Tactical call given to the synthetic net control participant
NET_CONTROL_TACTICAL = "NET"

CHECK_IN_MESSAGE = "check in"


class SessionStatus(Enum):
    """Net session lifecycle. Only moves forward."""
    PENDING = "pending"
    ACTIVE = "active"
    CLOSED = "closed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def can_advance_to(self, other: 'SessionStatus') -> bool:
        """True if ``other`` is a later stage than this one"""
        return other.rank > self.rank


_STATUS_ORDER = [SessionStatus.PENDING, SessionStatus.ACTIVE, SessionStatus.CLOSED]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """
    Format a timestamp as ISO-8601 UTC with millisecond precision.

    Produces the ``2025-03-02T18:00:00.000Z`` form used in exports.
    Naive datetimes are taken to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp written by format_timestamp (or any ISO-8601 string)"""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_callsign(callsign: Optional[str]) -> str:
    """Trim and uppercase a callsign. No format validation."""
    return (callsign or "").strip().upper()


def clean_text(value: Optional[str]) -> str:
    return (value or "").strip()


@dataclass
class NetSession:
    """A net (radio communications session)"""

    id: str
    name: str
    frequency: str
    net_control_op: str
    net_control_name: str
    started_at: datetime
    status: SessionStatus = SessionStatus.PENDING
    ended_at: Optional[datetime] = None
    last_acknowledged_entry_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.status == SessionStatus.CLOSED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'frequency': self.frequency,
            'net_control_op': self.net_control_op,
            'net_control_name': self.net_control_name,
            'started_at': format_timestamp(self.started_at),
            'ended_at': format_timestamp(self.ended_at),
            'status': self.status.value,
            'last_acknowledged_entry_id': self.last_acknowledged_entry_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetSession':
        """Create from dictionary"""
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            frequency=data.get('frequency', ''),
            net_control_op=data.get('net_control_op', ''),
            net_control_name=data.get('net_control_name', ''),
            started_at=parse_timestamp(data.get('started_at')) or utc_now(),
            ended_at=parse_timestamp(data.get('ended_at')),
            status=SessionStatus(data.get('status', SessionStatus.PENDING.value)),
            last_acknowledged_entry_id=data.get('last_acknowledged_entry_id'),
        )


@dataclass
class Participant:
    """A station checked into the net"""

    id: str
    callsign: str
    check_in_time: datetime
    check_in_number: int
    tactical_call: str = ""
    name: str = ""
    location: str = ""

    @property
    def display_call(self) -> str:
        """Tactical call if assigned, else the callsign"""
        return self.tactical_call or self.callsign

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'callsign': self.callsign,
            'tactical_call': self.tactical_call,
            'name': self.name,
            'location': self.location,
            'check_in_time': format_timestamp(self.check_in_time),
            'check_in_number': self.check_in_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Participant':
        """Create from dictionary"""
        return cls(
            id=data['id'],
            callsign=data.get('callsign', ''),
            tactical_call=data.get('tactical_call') or '',
            name=data.get('name') or '',
            location=data.get('location') or '',
            check_in_time=parse_timestamp(data.get('check_in_time')) or utc_now(),
            check_in_number=int(data.get('check_in_number', 0)),
        )


@dataclass
class LogEntry:
    """One line of the communications log"""

    id: str
    entry_number: int
    time: datetime
    from_callsign: str
    to_callsign: str = NET_CONTROL_ALIAS
    message: str = ""

    def involves(self, callsign: str) -> bool:
        return callsign in (self.from_callsign, self.to_callsign)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'entry_number': self.entry_number,
            'time': format_timestamp(self.time),
            'from_callsign': self.from_callsign,
            'to_callsign': self.to_callsign,
            'message': self.message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogEntry':
        """Create from dictionary"""
        return cls(
            id=data['id'],
            entry_number=int(data.get('entry_number', 0)),
            time=parse_timestamp(data.get('time')) or utc_now(),
            from_callsign=data.get('from_callsign', ''),
            to_callsign=data.get('to_callsign') or NET_CONTROL_ALIAS,
            message=data.get('message') or '',
        )
