"""
Tests for net log data model.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from netlog.models import (
    LogEntry,
    NetSession,
    Participant,
    SessionStatus,
    format_timestamp,
    normalize_callsign,
    parse_timestamp,
)

T0 = datetime(2025, 3, 2, 18, 0, 0, 123456, tzinfo=timezone.utc)


class TestTimestamps:
    """Tests for timestamp formatting"""

    def test_format_millisecond_z(self):
        assert format_timestamp(T0) == "2025-03-02T18:00:00.123Z"

    def test_format_converts_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        value = datetime(2025, 3, 2, 13, 0, 0, tzinfo=eastern)
        assert format_timestamp(value) == "2025-03-02T18:00:00.000Z"

    def test_format_naive_is_utc(self):
        assert format_timestamp(datetime(2025, 3, 2, 18, 0)) == "2025-03-02T18:00:00.000Z"

    def test_format_none(self):
        assert format_timestamp(None) is None

    def test_parse(self):
        parsed = parse_timestamp("2025-03-02T18:00:00.123Z")
        assert parsed == datetime(2025, 3, 2, 18, 0, 0, 123000, tzinfo=timezone.utc)

    def test_parse_empty(self):
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None


class TestSessionStatus:
    """Tests for lifecycle ordering"""

    def test_forward_transitions(self):
        assert SessionStatus.PENDING.can_advance_to(SessionStatus.ACTIVE)
        assert SessionStatus.ACTIVE.can_advance_to(SessionStatus.CLOSED)
        assert SessionStatus.PENDING.can_advance_to(SessionStatus.CLOSED)

    def test_no_regression(self):
        assert not SessionStatus.CLOSED.can_advance_to(SessionStatus.ACTIVE)
        assert not SessionStatus.ACTIVE.can_advance_to(SessionStatus.PENDING)

    def test_same_status_is_not_a_transition(self):
        assert not SessionStatus.ACTIVE.can_advance_to(SessionStatus.ACTIVE)
        assert not SessionStatus.CLOSED.can_advance_to(SessionStatus.CLOSED)


class TestNormalizeCallsign:
    @pytest.mark.parametrize("raw,expected", [
        (" w1aw ", "W1AW"),
        ("K1abc/P", "K1ABC/P"),
        ("", ""),
        (None, ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_callsign(raw) == expected


class TestSerialization:
    """Tests for to_dict/from_dict"""

    def test_session_dict(self):
        session = NetSession(id="s1", name="Net", frequency="146.520",
                             net_control_op="W1AW", net_control_name="Hiram",
                             started_at=T0)
        data = session.to_dict()
        assert data['status'] == "pending"
        assert data['ended_at'] is None

        restored = NetSession.from_dict(data)
        assert restored.status == SessionStatus.PENDING
        assert restored.started_at == parse_timestamp(data['started_at'])

    def test_participant_defaults(self):
        p = Participant.from_dict({'id': 'p1', 'callsign': 'W1ABC', 'tactical_call': None,
                                   'check_in_time': '2025-03-02T18:00:00.000Z',
                                   'check_in_number': '3'})
        assert p.tactical_call == ""
        assert p.check_in_number == 3
        assert p.display_call == "W1ABC"

    def test_log_entry_default_destination(self):
        entry = LogEntry.from_dict({'id': 'e1', 'entry_number': 1,
                                    'time': '2025-03-02T18:00:00.000Z',
                                    'from_callsign': 'W1ABC', 'to_callsign': ''})
        assert entry.to_callsign == "NC"
        assert entry.involves("W1ABC")
        assert entry.involves("NC")
        assert not entry.involves("K9OTH")
