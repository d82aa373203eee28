"""
Tests for rename propagation over the communications log.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from netlog.identity import display_callsign, propagate_rename, remap_identity
from netlog.models import LogEntry, Participant

T0 = datetime(2025, 3, 2, 18, 0, 0, tzinfo=timezone.utc)


def _entry(n, frm, to):
    return LogEntry(id=f"e{n}", entry_number=n, time=T0, from_callsign=frm,
                    to_callsign=to, message="")


class TestRemapIdentity:
    """Tests for remap_identity"""

    def test_callsign_match(self):
        assert remap_identity("W1ABC", "W1ABC", "BASE", "W1XYZ", "BASE") == "W1XYZ"

    def test_tactical_match_uses_fallback(self):
        assert remap_identity("BASE", "W1ABC", "BASE", "W1XYZ", "EOC") == "EOC"

    def test_no_old_tactical(self):
        """An empty old tactical call never matches an empty field"""
        assert remap_identity("", "W1ABC", "", "W1XYZ", "W1XYZ") == ""

    def test_other_value(self):
        assert remap_identity("NC", "W1ABC", "BASE", "W1XYZ", "BASE") == "NC"


class TestPropagateRename:
    """Tests for propagate_rename"""

    def test_example_rename(self):
        """Callsign rename with unchanged tactical call"""
        entries = [
            _entry(1, "W1ABC", "NC"),
            _entry(2, "NC", "BASE"),
            _entry(3, "BASE", "W1ABC"),
            _entry(4, "K9OTH", "NC"),
        ]

        result = propagate_rename(entries, "W1ABC", "BASE", "W1XYZ", "BASE")

        assert [(e.from_callsign, e.to_callsign) for e in result.entries] == [
            ("W1XYZ", "NC"),
            ("NC", "BASE"),
            ("BASE", "W1XYZ"),
            ("K9OTH", "NC"),
        ]
        assert [e.entry_number for e in result.changed] == [1, 3]
        assert result.changed_count == 2

    def test_input_not_modified(self):
        entries = [_entry(1, "W1ABC", "NC")]
        result = propagate_rename(entries, "W1ABC", "", "W1XYZ", "")

        assert entries[0].from_callsign == "W1ABC"
        assert result.entries[0] is not entries[0]

    def test_unchanged_entries_same_objects(self):
        entries = [_entry(1, "K9OTH", "NC"), _entry(2, "NC", "K9OTH")]
        result = propagate_rename(entries, "W1ABC", "BASE", "W1XYZ", "BASE")

        assert all(a is b for a, b in zip(result.entries, entries))
        assert result.changed == []

    def test_tactical_cleared_falls_back_to_callsign(self):
        entries = [_entry(1, "BASE", "NC")]
        result = propagate_rename(entries, "W1ABC", "BASE", "W1ABC", "")
        assert result.entries[0].from_callsign == "W1ABC"

    def test_fields_remapped_independently(self):
        entries = [_entry(1, "W1ABC", "BASE")]
        result = propagate_rename(entries, "W1ABC", "BASE", "W1XYZ", "EOC")
        assert (result.entries[0].from_callsign, result.entries[0].to_callsign) == ("W1XYZ", "EOC")

    def test_other_fields_preserved(self):
        entry = LogEntry(id="e1", entry_number=7, time=T0, from_callsign="W1ABC",
                         to_callsign="NC", message="traffic")
        updated = propagate_rename([entry], "W1ABC", "", "W1XYZ", "").entries[0]
        assert (updated.id, updated.entry_number, updated.time, updated.message) == \
            ("e1", 7, T0, "traffic")


class TestDisplayCallsign:
    """Tests for display_callsign"""

    def test_with_tactical(self):
        participants = [Participant(id="p1", callsign="W1ABC", tactical_call="BASE",
                                    check_in_time=T0, check_in_number=1)]
        assert display_callsign("W1ABC", participants) == "BASE (W1ABC)"

    def test_without_tactical(self):
        participants = [Participant(id="p1", callsign="W1ABC",
                                    check_in_time=T0, check_in_number=1)]
        assert display_callsign("W1ABC", participants) == "W1ABC"

    def test_unknown(self):
        assert display_callsign("NC", []) == "NC"
