"""
Station identity helpers.

Log entries record stations by the label in use at the time (callsign,
tactical call or "NC"), not by participant id. When a participant's
identity is corrected, the log is rewritten so it keeps matching the
station's current identity.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence

from .models import LogEntry, Participant


@dataclass
class RenameResult:
    """Outcome of propagate_rename"""
    entries: List[LogEntry]
    changed: List[LogEntry] = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return len(self.changed)


def remap_identity(value: str, old_callsign: str, old_tactical: str,
                   new_callsign: str, fallback: str) -> str:
    """
    Map one from/to field onto a station's new identity.

    The old callsign always maps to the new callsign. The old tactical
    call (if there was one) maps to the new tactical call, or to the new
    callsign when the tactical call was cleared.
    """
    if value == old_callsign:
        return new_callsign
    if old_tactical and value == old_tactical:
        return fallback
    return value


def propagate_rename(entries: Sequence[LogEntry], old_callsign: str,
                     old_tactical: str, new_callsign: str,
                     new_tactical: str) -> RenameResult:
    """
    Rewrite log entry identities after a participant rename.

    Does not modify ``entries``. Entries that do not change are returned
    as the same objects; rewritten entries are new copies and are also
    listed in ``changed`` (in log order).

    Args:
        entries: Current log entries
        old_callsign: Callsign before the update
        old_tactical: Tactical call before the update ("" if none)
        new_callsign: Callsign after the update
        new_tactical: Tactical call after the update ("" if none)

    Returns:
        RenameResult with the full new entry list and the changed subset
    """
    fallback = new_tactical or new_callsign
    result = RenameResult(entries=[])

    for entry in entries:
        from_call = remap_identity(entry.from_callsign, old_callsign, old_tactical,
                                   new_callsign, fallback)
        to_call = remap_identity(entry.to_callsign, old_callsign, old_tactical,
                                 new_callsign, fallback)

        if from_call == entry.from_callsign and to_call == entry.to_callsign:
            result.entries.append(entry)
            continue

        updated = replace(entry, from_callsign=from_call, to_callsign=to_call)
        result.entries.append(updated)
        result.changed.append(updated)

    return result


def find_participant(callsign: str, participants: Iterable[Participant]) -> Optional[Participant]:
    for participant in participants:
        if participant.callsign == callsign:
            return participant
    return None


def display_callsign(callsign: str, participants: Iterable[Participant]) -> str:
    """Label a callsign as "TACTICAL (CALLSIGN)" when it has a tactical call"""
    participant = find_participant(callsign, participants)
    if participant and participant.tactical_call:
        return f"{participant.tactical_call} ({callsign})"
    return callsign
