"""
ICS-309 Communications Log export.

The CSV layout mirrors the paper ICS-309 form and must stay byte-for-byte
stable; other tools import it.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from .models import LogEntry, NetSession, Participant, format_timestamp

CSV_TITLE = "ICS 309 Communications Log"
PARTICIPANT_HEADER = "Check-In #,Callsign,Tactical,Name,Location,Time"
LOG_HEADER = "Entry #,Time,From,To,Message"


@dataclass
class NetSnapshot:
    """
    Plain-data view of a net handed to exporters and report generators.

    Holds copies; changing it does not affect the store.
    """
    session: Optional[NetSession]
    participants: List[Participant] = field(default_factory=list)
    log_entries: List[LogEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'session': self.session.to_dict() if self.session else None,
            'participants': [p.to_dict() for p in self.participants],
            'log_entries': [e.to_dict() for e in self.log_entries],
        }


def quote_message(message: str) -> str:
    """Always quote, doubling embedded double quotes"""
    return '"' + message.replace('"', '""') + '"'


def export_to_csv(session: Optional[NetSession],
                  participants: Sequence[Participant],
                  entries: Sequence[LogEntry]) -> str:
    """
    Render a net as ICS-309 CSV text.

    Only the message column is quoted; every other field is written as is.
    Lines are joined with "\\n" and there is no trailing newline.

    Returns:
        CSV text, or "" when there is no session
    """
    if session is None:
        return ""

    lines = [
        CSV_TITLE,
        f"Net Name,{session.name}",
        f"Frequency,{session.frequency}",
        f"Net Control,{session.net_control_op} - {session.net_control_name}",
        f"Date/Time,{format_timestamp(session.started_at)}",
        "",
        "Participants",
        PARTICIPANT_HEADER,
    ]

    for p in participants:
        lines.append(
            f"{p.check_in_number},{p.callsign},{p.tactical_call or ''},"
            f"{p.name},{p.location},{format_timestamp(p.check_in_time)}"
        )

    lines.extend(["", "Communications Log", LOG_HEADER])

    for e in entries:
        lines.append(
            f"{e.entry_number},{format_timestamp(e.time)},{e.from_callsign},"
            f"{e.to_callsign},{quote_message(e.message)}"
        )

    return "\n".join(lines)


def default_export_filename(session: NetSession, on_date: Optional[date] = None,
                            extension: str = "csv") -> str:
    """
    Suggested file name for an export.

    CSV: ``Sunday_Net_2025-03-02.csv``; PDF: ``ICS309_Sunday_Net_2025-03-02.pdf``
    """
    on_date = on_date or date.today()
    base = re.sub(r"\s+", "_", session.name)
    prefix = "ICS309_" if extension.lower() == "pdf" else ""
    return f"{prefix}{base}_{on_date.isoformat()}.{extension}"


def format_duration(seconds: float) -> str:
    """Format elapsed seconds as HH:MM:SS"""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
