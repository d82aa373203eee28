"""
Net Log Store

Single in-memory authority for the current net: the session, the stations
checked in and the communications log. Every change goes through the store;
persistence happens afterwards on a background worker and never blocks or
rolls back the in-memory state.

Usage:
    store = NetLogStore(repository=SqliteNetLogRepository(db_path))
    store.create_session("Sunday Net", "146.520", "W1AW", "Hiram")
    store.open_session()
    store.add_participant("k1abc", name="Pat", location="Hartford")
    store.add_log_entry("K1ABC", message="traffic for EOC")
    store.close_session()
    csv_text = store.export_to_csv()
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional

from amateur.callsign import CallsignDirectory, CallsignInfo

from .errors import ErrorFeed
from .export import NetSnapshot, export_to_csv
from .identity import display_callsign, propagate_rename
from .models import (
    CHECK_IN_MESSAGE,
    NET_CONTROL_ALIAS,
    NET_CONTROL_TACTICAL,
    LogEntry,
    NetSession,
    Participant,
    SessionStatus,
    clean_text,
    normalize_callsign,
    utc_now,
)
from .persistence import NetLogRepository, PersistenceWorker

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class NetLogStore:
    """
    State manager for one net at a time.

    Lifecycle: create_session() -> open_session() -> ... -> close_session(),
    then reset() before the next net. Invalid requests (blank callsign,
    changes to a closed net, ...) are ignored and return None/False.

    Persistence failures are published on ``errors`` (an ErrorFeed); the
    latest message is also available as ``error``.
    """

    def __init__(self, repository: Optional[NetLogRepository] = None,
                 directory: Optional[CallsignDirectory] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 id_factory: Optional[Callable[[], str]] = None,
                 worker: Optional[PersistenceWorker] = None):
        self.repository = repository
        self.directory = directory
        self._clock = clock or utc_now
        self._new_id = id_factory or _new_id
        self.errors = ErrorFeed()

        self._worker: Optional[PersistenceWorker] = None
        if repository is not None:
            self._worker = worker or PersistenceWorker()
            self._worker.on_error = self.errors.publish

        self._callbacks: List[Callable[[str, 'NetLogStore'], None]] = []
        self._clear_state()

    def _clear_state(self) -> None:
        self.session: Optional[NetSession] = None
        self.participants: List[Participant] = []
        self.log_entries: List[LogEntry] = []
        self.is_loading = False
        self._start_anchor: Optional[datetime] = None
        self._frozen_elapsed: Optional[float] = None
        self._check_in_counter = 0
        self._entry_counter = 0

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def register_callback(self, callback: Callable[[str, 'NetLogStore'], None]) -> None:
        """Register ``callback(event, store)``, called after each change"""
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[str, 'NetLogStore'], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self, event: str) -> None:
        for callback in self._callbacks:
            try:
                callback(event, self)
            except Exception as e:
                logger.error(f"Store callback error: {e}")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist_session(self, error_prefix: str = "Failed to save session") -> None:
        if self._worker and self.session:
            self._worker.submit("save_session", error_prefix,
                                self.repository.save_session, self.session)

    def _persist_participant(self, participant: Participant,
                             error_prefix: str = "Failed to save participant") -> None:
        if self._worker and self.session:
            self._worker.submit("save_participant", error_prefix,
                                self.repository.save_participant, self.session.id, participant)

    def _persist_log_entry(self, entry: LogEntry) -> None:
        if self._worker and self.session:
            self._worker.submit("save_log_entry", "Failed to save log entry",
                                self.repository.save_log_entry, self.session.id, entry)

    def flush(self, timeout: Optional[float] = 5.0) -> bool:
        """Wait for queued writes. True if nothing is left pending."""
        if self._worker is None:
            return True
        return self._worker.flush(timeout)

    def close(self, timeout: float = 5.0) -> bool:
        """Drain queued writes and stop the background worker"""
        if self._worker is None:
            return True
        return self._worker.stop(timeout)

    @property
    def error(self) -> Optional[str]:
        """Latest error message, if any"""
        latest = self.errors.latest
        return latest.message if latest else None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _is_writable(self) -> bool:
        return self.session is not None and not self.session.is_closed

    def create_session(self, name: str, frequency: str, net_control_op: str,
                       net_control_name: str) -> Optional[NetSession]:
        """
        Start a new net in the pending state.

        Replaces any current net in memory. Net control is checked in
        automatically as station #1 with tactical call "NET".

        Args:
            name: Net name
            frequency: Operating frequency (free text)
            net_control_op: Net control callsign
            net_control_name: Net control operator name

        Returns:
            The new session, or None if a field is blank
        """
        name = clean_text(name)
        frequency = clean_text(frequency)
        net_control_op = normalize_callsign(net_control_op)
        net_control_name = clean_text(net_control_name)

        if not (name and frequency and net_control_op and net_control_name):
            logger.debug("create_session rejected: all fields are required")
            return None

        now = self._clock()
        self._clear_state()
        self.errors.clear()

        self.session = NetSession(
            id=self._new_id(),
            name=name,
            frequency=frequency,
            net_control_op=net_control_op,
            net_control_name=net_control_name,
            started_at=now,
            status=SessionStatus.PENDING,
        )

        self._check_in_counter = 1
        net_control = Participant(
            id=self._new_id(),
            callsign=net_control_op,
            tactical_call=NET_CONTROL_TACTICAL,
            name=net_control_name,
            location="",
            check_in_time=now,
            check_in_number=self._check_in_counter,
        )
        self.participants = [net_control]

        logger.info(f"Created net '{name}' on {frequency} (NCS {net_control_op})")
        self._persist_session()
        self._persist_participant(net_control, "Failed to save net control participant")
        self._notify("session_created")
        return self.session

    def open_session(self) -> bool:
        """Open a pending net for traffic. Ignored in any other status."""
        if self.session is None or not self.session.status.can_advance_to(SessionStatus.ACTIVE):
            return False

        self.session = replace(self.session, status=SessionStatus.ACTIVE, ended_at=None)
        self._start_anchor = self._clock()
        self._frozen_elapsed = None

        logger.info(f"Opened net '{self.session.name}'")
        self._persist_session("Failed to open session")
        self._notify("session_opened")
        return True

    def close_session(self) -> bool:
        """
        Close the net.

        The end time is recorded on the first close only; closing again
        just saves the session again. The elapsed timer stops.
        """
        if self.session is None:
            return False

        if not self.session.status.can_advance_to(SessionStatus.CLOSED):
            logger.debug(f"Net '{self.session.name}' already closed")
        else:
            now = self._clock()
            if self._start_anchor is not None:
                self._frozen_elapsed = max(0.0, (now - self._start_anchor).total_seconds())
            self._start_anchor = None
            self.session = replace(self.session, status=SessionStatus.CLOSED, ended_at=now)
            logger.info(f"Closed net '{self.session.name}'")

        self._persist_session("Failed to close session")
        self._notify("session_closed")
        return True

    def load_session(self, session_id: str) -> bool:
        """
        Replace the in-memory net with one from the repository.

        Queued writes are flushed first so the load sees them. On failure
        the current state is kept and the error is published.
        """
        if self.repository is None:
            self.errors.publish("load_session", "Failed to load session: no repository configured")
            return False

        self.is_loading = True
        self.flush()
        try:
            loaded = self.repository.load_session(session_id)
        except Exception as e:
            message = f"Failed to load session: {e}"
            logger.error(message)
            self.errors.publish("load_session", message)
            return False
        finally:
            self.is_loading = False

        self._clear_state()
        self.errors.clear()
        self.session = loaded.session
        self.participants = list(loaded.participants)
        self.log_entries = list(loaded.log_entries)
        self._check_in_counter = max((p.check_in_number for p in self.participants), default=0)
        self._entry_counter = max((e.entry_number for e in self.log_entries), default=0)
        if self.session.is_active:
            self._start_anchor = self.session.started_at

        logger.info(f"Loaded net '{self.session.name}' ({len(self.participants)} stations, "
                    f"{len(self.log_entries)} log entries)")
        self._notify("session_loaded")
        return True

    def reset(self) -> None:
        """Forget everything in memory. Stored data is not touched."""
        self._clear_state()
        self.errors.clear()
        self._notify("reset")

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    def add_participant(self, callsign: str, tactical_call: str = "", name: str = "",
                        location: str = "") -> Optional[Participant]:
        """
        Check a station into the net.

        Check-in numbers count up from the last one issued and are never
        reused. While the net is active the check-in is also logged as a
        transmission to net control.

        Returns:
            The new participant, or None if rejected
        """
        callsign = normalize_callsign(callsign)
        if not callsign or not self._is_writable():
            logger.debug(f"add_participant rejected for '{callsign}'")
            return None

        self._check_in_counter += 1
        participant = Participant(
            id=self._new_id(),
            callsign=callsign,
            tactical_call=clean_text(tactical_call),
            name=clean_text(name),
            location=clean_text(location),
            check_in_time=self._clock(),
            check_in_number=self._check_in_counter,
        )
        self.participants = self.participants + [participant]

        logger.info(f"Check-in #{participant.check_in_number}: {callsign}")
        self._persist_participant(participant)
        self._notify("participant_added")

        if self.session.is_active:
            self.add_log_entry(participant.callsign, NET_CONTROL_ALIAS, CHECK_IN_MESSAGE)

        return participant

    def remove_participant(self, participant_id: str) -> bool:
        """
        Drop a station from the list (in memory only).

        Numbering of other stations and the log are left as they are.
        """
        if not self._is_writable():
            return False

        remaining = [p for p in self.participants if p.id != participant_id]
        if len(remaining) == len(self.participants):
            return False

        self.participants = remaining
        self._notify("participant_removed")
        return True

    def update_participant(self, participant_id: str, callsign: str, tactical_call: str = "",
                           name: str = "", location: str = "") -> Optional[Participant]:
        """
        Correct a station's identity and details.

        Log entries that name the station by its old callsign or tactical
        call are rewritten to the new identity; only those entries are
        saved again.

        Returns:
            The updated participant, or None if rejected
        """
        if not self._is_writable():
            return None

        participant = self.get_participant(participant_id)
        new_callsign = normalize_callsign(callsign)
        if participant is None or not new_callsign:
            return None

        updated = replace(
            participant,
            callsign=new_callsign,
            tactical_call=clean_text(tactical_call),
            name=clean_text(name),
            location=clean_text(location),
        )

        rename = propagate_rename(
            self.log_entries,
            old_callsign=participant.callsign,
            old_tactical=participant.tactical_call,
            new_callsign=updated.callsign,
            new_tactical=updated.tactical_call,
        )

        self.participants = [updated if p.id == participant_id else p for p in self.participants]
        self.log_entries = rename.entries

        if rename.changed:
            logger.info(f"Renamed {participant.callsign} -> {updated.callsign}, "
                        f"rewrote {rename.changed_count} log entries")

        self._persist_participant(updated)
        for entry in rename.changed:
            self._persist_log_entry(entry)

        self._notify("participant_updated")
        return updated

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def display_callsign(self, callsign: str) -> str:
        """Label for a callsign, e.g. BASE (W1ABC) when it has a tactical call"""
        return display_callsign(callsign, self.participants)

    def last_transmission(self, callsign: str) -> Optional[datetime]:
        """Time of the latest log entry from or to ``callsign``"""
        for entry in reversed(self.log_entries):
            if entry.involves(callsign):
                return entry.time
        return None

    def callsign_options(self) -> List[str]:
        """Values offered for log entry from/to fields"""
        options = [NET_CONTROL_ALIAS]
        for p in self.participants:
            options.append(p.callsign)
            if p.tactical_call:
                options.append(p.tactical_call)
        return options

    # ------------------------------------------------------------------
    # Communications log
    # ------------------------------------------------------------------

    def add_log_entry(self, from_callsign: str, to_callsign: str = "",
                      message: str = "") -> Optional[LogEntry]:
        """
        Append a line to the communications log.

        Args:
            from_callsign: Sending station (required)
            to_callsign: Receiving station, "NC" when blank
            message: Traffic text, may be empty

        Returns:
            The new entry, or None if rejected
        """
        from_callsign = clean_text(from_callsign)
        if not from_callsign or not self._is_writable():
            logger.debug("add_log_entry rejected")
            return None

        self._entry_counter += 1
        entry = LogEntry(
            id=self._new_id(),
            entry_number=self._entry_counter,
            time=self._clock(),
            from_callsign=from_callsign,
            to_callsign=clean_text(to_callsign) or NET_CONTROL_ALIAS,
            message=clean_text(message),
        )
        self.log_entries = self.log_entries + [entry]

        self._persist_log_entry(entry)
        self._notify("log_entry_added")
        return entry

    def set_last_acknowledged_entry(self, entry_id: str) -> bool:
        """Move the operator's review marker. The id is not checked."""
        if self.session is None:
            return False

        self.session = replace(self.session, last_acknowledged_entry_id=entry_id)
        self._persist_session()
        self._notify("entry_acknowledged")
        return True

    def unacknowledged_entries(self) -> List[LogEntry]:
        """Entries after the review marker (all of them if there is none)"""
        marker = self.session.last_acknowledged_entry_id if self.session else None
        if not marker:
            return list(self.log_entries)
        for index, entry in enumerate(self.log_entries):
            if entry.id == marker:
                return self.log_entries[index + 1:]
        return list(self.log_entries)

    # ------------------------------------------------------------------
    # Lookup, timer, export
    # ------------------------------------------------------------------

    def lookup_callsign(self, callsign: str) -> Optional[CallsignInfo]:
        """Best-effort directory lookup; never raises"""
        callsign = normalize_callsign(callsign)
        if not callsign or self.directory is None:
            return None
        try:
            return self.directory.lookup(callsign)
        except Exception as e:
            logger.warning(f"Callsign lookup failed for {callsign}: {e}")
            return None

    def get_elapsed_time(self) -> float:
        """
        Seconds since the net was opened.

        0 before the net opens; frozen at the close instant afterwards.
        """
        if self._start_anchor is not None:
            return max(0.0, (self._clock() - self._start_anchor).total_seconds())
        if self._frozen_elapsed is not None:
            return self._frozen_elapsed
        return 0.0

    def snapshot(self) -> NetSnapshot:
        """Copy of the current state for renderers and exporters"""
        return NetSnapshot(
            session=replace(self.session) if self.session else None,
            participants=[replace(p) for p in self.participants],
            log_entries=[replace(e) for e in self.log_entries],
        )

    def export_to_csv(self) -> str:
        """ICS-309 CSV for the current net ("" if there is none)"""
        return export_to_csv(self.session, self.participants, self.log_entries)

    def get_stats(self) -> Dict[str, int]:
        return {
            'participants': len(self.participants),
            'log_entries': len(self.log_entries),
            'unacknowledged': len(self.unacknowledged_entries()),
            'errors': len(self.errors),
        }
