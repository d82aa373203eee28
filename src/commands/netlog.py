"""
Net log commands.

Operations over stored nets and the callsign cache, shared by the CLI and any other
front end.

Usage:
    from commands import netlog

    result = netlog.list_sessions(repo)
    result = netlog.show_session(repo, session_id)
    result = netlog.export_session(repo, session_id, output=Path("net.csv"))
    result = netlog.lookup_callsign(directory, "w1aw")
    result = netlog.callsign_cache(directory, clear=True)
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from amateur.callsign import CallsignDirectory, FccCallsignDirectory
from netlog.export import default_export_filename, format_duration
from netlog.models import NetSession, format_timestamp
from netlog.persistence import NetLogRepository, PersistenceError
from netlog.store import NetLogStore

from .base import CommandResult

logger = logging.getLogger(__name__)

# Seconds to wait for queued writes when a loaded store shuts down
DEFAULT_TIMEOUT = 5.0


def _load_store(repository: NetLogRepository, session_id: str,
                timeout: float = DEFAULT_TIMEOUT) -> NetLogStore:
    store = NetLogStore(repository=repository)
    if not store.load_session(session_id):
        store.close(timeout=timeout)
        raise PersistenceError(store.error or f"Session {session_id} not found")
    return store


def _net_duration(session: NetSession) -> str:
    if session.ended_at is None:
        return ""
    return format_duration((session.ended_at - session.started_at).total_seconds())


def list_sessions(repository: NetLogRepository) -> CommandResult:
    """
    List stored nets, newest first.

    Returns:
        CommandResult with 'sessions' (list of dicts) and 'count'
    """
    try:
        sessions = repository.list_sessions()
    except PersistenceError as e:
        logger.error(f"Failed to list sessions: {e}")
        return CommandResult.fail(f"Failed to list sessions: {e}")

    return CommandResult.ok(
        f"Found {len(sessions)} net(s)",
        data={'sessions': [s.to_dict() for s in sessions], 'count': len(sessions)}
    )


def show_session(repository: NetLogRepository, session_id: str,
                 timeout: float = DEFAULT_TIMEOUT) -> CommandResult:
    """
    Load one net with its stations and log.

    Args:
        repository: Where the net is stored
        session_id: Net to show
        timeout: Seconds to wait for the store to shut down

    Returns:
        CommandResult with 'session', 'participants', 'log_entries', 'stats'
        and 'duration' (HH:MM:SS, empty until the net is closed)
    """
    try:
        store = _load_store(repository, session_id, timeout)
    except PersistenceError as e:
        return CommandResult.fail(str(e))

    try:
        data = store.snapshot().to_dict()
        data['stats'] = store.get_stats()
        data['display'] = {p.callsign: store.display_callsign(p.callsign)
                           for p in store.participants}
        data['last_transmission'] = {
            p.callsign: format_timestamp(store.last_transmission(p.callsign))
            for p in store.participants
        }
        data['duration'] = _net_duration(store.session)
    finally:
        store.close(timeout=timeout)

    return CommandResult.ok(f"Loaded net '{data['session']['name']}'", data=data)


def render_csv(repository: NetLogRepository, session_id: str,
               timeout: float = DEFAULT_TIMEOUT) -> CommandResult:
    """
    ICS-309 CSV text of a stored net.

    Returns:
        CommandResult with 'csv' and the suggested 'filename'
    """
    try:
        store = _load_store(repository, session_id, timeout)
    except PersistenceError as e:
        return CommandResult.fail(str(e))

    try:
        data = {
            'csv': store.export_to_csv(),
            'filename': default_export_filename(store.session),
        }
    finally:
        store.close(timeout=timeout)

    return CommandResult.ok("Rendered CSV", data=data)


def export_session(repository: NetLogRepository, session_id: str,
                   output: Optional[Path] = None,
                   on_date: Optional[date] = None,
                   timeout: float = DEFAULT_TIMEOUT) -> CommandResult:
    """
    Write a stored net to an ICS-309 CSV file.

    Args:
        repository: Where the net is stored
        session_id: Net to export
        output: Target file or directory (default: current directory)
        on_date: Date used in the default file name (default: today)
        timeout: Seconds to wait for the store to shut down

    Returns:
        CommandResult with 'path' and 'bytes'; a warning when the net
        is not closed yet
    """
    try:
        store = _load_store(repository, session_id, timeout)
    except PersistenceError as e:
        return CommandResult.fail(str(e))

    try:
        csv_text = store.export_to_csv()
        filename = default_export_filename(store.session, on_date)
        closed = store.session.is_closed
    finally:
        store.close(timeout=timeout)

    path = Path(output) if output else Path.cwd() / filename
    if path.is_dir():
        path = path / filename

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(csv_text, encoding='utf-8')
    except OSError as e:
        logger.error(f"Failed to write export: {e}")
        return CommandResult.fail(f"Failed to write {path}: {e}")

    logger.info(f"Exported net {session_id} to {path}")
    data = {'path': str(path), 'bytes': len(csv_text.encode('utf-8'))}
    if not closed:
        return CommandResult.warn(f"Exported to {path} (net is still open)", data=data)
    return CommandResult.ok(f"Exported to {path}", data=data)


def lookup_callsign(directory: Optional[CallsignDirectory], callsign: str) -> CommandResult:
    """
    Look up a callsign in the directory.

    Returns:
        CommandResult with the callsign record in 'info'
    """
    if directory is None:
        return CommandResult.not_available(
            "Callsign lookup is disabled",
            fix_hint="Set lookup_enabled to true in netlog.json"
        )

    store = NetLogStore(directory=directory)
    info = store.lookup_callsign(callsign)
    if info is None:
        return CommandResult.fail(f"No record found for {callsign.strip().upper()}")

    return CommandResult.ok(f"Found {info.callsign}", data={'info': info.to_dict()})


def callsign_cache(directory: Optional[CallsignDirectory], clear: bool = False) -> CommandResult:
    """
    List (or clear) the callsigns cached by the FCC directory.

    Returns:
        CommandResult with 'callsigns' and 'count'
    """
    if not isinstance(directory, FccCallsignDirectory):
        return CommandResult.not_available(
            "No callsign cache in use",
            fix_hint="Set lookup_enabled and lookup_cache to true in netlog.json"
        )

    if clear:
        count = len(directory.cached_callsigns)
        directory.clear_cache()
        logger.info(f"Cleared {count} cached callsign(s)")
        return CommandResult.ok(f"Cleared {count} cached callsign(s)",
                                data={'callsigns': [], 'count': 0})

    callsigns = directory.cached_callsigns
    return CommandResult.ok(f"{len(callsigns)} cached callsign(s)",
                            data={'callsigns': callsigns, 'count': len(callsigns)})
