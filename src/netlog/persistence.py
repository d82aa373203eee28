"""
Net Log Persistence

Repository boundary used by the store, a SQLite implementation, and the
background worker that applies writes without blocking the operator.

Usage:
    repo = SqliteNetLogRepository(Path("~/.config/netlog/netlog.db"))
    worker = PersistenceWorker(on_error=print)
    worker.submit("save_session", "Failed to save session", repo.save_session, session)
    worker.flush()
"""

import logging
import queue
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import LogEntry, NetSession, Participant, format_timestamp

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised by repositories when a read or write fails."""


@dataclass
class LoadedSession:
    """Everything stored for one session"""
    session: NetSession
    participants: List[Participant] = field(default_factory=list)
    log_entries: List[LogEntry] = field(default_factory=list)


class NetLogRepository(ABC):
    """Storage boundary for sessions, participants and log entries.

    Saves are upserts keyed by entity id.
    """

    @abstractmethod
    def save_session(self, session: NetSession) -> None:
        ...

    @abstractmethod
    def save_participant(self, session_id: str, participant: Participant) -> None:
        ...

    @abstractmethod
    def save_log_entry(self, session_id: str, entry: LogEntry) -> None:
        ...

    @abstractmethod
    def load_session(self, session_id: str) -> LoadedSession:
        """Load a session; raises PersistenceError if it does not exist"""

    @abstractmethod
    def list_sessions(self) -> List[NetSession]:
        """All stored sessions, newest first"""


class SqliteNetLogRepository(NetLogRepository):
    """SQLite-backed repository. Opens a short-lived connection per call."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create tables if needed"""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._create_tables()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(str(e)) from e

    def _create_tables(self) -> None:
        conn = self._connect()
        try:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    frequency TEXT NOT NULL,
                    net_control_op TEXT NOT NULL,
                    net_control_name TEXT NOT NULL,
                    started_at TEXT NOT NULL,
                    ended_at TEXT,
                    status TEXT NOT NULL,
                    last_acknowledged_entry_id TEXT
                )
            ''')

            conn.execute('''
                CREATE TABLE IF NOT EXISTS participants (
                    id TEXT PRIMARY KEY,
                    session_id TEXT NOT NULL,
                    callsign TEXT NOT NULL,
                    tactical_call TEXT,
                    name TEXT,
                    location TEXT,
                    check_in_time TEXT NOT NULL,
                    check_in_number INTEGER NOT NULL
                )
            ''')

            conn.execute('''
                CREATE TABLE IF NOT EXISTS log_entries (
                    id TEXT PRIMARY KEY,
                    session_id TEXT NOT NULL,
                    entry_number INTEGER NOT NULL,
                    time TEXT NOT NULL,
                    from_callsign TEXT NOT NULL,
                    to_callsign TEXT NOT NULL,
                    message TEXT
                )
            ''')

            conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_participants_session
                ON participants(session_id)
            ''')

            conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_log_entries_session
                ON log_entries(session_id)
            ''')

            conn.commit()
        finally:
            conn.close()

    def _execute(self, sql: str, params: Tuple[Any, ...]) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute(sql, params)
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

    def save_session(self, session: NetSession) -> None:
        self._execute('''
            INSERT OR REPLACE INTO sessions (id, name, frequency, net_control_op,
                net_control_name, started_at, ended_at, status, last_acknowledged_entry_id)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            session.id, session.name, session.frequency, session.net_control_op,
            session.net_control_name, format_timestamp(session.started_at),
            format_timestamp(session.ended_at), session.status.value,
            session.last_acknowledged_entry_id,
        ))

    def save_participant(self, session_id: str, participant: Participant) -> None:
        self._execute('''
            INSERT OR REPLACE INTO participants (id, session_id, callsign, tactical_call,
                name, location, check_in_time, check_in_number)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            participant.id, session_id, participant.callsign, participant.tactical_call,
            participant.name, participant.location,
            format_timestamp(participant.check_in_time), participant.check_in_number,
        ))

    def save_log_entry(self, session_id: str, entry: LogEntry) -> None:
        self._execute('''
            INSERT OR REPLACE INTO log_entries (id, session_id, entry_number, time,
                from_callsign, to_callsign, message)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (
            entry.id, session_id, entry.entry_number, format_timestamp(entry.time),
            entry.from_callsign, entry.to_callsign, entry.message,
        ))

    def load_session(self, session_id: str) -> LoadedSession:
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT * FROM sessions WHERE id = ?", (session_id,)
                ).fetchone()
                if row is None:
                    raise PersistenceError(f"Session {session_id} not found")

                participant_rows = conn.execute(
                    "SELECT * FROM participants WHERE session_id = ? ORDER BY check_in_number",
                    (session_id,)
                ).fetchall()
                entry_rows = conn.execute(
                    "SELECT * FROM log_entries WHERE session_id = ? ORDER BY entry_number",
                    (session_id,)
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

        return LoadedSession(
            session=NetSession.from_dict(dict(row)),
            participants=[Participant.from_dict(dict(r)) for r in participant_rows],
            log_entries=[LogEntry.from_dict(dict(r)) for r in entry_rows],
        )

    def list_sessions(self) -> List[NetSession]:
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT * FROM sessions ORDER BY started_at DESC"
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

        return [NetSession.from_dict(dict(r)) for r in rows]


# Sentinel used to stop the worker thread
_STOP = object()


@dataclass
class _WriteJob:
    operation: str
    error_prefix: str
    func: Callable[..., Any]
    args: Tuple[Any, ...]


class PersistenceWorker:
    """
    Applies repository writes on a background thread, in submission order.

    Writes are fire-and-forget: submit() returns immediately and a failing
    write is reported through ``on_error(operation, message)`` instead of
    being raised. Nothing is retried.
    """

    def __init__(self, on_error: Optional[Callable[[str, str], None]] = None,
                 name: str = "netlog-persistence"):
        self.on_error = on_error
        self.name = name
        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._pending = 0
        self.stats: Dict[str, int] = {'completed': 0, 'failed': 0}

    def _ensure_started(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()
            logger.debug(f"Started persistence worker: {self.name}")

    def submit(self, operation: str, error_prefix: str,
               func: Callable[..., Any], *args: Any) -> None:
        """
        Queue a write.

        Args:
            operation: Short operation name (e.g. "save_session")
            error_prefix: Human-readable failure prefix, e.g. "Failed to save session"
            func: Repository method to call
            *args: Arguments for func
        """
        with self._lock:
            self._pending += 1
            self._ensure_started()
        self._queue.put(_WriteJob(operation, error_prefix, func, args))

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            if job is _STOP:
                break
            try:
                job.func(*job.args)
                with self._lock:
                    self.stats['completed'] += 1
            except Exception as e:
                with self._lock:
                    self.stats['failed'] += 1
                message = f"{job.error_prefix}: {e}"
                logger.error(message)
                if self.on_error:
                    try:
                        self.on_error(job.operation, message)
                    except Exception as cb_err:
                        logger.warning(f"Persistence error callback failed: {cb_err}")
            finally:
                with self._lock:
                    self._pending -= 1
                    if self._pending == 0:
                        self._idle.notify_all()

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    def flush(self, timeout: Optional[float] = 5.0) -> bool:
        """
        Wait until every queued write has been attempted.

        Returns:
            True if the queue drained, False on timeout
        """
        with self._lock:
            return self._idle.wait_for(lambda: self._pending == 0, timeout=timeout)

    def stop(self, timeout: float = 5.0) -> bool:
        """Drain outstanding writes and stop the thread"""
        thread = self._thread
        if thread is None or not thread.is_alive():
            return True

        self._queue.put(_STOP)
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(f"Persistence worker {self.name} did not stop within {timeout}s")
            return False

        self._thread = None
        logger.debug(f"Persistence worker {self.name} stopped")
        return True
