"""
Tests for SQLite repository, background writer and error feed.

Run: python3 -m pytest tests/test_persistence.py -v
"""

import sys
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from netlog.errors import ErrorFeed
from netlog.models import LogEntry, NetSession, Participant, SessionStatus
from netlog.persistence import PersistenceError, PersistenceWorker, SqliteNetLogRepository
from netlog.store import NetLogStore

T0 = datetime(2025, 3, 2, 18, 0, 0, tzinfo=timezone.utc)
T1 = datetime(2025, 3, 2, 19, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(tmp_path):
    return SqliteNetLogRepository(tmp_path / "data" / "netlog.db")


def _session(session_id="s1", started_at=T0):
    return NetSession(id=session_id, name="Sunday Net", frequency="146.520",
                      net_control_op="W1AW", net_control_name="Hiram",
                      started_at=started_at)


class TestSqliteRepository:
    """Tests for SqliteNetLogRepository"""

    def test_creates_database(self, tmp_path):
        SqliteNetLogRepository(tmp_path / "nested" / "netlog.db")
        assert (tmp_path / "nested" / "netlog.db").exists()

    def test_save_and_load(self, repo):
        repo.save_session(_session())
        repo.save_participant("s1", Participant(id="p2", callsign="K1DEF", check_in_time=T0,
                                                check_in_number=2))
        repo.save_participant("s1", Participant(id="p1", callsign="W1AW", tactical_call="NET",
                                                check_in_time=T0, check_in_number=1))
        repo.save_log_entry("s1", LogEntry(id="e1", entry_number=1, time=T0,
                                           from_callsign="K1DEF", message='a "quote"'))

        loaded = repo.load_session("s1")

        assert loaded.session.name == "Sunday Net"
        assert loaded.session.started_at == T0
        assert [p.check_in_number for p in loaded.participants] == [1, 2]
        assert loaded.participants[0].tactical_call == "NET"
        assert loaded.log_entries[0].message == 'a "quote"'
        assert loaded.log_entries[0].to_callsign == "NC"

    def test_save_is_upsert(self, repo):
        session = _session()
        repo.save_session(session)
        session.status = SessionStatus.CLOSED
        session.ended_at = T1
        repo.save_session(session)

        repo.save_log_entry("s1", LogEntry(id="e1", entry_number=1, time=T0,
                                           from_callsign="W1ABC"))
        repo.save_log_entry("s1", LogEntry(id="e1", entry_number=1, time=T0,
                                           from_callsign="W1XYZ"))

        loaded = repo.load_session("s1")
        assert loaded.session.status == SessionStatus.CLOSED
        assert loaded.session.ended_at == T1
        assert len(loaded.log_entries) == 1
        assert loaded.log_entries[0].from_callsign == "W1XYZ"

    def test_sessions_are_separate(self, repo):
        repo.save_session(_session("s1"))
        repo.save_session(_session("s2", T1))
        repo.save_log_entry("s2", LogEntry(id="e1", entry_number=1, time=T1,
                                           from_callsign="W1ABC"))

        assert repo.load_session("s1").log_entries == []
        assert [s.id for s in repo.list_sessions()] == ["s2", "s1"]

    def test_not_a_database(self, tmp_path):
        db_file = tmp_path / "netlog.db"
        db_file.write_text("this is not sqlite " * 100)
        with pytest.raises(PersistenceError):
            SqliteNetLogRepository(db_file)

    def test_parent_is_a_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(PersistenceError):
            SqliteNetLogRepository(blocker / "netlog.db")

    def test_load_missing(self, repo):
        with pytest.raises(PersistenceError):
            repo.load_session("missing")


class TestPersistenceWorker:
    """Tests for PersistenceWorker"""

    def test_runs_jobs_in_order(self):
        worker = PersistenceWorker()
        seen = []
        for i in range(20):
            worker.submit("job", "Failed", seen.append, i)

        assert worker.flush(timeout=5)
        assert seen == list(range(20))
        assert worker.stats['completed'] == 20
        worker.stop()

    def test_failure_reported_not_raised(self):
        errors = []
        worker = PersistenceWorker(on_error=lambda op, msg: errors.append((op, msg)))

        def boom():
            raise PersistenceError("locked")

        worker.submit("save_session", "Failed to save session", boom)
        worker.submit("job", "Failed", lambda: None)
        assert worker.flush(timeout=5)

        assert errors == [("save_session", "Failed to save session: locked")]
        assert worker.stats == {'completed': 1, 'failed': 1}
        worker.stop()

    def test_flush_without_jobs(self):
        assert PersistenceWorker().flush(timeout=0.1) is True

    def test_flush_timeout(self):
        release = threading.Event()
        worker = PersistenceWorker()
        worker.submit("slow", "Failed", release.wait, 5)

        assert worker.flush(timeout=0.05) is False
        assert worker.pending == 1

        release.set()
        assert worker.flush(timeout=5) is True
        worker.stop()

    def test_stop_and_restart(self):
        worker = PersistenceWorker()
        seen = []
        worker.submit("job", "Failed", seen.append, 1)
        assert worker.stop() is True

        worker.submit("job", "Failed", seen.append, 2)
        worker.flush()
        assert seen == [1, 2]
        worker.stop()


class TestErrorFeed:
    """Tests for ErrorFeed"""

    def test_publish_and_latest(self):
        feed = ErrorFeed()
        feed.publish("a", "first")
        feed.publish("b", "second")
        assert feed.latest.message == "second"
        assert len(feed) == 2

    def test_drain(self):
        feed = ErrorFeed()
        feed.publish("a", "first")
        drained = feed.drain()
        assert [e.operation for e in drained] == ["a"]
        assert feed.latest is None

    def test_bounded_history(self):
        feed = ErrorFeed(max_history=3)
        for i in range(5):
            feed.publish("op", str(i))
        assert [e.message for e in feed.errors] == ["2", "3", "4"]

    def test_subscriber_errors_contained(self):
        feed = ErrorFeed()
        seen = []

        def bad(err):
            raise ValueError("ui gone")

        feed.subscribe(bad)
        feed.subscribe(seen.append)
        feed.publish("op", "msg")
        assert len(seen) == 1

        feed.unsubscribe(seen.append)
        feed.publish("op", "msg2")
        assert len(seen) == 1


class TestStoreWithSqlite:
    """End-to-end: store writes land in SQLite"""

    def test_store_round_trip(self, repo):
        store = NetLogStore(repository=repo)
        try:
            store.create_session("Sunday Net", "146.520", "W1AW", "Hiram")
            store.open_session()
            p = store.add_participant("W1ABC", tactical_call="BASE")
            store.add_log_entry("NC", "BASE", "go ahead")
            store.update_participant(p.id, "W1XYZ", "BASE")
            store.close_session()
            session_id = store.session.id
            expected_csv = store.export_to_csv()
            assert store.flush()
            assert store.error is None
        finally:
            store.close()

        reloaded = NetLogStore(repository=repo)
        try:
            assert reloaded.load_session(session_id)
            assert reloaded.session.status == SessionStatus.CLOSED
            assert [p.callsign for p in reloaded.participants] == ["W1AW", "W1XYZ"]
            assert reloaded.log_entries[0].from_callsign == "W1XYZ"
            assert reloaded.export_to_csv() == expected_csv
        finally:
            reloaded.close()
