"""
Tests for the session-keyed conversation store: isolation, turn cap, LRU capacity, TTL.
"""

from docqa.core.session_store import Session, SessionStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestSession:
    def test_turns_returns_copy(self) -> None:
        session = Session("s1")
        session.append("q", "a")
        session.turns().clear()
        assert len(session) == 1

    def test_oldest_turns_dropped_at_cap(self) -> None:
        session = Session("s1", max_turns=3)
        for i in range(5):
            session.append(f"q{i}", f"a{i}")
        assert [t.question for t in session.turns()] == ["q2", "q3", "q4"]


class TestSessionStore:
    def test_sessions_are_isolated(self) -> None:
        store = SessionStore()
        store.get_or_create("alice").append("q", "a")
        assert len(store.get_or_create("bob")) == 0
        assert len(store.get_or_create("alice")) == 1

    def test_missing_id_creates_fresh_session(self) -> None:
        store = SessionStore()
        first = store.get_or_create(None)
        second = store.get_or_create("")
        assert first.session_id and second.session_id
        assert first.session_id != second.session_id

    def test_capacity_evicts_least_recently_used(self) -> None:
        clock = FakeClock()
        store = SessionStore(max_sessions=2, ttl_seconds=600.0, clock=clock)
        store.get_or_create("a")
        store.get_or_create("b")
        store.get_or_create("a")  # touch a, so b is least recently used
        store.get_or_create("c")
        assert store.get("a") is not None
        assert store.get("b") is None
        assert store.get("c") is not None
        assert len(store) == 2

    def test_idle_sessions_expire(self) -> None:
        clock = FakeClock()
        store = SessionStore(ttl_seconds=60.0, clock=clock)
        store.get_or_create("a").append("q", "a")
        clock.now += 30
        store.get_or_create("b")
        clock.now += 45
        assert store.get("a") is None
        assert store.get("b") is not None

    def test_expired_id_starts_empty(self) -> None:
        clock = FakeClock()
        store = SessionStore(ttl_seconds=60.0, clock=clock)
        store.get_or_create("a").append("q", "a")
        clock.now += 120
        assert len(store.get_or_create("a")) == 0

    def test_delete(self) -> None:
        store = SessionStore()
        store.get_or_create("a")
        assert store.delete("a") is True
        assert store.delete("a") is False
