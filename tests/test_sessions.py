"""Session store with a controllable clock."""
from app.core.clock import FixedClock
from app.models.user import User, UserRole
from app.services.sessions import InMemorySessionStore


def make_user():
    return User(id=7, username="jane", email="jane@example.com", role=UserRole.COLLABORATOR)


class TestInMemorySessionStore:
    def test_open_and_get(self):
        sessions = InMemorySessionStore(FixedClock())

        session = sessions.open(make_user(), ttl_minutes=30)

        found = sessions.get(session.token)
        assert found is not None
        assert found.user_id == 7
        assert found.role == UserRole.COLLABORATOR

    def test_tokens_are_unique(self):
        sessions = InMemorySessionStore(FixedClock())

        tokens = {sessions.open(make_user(), ttl_minutes=30).token for _ in range(20)}

        assert len(tokens) == 20

    def test_session_expires(self):
        clock = FixedClock()
        sessions = InMemorySessionStore(clock)
        session = sessions.open(make_user(), ttl_minutes=30)

        clock.advance(29 * 60)
        assert sessions.get(session.token) is not None

        clock.advance(60)
        assert sessions.get(session.token) is None
        assert len(sessions) == 0

    def test_explicit_expire(self):
        sessions = InMemorySessionStore(FixedClock())
        session = sessions.open(make_user(), ttl_minutes=30)

        sessions.expire(session.token)

        assert sessions.get(session.token) is None

    def test_purge_expired(self):
        clock = FixedClock()
        sessions = InMemorySessionStore(clock)
        sessions.open(make_user(), ttl_minutes=5)
        sessions.open(make_user(), ttl_minutes=5)
        keeper = sessions.open(make_user(), ttl_minutes=60)

        clock.advance(10 * 60)

        assert sessions.purge_expired() == 2
        assert sessions.get(keeper.token) is not None

    def test_unknown_token(self):
        assert InMemorySessionStore(FixedClock()).get("missing") is None
