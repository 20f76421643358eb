"""Tests for the bounded LMS session cache."""

from core.moodle.session_cache import SessionCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestSessionCache:
    def test_get_returns_live_session(self):
        cache = SessionCache(max_entries=10, clock=FakeClock())
        cache.put("jane", "cookie-1", ttl=60)

        session = cache.get("jane")
        assert session.cookie == "cookie-1"
        assert session.username == "jane"

    def test_expired_session_is_not_returned(self):
        clock = FakeClock()
        cache = SessionCache(max_entries=10, clock=clock)
        cache.put("jane", "cookie-1", ttl=60)

        clock.now += 60
        assert cache.get("jane") is None

    def test_sweep_removes_expired_entries(self):
        clock = FakeClock()
        cache = SessionCache(max_entries=10, clock=clock)
        cache.put("jane", "a", ttl=10)
        cache.put("omar", "b", ttl=100)

        clock.now += 50
        cache.sweep()

        assert "jane" not in cache
        assert "omar" in cache

    def test_put_replaces_existing_session(self):
        cache = SessionCache(max_entries=10, clock=FakeClock())
        cache.put("jane", "old", ttl=60)
        cache.put("jane", "new", ttl=60)

        assert len(cache) == 1
        assert cache.get("jane").cookie == "new"

    def test_overflow_evicts_soonest_expiring(self):
        """101 distinct users leave exactly 100 entries, minus the oldest."""
        clock = FakeClock()
        cache = SessionCache(max_entries=100, clock=clock)
        for i in range(101):
            cache.put(f"user{i}", f"cookie{i}", ttl=1800)
            clock.now += 1

        assert len(cache) == 100
        assert "user0" not in cache
        assert "user1" in cache
        assert "user100" in cache

    def test_invalidate(self):
        cache = SessionCache(max_entries=10, clock=FakeClock())
        cache.put("jane", "a", ttl=60)
        cache.invalidate("jane")
        cache.invalidate("nobody")

        assert cache.get("jane") is None
