"""Unit tests for the TTL memo behind the pending-count badge."""
from src.application.services.ttl_memo import TTLMemo


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestTTLMemo:
    def test_returns_value_while_fresh(self) -> None:
        clock = FakeClock()
        memo = TTLMemo(ttl_seconds=30, clock=clock)
        memo.set("k", 5)

        clock.now += 29
        assert memo.get("k") == 5

    def test_expires_after_ttl(self) -> None:
        clock = FakeClock()
        memo = TTLMemo(ttl_seconds=30, clock=clock)
        memo.set("k", 5)

        clock.now += 30
        assert memo.get("k") is None
        assert not memo.has("k")

    def test_invalidate_single_key(self) -> None:
        memo = TTLMemo(ttl_seconds=30, clock=FakeClock())
        memo.set("a", 1)
        memo.set("b", 2)

        memo.invalidate("a")

        assert not memo.has("a")
        assert memo.get("b") == 2

    def test_invalidate_all(self) -> None:
        memo = TTLMemo(ttl_seconds=30, clock=FakeClock())
        memo.set("a", 1)
        memo.set("b", 2)

        memo.invalidate()

        assert not memo.has("a")
        assert not memo.has("b")

    def test_has_distinguishes_cached_zero(self) -> None:
        memo = TTLMemo(ttl_seconds=30, clock=FakeClock())
        memo.set("count", 0)

        assert memo.has("count")
        assert memo.get("count", default=-1) == 0
