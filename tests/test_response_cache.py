"""
Tests for the response cache.
"""

from grocery_classifier.classification.response_cache import ResponseCache
from grocery_classifier.models import ClassificationResponse, ProductClassification


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_response(product: str = "piens") -> ClassificationResponse:
    return ClassificationResponse(
        classifications=[
            ProductClassification(product=product, category="dairy", confidence=0.8, source="ai")
        ],
        ai_used=True,
    )


class TestSignature:
    """Test order-independent cache keys."""

    def test_permutations_share_signature(self) -> None:
        assert ResponseCache.signature(["piens", "maize", "olas"]) == ResponseCache.signature(
            ["olas", "piens", "maize"]
        )

    def test_different_lists_differ(self) -> None:
        assert ResponseCache.signature(["piens"]) != ResponseCache.signature(["Piens"])
        assert ResponseCache.signature(["piens"]) != ResponseCache.signature(["piens", "piens"])


class TestResponseCache:
    """Test bounded storage and periodic clearing."""

    def test_get_and_put(self) -> None:
        cache = ResponseCache()
        signature = ResponseCache.signature(["piens"])
        response = make_response()

        assert cache.get(signature) is None
        assert cache.put(signature, response) is True
        assert cache.get(signature) is response
        assert len(cache) == 1

    def test_full_cache_drops_new_entries(self) -> None:
        cache = ResponseCache(capacity=2)

        assert cache.put("a", make_response("a"))
        assert cache.put("b", make_response("b"))
        assert cache.put("c", make_response("c")) is False

        assert len(cache) == 2
        assert cache.get("c") is None
        # Existing entries stay
        assert cache.get("a") is not None
        assert cache.put("a", make_response("a")) is True

    def test_zero_capacity_disables_cache(self) -> None:
        cache = ResponseCache(capacity=0)

        assert cache.put("a", make_response()) is False
        assert cache.get("a") is None

    def test_clears_when_interval_elapses(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(capacity=10, clear_interval_seconds=60, clock=clock)
        cache.put("a", make_response())

        clock.now = 59.0
        assert cache.get("a") is not None

        clock.now = 60.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_interval_restarts_after_clear(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(capacity=10, clear_interval_seconds=60, clock=clock)

        clock.now = 100.0
        cache.put("a", make_response())

        clock.now = 150.0
        assert cache.get("a") is not None

    def test_room_returns_after_clear(self) -> None:
        clock = FakeClock()
        cache = ResponseCache(capacity=1, clear_interval_seconds=60, clock=clock)
        cache.put("a", make_response())
        assert cache.put("b", make_response()) is False

        clock.now = 61.0
        assert cache.put("b", make_response()) is True
        assert cache.get("a") is None

    def test_explicit_clear(self) -> None:
        cache = ResponseCache()
        cache.put("a", make_response())

        cache.clear()

        assert len(cache) == 0
        assert cache.get("a") is None
