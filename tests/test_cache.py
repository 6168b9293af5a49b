from poker_settlement.cache import SettlementCache
from poker_settlement.services.grouping import ParticipantResult
from poker_settlement.services.settlement import settle_session


def _result():
    return settle_session([ParticipantResult("a", "Alice", 10), ParticipantResult("b", "Bob", -10)])


def test_put_and_get():
    cache = SettlementCache()
    result = _result()

    cache.put(7, result)

    assert cache.get(7) is result
    assert 7 in cache
    assert len(cache) == 1
    assert cache.get(8) is None


def test_invalidate_only_touches_one_session():
    cache = SettlementCache()
    cache.put(1, _result())
    cache.put(2, _result())

    cache.invalidate(1)
    cache.invalidate(99)  # unknown ids are fine

    assert 1 not in cache
    assert 2 in cache


def test_clear():
    cache = SettlementCache()
    cache.put(1, _result())

    cache.clear()

    assert len(cache) == 0


def test_caches_are_independent():
    first, second = SettlementCache(), SettlementCache()
    first.put(1, _result())

    assert second.get(1) is None
