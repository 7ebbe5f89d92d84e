import random

from bingo.services.game.numbers import ALL_NUMBERS, NumberPool


def test_draws_every_number_exactly_once():
    pool = NumberPool(random.Random(1))
    drawn = [pool.draw() for _ in range(75)]
    assert sorted(drawn) == list(ALL_NUMBERS)
    assert pool.called == drawn
    assert pool.exhausted
    assert pool.draw() is None


def test_called_and_undrawn_partition_the_board():
    pool = NumberPool(random.Random(2))
    for _ in range(40):
        pool.draw()
        called = pool.called
        assert len(set(called)) == len(called)
        assert set(called).isdisjoint(pool.undrawn)
        assert len(called) + pool.remaining == 75


def test_reset_restores_full_pool():
    pool = NumberPool(random.Random(3))
    for _ in range(10):
        pool.draw()
    pool.reset()
    assert pool.called == []
    assert pool.undrawn == frozenset(ALL_NUMBERS)


def test_seeded_pool_with_restricted_undrawn_set():
    pool = NumberPool(undrawn=[7])
    assert pool.undrawn == frozenset({7})
    assert len(pool.called) == 74
    assert 7 not in pool.called
    assert pool.draw() == 7
    assert pool.draw() is None
