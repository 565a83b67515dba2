"""
Tests for stock_check/universe/prng.py.

What we test
------------
- mulberry32_next is pure: same state → same (value, next_state).
- The state advances by the fixed increment modulo 2**32.
- Values lie in [0, 1).
- RandomStream reduces seeds modulo 2**32 (negative seeds included).
- randn_approx stays within [-3, 3]; bounded clamps to [lo, hi].
- pick returns members of the sequence.
"""

from __future__ import annotations

from stock_check.universe.prng import RandomStream, mulberry32_next


def test_step_is_pure() -> None:
    assert mulberry32_next(12345) == mulberry32_next(12345)


def test_state_advances_by_increment() -> None:
    _, nxt = mulberry32_next(0)
    assert nxt == 0x6D2B79F5
    _, wrapped = mulberry32_next(0xFFFFFFFF)
    assert wrapped == (0xFFFFFFFF + 0x6D2B79F5) & 0xFFFFFFFF


def test_values_in_unit_interval() -> None:
    stream = RandomStream(7)
    values = [stream.random() for _ in range(5000)]
    assert all(0.0 <= v < 1.0 for v in values)
    # Not degenerate
    assert len(set(values)) > 4900


def test_same_seed_same_sequence() -> None:
    a, b = RandomStream(42), RandomStream(42)
    assert [a.random() for _ in range(100)] == [b.random() for _ in range(100)]


def test_different_seeds_differ() -> None:
    a, b = RandomStream(1), RandomStream(2)
    assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]


def test_seed_reduced_modulo_2_32() -> None:
    assert RandomStream(2**32 + 5).state == 5
    assert RandomStream(-1).state == 0xFFFFFFFF
    a, b = RandomStream(5), RandomStream(2**32 + 5)
    assert [a.random() for _ in range(20)] == [b.random() for _ in range(20)]


def test_randn_approx_range() -> None:
    stream = RandomStream(99)
    draws = [stream.randn_approx() for _ in range(2000)]
    assert all(-3.0 <= d <= 3.0 for d in draws)
    assert abs(sum(draws) / len(draws)) < 0.1


def test_bounded_clamps() -> None:
    stream = RandomStream(3)
    draws = [stream.bounded(0.0, 100.0, -1.0, 1.0) for _ in range(500)]
    assert all(-1.0 <= d <= 1.0 for d in draws)
    assert -1.0 in draws and 1.0 in draws


def test_pick_members() -> None:
    stream = RandomStream(11)
    items = ("a", "b", "c")
    picks = {stream.pick(items) for _ in range(200)}
    assert picks == set(items)
