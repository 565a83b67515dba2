"""
Seeded pseudo-random stream for the synthetic universe.

Mulberry32 is a counter-based 32-bit generator: the state is one uint32 that
advances by a fixed odd constant per draw, and each output is a bit-mixed
hash of the new state.  ``mulberry32_next`` is the pure step function;
``RandomStream`` threads the state through it for one generation call and is
never shared between calls.

Helpers on top of the uniform draw:

  randn_approx  Sum of 6 uniforms minus 3 (Irwin–Hall), mean 0, std ≈ 0.71.
  bounded       ``clamp(mean + randn_approx() × std, lo, hi)``.
  pick          Uniform choice from a sequence.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


def mulberry32_next(state: int) -> tuple[float, int]:
    """Advance the generator one step.

    Args:
        state: Current uint32 state.

    Returns:
        ``(value, next_state)`` with ``value`` in [0, 1).
    """
    a = (state + _INCREMENT) & _MASK32
    t = ((a ^ (a >> 15)) * (1 | a)) & _MASK32
    t = ((t + (((t ^ (t >> 7)) * (61 | t)) & _MASK32)) & _MASK32) ^ t
    value = ((t ^ (t >> 14)) & _MASK32) / _TWO_POW_32
    return value, a


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class RandomStream:
    """Stateful wrapper around ``mulberry32_next`` for a single run.

    Args:
        seed: Any integer; reduced modulo 2**32.
    """

    def __init__(self, seed: int) -> None:
        self._state = int(seed) & _MASK32

    @property
    def state(self) -> int:
        return self._state

    def random(self) -> float:
        """Next uniform draw in [0, 1)."""
        value, self._state = mulberry32_next(self._state)
        return value

    def randn_approx(self) -> float:
        total = 0.0
        for _ in range(6):
            total += self.random()
        return total - 3.0

    def bounded(self, mean: float, std: float, lo: float, hi: float) -> float:
        return _clamp(mean + self.randn_approx() * std, lo, hi)

    def pick(self, items: Sequence[T]) -> T:
        return items[int(self.random() * len(items))]
