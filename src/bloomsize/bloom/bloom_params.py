"""Tính toán tham số Bloom filter: số bit, số hash, xác suất dương tính giả.

Công thức chuẩn:
- m = ceil(-n ln(p) / (ln 2)^2)
- k = round((m / n) ln 2)
- p = (1 - e^{-k n / m})^k

`refine_size` hiệu chỉnh m quanh ước lượng giải tích cho tới khi p lý thuyết
khớp mục tiêu trong sai số EPSILON, sau đó làm tròn lên bội số 64.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from bloomsize.bits.bit_array import WORD_BITS
from bloomsize.hashing.hash_family import calc_num_hashes

logger = logging.getLogger(__name__)

EPSILON = 1e-5
MAX_OPTIMIZE_ITERATIONS = 50
INITIAL_HURRY = 300


def _check_n(n: int) -> None:
    if n <= 0:
        raise ValueError("n must be positive")


def _check_p(p: float) -> None:
    if not (0 < p < 1):
        raise ValueError("p must be in (0,1)")


def bits_needed(n: int, p: float) -> int:
    """Số bit tối thiểu cho n phần tử và FPR mục tiêu p."""
    _check_n(n)
    _check_p(p)
    return int(math.ceil(-n * math.log(p) / (math.log(2) ** 2)))


def hashes_needed(n: int, m: int) -> int:
    """Số hàm băm tối ưu cho n phần tử trên m bit."""
    _check_n(n)
    if m <= 0:
        raise ValueError("m must be positive")
    return int(round((m / float(n)) * math.log(2)))


def probability_false(n: int, m: int, k: int) -> float:
    """Xác suất dương tính giả lý thuyết (1 - e^{-kn/m})^k."""
    _check_n(n)
    if m <= 0:
        raise ValueError("m must be positive")
    if k <= 0:
        raise ValueError("k must be positive")
    return (1.0 - math.exp(-k * float(n) / float(m))) ** k


def make_multiple(m: int) -> int:
    """Làm tròn m lên bội số gần nhất của 64."""
    mod = m % WORD_BITS
    return m if mod == 0 else m + WORD_BITS - mod


def _compare(test: float, target: float) -> int:
    diff = test - target
    if abs(diff) < EPSILON:
        return 0
    return 1 if diff > 0 else -1


def refine_size(n: int, k: int, p: float) -> int:
    """Nhích m quanh bits_needed(n, p) cho tới khi probability_false khớp p (chưa làm tròn)."""
    m = bits_needed(n, p)
    if k <= 0:
        raise ValueError("k must be positive")
    hurry = INITIAL_HURRY
    last_nudge = 0

    for i in range(MAX_OPTIMIZE_ITERATIONS):
        nudge = _compare(probability_false(n, m, k), p)
        if nudge == 0:
            logger.debug("[Optimize] converged n=%d k=%d p=%g m=%d iterations=%d", n, k, p, m, i)
            break
        # Đổi chiều -> giảm tốc độ hiệu chỉnh
        if i > 0 and nudge != last_nudge:
            hurry //= 2
        m = int(m + nudge * m * EPSILON * hurry)
        last_nudge = nudge
    else:
        logger.debug("[Optimize] no convergence after %d iterations n=%d k=%d p=%g m=%d",
                     MAX_OPTIMIZE_ITERATIONS, n, k, p, m)
    return m


def optimize_size(n: int, p: float, k: Optional[int] = None) -> int:
    """Kích thước store (bội số 64) sao cho FPR lý thuyết với k hash xấp xỉ p."""
    if k is None:
        k = calc_num_hashes()
    return make_multiple(refine_size(n, k, p))


@dataclass(frozen=True)
class SizingParameters:
    n: int
    p: float
    k: int

    def __post_init__(self) -> None:
        _check_n(self.n)
        _check_p(self.p)
        if self.k <= 0:
            raise ValueError("k must be positive")

    def bits_needed(self) -> int:
        return bits_needed(self.n, self.p)

    def optimize_size(self) -> int:
        return optimize_size(self.n, self.p, self.k)

    def probability_false(self, m: int) -> float:
        return probability_false(self.n, m, self.k)


@dataclass(frozen=True)
class BloomParams:
    m_bits: int
    k_hash: int

    @staticmethod
    def for_capacity(expected_items: int, target_fpr: float) -> "BloomParams":
        """Tính m (bội số 64) và k tối ưu cho sức chứa và FPR mong muốn."""
        m_bits = max(WORD_BITS, make_multiple(bits_needed(expected_items, target_fpr)))
        k = max(1, hashes_needed(expected_items, m_bits))
        return BloomParams(m_bits=m_bits, k_hash=k)
