"""Hiệu chỉnh kích thước Bloom bằng đo đạc thực tế.

Bắt đầu từ kích thước giải tích optimize_size(n, p, k), dựng store mới, chèn
toàn bộ phần tử, đo số lần trúng trên một tập đối chứng ngẫu nhiên rời nhau rồi
thu nhỏ dần cho tới khi tỉ lệ đo được vượt p. Tỉ lệ đo = hits / m (chia cho số
bit của store, không phải số phần tử đối chứng).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from bloomsize.bits.bit_array import WORD_BITS
from bloomsize.bloom.bloom_params import make_multiple, optimize_size
from bloomsize.bloom.membership_store import MembershipStore
from bloomsize.calibration.synthetic_strings import SyntheticStringGenerator
from bloomsize.hashing.hash_family import HashFamily, Murmur3HashFamily
from bloomsize.metrics.metrics import CalibrationMetrics

logger = logging.getLogger(__name__)


class FalseNegativeError(RuntimeError):
    """Phần tử vừa chèn lại không được tìm thấy: hợp đồng băm/mảng bit bị vi phạm."""


@dataclass(frozen=True)
class CalibrationConfig:
    max_trials: int = 10
    shrink_factor: float = 0.9
    stagnation_decay: float = 0.9


@dataclass(frozen=True)
class CalibrationResult:
    bits: int
    probability: float
    stop_rate: float
    trials: int


class Calibrator:
    def __init__(
        self,
        hash_family: Optional[HashFamily] = None,
        generator: Optional[SyntheticStringGenerator] = None,
        config: Optional[CalibrationConfig] = None,
        metrics: Optional[CalibrationMetrics] = None,
    ) -> None:
        """Khởi tạo bộ hiệu chỉnh với họ băm, bộ sinh chuỗi đối chứng và cấu hình vòng lặp."""
        self.hash_family = hash_family or Murmur3HashFamily()
        self.generator = generator or SyntheticStringGenerator()
        self.config = config or CalibrationConfig()
        self.metrics = metrics or CalibrationMetrics()
        self.best_size = 0
        self.best_probability = 0.0
        self.last_result: Optional[CalibrationResult] = None

    def measure_size(self, elements: Iterable[str], p: float) -> int:
        """Tìm số bit nhỏ nhất mà tỉ lệ dương tính giả đo được vẫn không vượt p."""
        items = list(elements)
        self.metrics.reset()
        if not items:
            raise ValueError("elements must not be empty")
        if not (0 < p < 1):
            raise ValueError("p must be in (0,1)")

        k = self.hash_family.num_hashes
        shrink = self.config.shrink_factor
        curr_size = optimize_size(len(items), p, k)
        prev_size = 0
        best_probability = p
        rate = p
        trials = 0
        chosen: Optional[int] = None

        logger.info("[Calibrate] n=%d p=%g k=%d analytic_m=%d", len(items), p, k, curr_size)

        for i in range(self.config.max_trials):
            hits, rate = self.measure_one(items, curr_size)
            trials += 1
            if rate > p:
                self.metrics.record_trial(curr_size, hits, rate, accepted=False)
                chosen = curr_size if i == 0 else prev_size
                logger.info("[Calibrate] trial=%d m=%d hits=%d rate=%.6f > p, stop with m=%d",
                            i, curr_size, hits, rate, chosen)
                break

            self.metrics.record_trial(curr_size, hits, rate, accepted=True)
            best_probability = rate
            if curr_size == prev_size:
                # Làm tròn bội số 64 trả về đúng kích thước cũ -> thu nhỏ mạnh hơn
                shrink *= self.config.stagnation_decay
                self.metrics.record_stagnation()
            else:
                prev_size = curr_size
            next_size = max(WORD_BITS, make_multiple(int(curr_size * shrink)))
            logger.debug("[Calibrate] trial=%d m=%d hits=%d rate=%.6f shrink=%.4f next_m=%d",
                         i, curr_size, hits, rate, shrink, next_size)
            curr_size = next_size

        if chosen is None:
            chosen = curr_size
            logger.info("[Calibrate] %d trials without exceeding p, m=%d", trials, chosen)

        self.best_size = prev_size
        self.best_probability = best_probability
        self.last_result = CalibrationResult(
            bits=chosen, probability=best_probability, stop_rate=rate, trials=trials
        )
        return chosen

    def measure_one(self, elements: Sequence[str], size: int) -> Tuple[int, float]:
        """Một lần thử trên store mới: trả về (số lần trúng đối chứng, hits / size)."""
        store = MembershipStore(size, self.hash_family)
        store.insert_many(elements)
        for element in elements:
            if not store.query(element):
                raise FalseNegativeError(f"Bloom false negative on {element!r}")

        control: List[str] = self.generator.generate_disjoint(elements)
        hits = sum(1 for element in control if store.query(element))
        return hits, hits / float(store.m_bits())
