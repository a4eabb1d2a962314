"""Điểm vào gộp: tính kích thước Bloom theo công thức hoặc đo thực tế."""
from __future__ import annotations

from typing import Optional

from bloomsize.bloom import bloom_params
from bloomsize.calibration.calibrator import CalibrationConfig, Calibrator
from bloomsize.calibration.synthetic_strings import SyntheticStringGenerator
from bloomsize.hashing.hash_family import HashFamily
from bloomsize.sources.text_source import read_tokens


class BloomCalculations:
    def __init__(
        self,
        hash_family: Optional[HashFamily] = None,
        generator: Optional[SyntheticStringGenerator] = None,
        config: Optional[CalibrationConfig] = None,
    ) -> None:
        self.generator = generator or SyntheticStringGenerator()
        self.calibrator = Calibrator(hash_family=hash_family, generator=self.generator, config=config)

    def bits_needed(self, n: int, p: float) -> int:
        return bloom_params.bits_needed(n, p)

    def hashes_needed(self, n: int, m: int) -> int:
        return bloom_params.hashes_needed(n, m)

    def probability_false(self, n: int, m: int, k: int) -> float:
        return bloom_params.probability_false(n, m, k)

    def calc_size(self, n: int, p: float) -> int:
        """Kích thước giải tích đã hiệu chỉnh (bội số 64) với k của họ băm hiện tại."""
        return bloom_params.optimize_size(n, p, self.calibrator.hash_family.num_hashes)

    def measure_size(self, n: int, p: float) -> int:
        """Đo kích thước trên n chuỗi ngẫu nhiên (n lẻ được làm tròn lên số chẵn)."""
        if n <= 0:
            raise ValueError("n must be positive")
        if n % 2 != 0:
            n += 1
        elements = self.generator.generate_unique(n)
        return self.calibrator.measure_size(elements, p)

    def measure_size_from_file(self, path: str, p: float, split_words: bool = False) -> int:
        """Đo kích thước trên các chuỗi đọc từ file text."""
        return self.calibrator.measure_size(read_tokens(path, split_words=split_words), p)

    @property
    def best_size(self) -> int:
        return self.calibrator.best_size

    @property
    def best_probability(self) -> float:
        return self.calibrator.best_probability
