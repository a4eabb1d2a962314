"""Sinh chuỗi ngẫu nhiên a–z không trùng lặp cho hiệu chỉnh Bloom.

Dùng lấy mẫu loại bỏ (rejection sampling): sinh lại cho tới khi chuỗi chưa có.
Với độ dài tối thiểu 3 chỉ có 26^3 = 17,576 chuỗi ngắn nhất, nên số lượng yêu
cầu phải nhỏ hơn nhiều so với không gian chuỗi.
"""
from __future__ import annotations

import random
import string
from typing import AbstractSet, List, Optional, Sequence, Set


class SyntheticStringGenerator:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        min_len: int = 3,
        max_len: int = 13,
    ) -> None:
        """Khởi tạo bộ sinh với nguồn ngẫu nhiên riêng (có thể seed để tái lập)."""
        if min_len <= 0 or max_len <= min_len:
            raise ValueError("require 0 < min_len < max_len")
        self._rng = rng or random.Random(seed)
        self.min_len = min_len
        self.max_len = max_len

    def generate_one(self) -> str:
        """Một chuỗi chữ thường, độ dài ngẫu nhiên trong [min_len, max_len)."""
        length = self._rng.randrange(self.min_len, self.max_len)
        return "".join(self._rng.choices(string.ascii_lowercase, k=length))

    def generate_unique(self, count: int) -> List[str]:
        """count chuỗi đôi một khác nhau."""
        return self._generate(count, frozenset())

    def generate_disjoint(self, other: Sequence[str]) -> List[str]:
        """Cùng số lượng với other, không trùng nhau và không trùng phần tử nào của other."""
        return self._generate(len(other), frozenset(other))

    def _generate(self, count: int, excluded: AbstractSet[str]) -> List[str]:
        if count < 0:
            raise ValueError("count must be non-negative")
        out: List[str] = []
        seen: Set[str] = set()
        while len(out) < count:
            candidate = self.generate_one()
            if candidate in seen or candidate in excluded:
                continue
            seen.add(candidate)
            out.append(candidate)
        return out
