"""Họ hàm băm sinh k giá trị nguyên cho một chuỗi.

Store chỉ cần một đối tượng có `num_hashes` và `hash_all(text)`; giá trị trả về
không cần nằm trong [0, m) vì BitArray tự lấy modulo.
"""
from __future__ import annotations

from typing import List, Protocol

import mmh3

DEFAULT_NUM_HASHES = 7

_MASK64 = (1 << 64) - 1


class HashFamily(Protocol):
    num_hashes: int

    def hash_all(self, text: str) -> List[int]:
        ...


def calc_num_hashes() -> int:
    """Số hàm băm cố định dùng khi không chỉ định k."""
    return DEFAULT_NUM_HASHES


class Murmur3HashFamily:
    def __init__(self, num_hashes: int = DEFAULT_NUM_HASHES, seed: int = 0) -> None:
        """Khởi tạo họ băm MurmurHash3 128-bit với k hàm và seed cố định."""
        if num_hashes <= 0:
            raise ValueError("num_hashes must be positive")
        self.num_hashes = int(num_hashes)
        self.seed = int(seed)

    def hash_all(self, text: str) -> List[int]:
        """Derive k hash từ 2 lần gọi hash128 (Kirsch-Mitzenmacher: g_i = h1 + i*h2)."""
        data = text.encode("utf-8")
        h1 = mmh3.hash128(data, seed=self.seed)
        h2 = mmh3.hash128(data, seed=self.seed + 42)
        return [(h1 + i * h2) & _MASK64 for i in range(self.num_hashes)]

    def __repr__(self) -> str:
        return f"Murmur3HashFamily(num_hashes={self.num_hashes}, seed={self.seed})"
