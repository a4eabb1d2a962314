"""Mảng bit kích thước cố định, lưu theo word 64 bit (numpy.uint64)."""
from __future__ import annotations

from typing import Iterable

import numpy as np

WORD_BITS = 64


class BitArray:
    def __init__(self, size: int) -> None:
        """Khởi tạo mảng bit; size phải là bội số dương của 64."""
        if size <= 0:
            raise ValueError("size must be positive")
        if size % WORD_BITS != 0:
            raise ValueError(f"size must be a multiple of {WORD_BITS}")
        self._size = int(size)
        self._words = np.zeros(self._size // WORD_BITS, dtype=np.uint64)

    @classmethod
    def from_words(cls, words: Iterable[int]) -> "BitArray":
        """Dựng lại mảng bit từ dãy word có sẵn; size = số word * 64."""
        data = np.array(list(words), dtype=np.uint64)
        if data.size == 0:
            raise ValueError("words must not be empty")
        bits = cls(int(data.size) * WORD_BITS)
        bits._words[:] = data
        return bits

    @property
    def size(self) -> int:
        return self._size

    def set(self, index: int) -> None:
        """Đặt bit tại index (index được lấy modulo size, cho phép tràn)."""
        word, bit = divmod(int(index) % self._size, WORD_BITS)
        self._words[word] |= np.uint64(1 << bit)

    def test(self, index: int) -> bool:
        """Đọc bit tại index (cũng lấy modulo size)."""
        word, bit = divmod(int(index) % self._size, WORD_BITS)
        return bool(self._words[word] & np.uint64(1 << bit))

    def clear(self) -> None:
        """Xóa toàn bộ bit về 0."""
        self._words[:] = 0

    def words(self) -> np.ndarray:
        """Trả về bản sao các word lưu trữ."""
        return self._words.copy()

    def count(self) -> int:
        """Đếm số bit đang bật."""
        return int(np.unpackbits(self._words.view(np.uint8)).sum())

    def fill_ratio(self) -> float:
        return self.count() / float(self._size)

    def __len__(self) -> int:
        return self._size

    def __str__(self) -> str:
        return "\n".join(format(int(word), "b") for word in self._words)
