"""Bloom store: ánh xạ chuỗi vào k bit trên một BitArray (không có false negative)."""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np

from bloomsize.bits.bit_array import BitArray
from bloomsize.bloom.bloom_params import make_multiple
from bloomsize.hashing.hash_family import HashFamily, Murmur3HashFamily


class MembershipStore:
    def __init__(self, m_bits: int, hash_family: Optional[HashFamily] = None) -> None:
        """Khởi tạo store m bit (làm tròn lên bội số 64) với họ hàm băm cho trước."""
        if m_bits <= 0:
            raise ValueError("m_bits must be positive")
        self._bits = BitArray(make_multiple(int(m_bits)))
        self._hash_family = hash_family or Murmur3HashFamily()
        self._inserted = 0

    @classmethod
    def from_words(cls, words: Iterable[int], hash_family: Optional[HashFamily] = None) -> "MembershipStore":
        """Dựng lại store từ snapshot; phải dùng cùng họ băm như lúc ghi."""
        bits = BitArray.from_words(words)
        store = cls(bits.size, hash_family)
        store._bits = bits
        return store

    @property
    def hash_family(self) -> HashFamily:
        return self._hash_family

    def insert(self, element: str) -> None:
        """Thêm chuỗi vào store (đặt k bit tương ứng)."""
        self.insert_hashes(self._hash_family.hash_all(element))

    def insert_many(self, elements: Iterable[str]) -> None:
        for element in elements:
            self.insert(element)

    def query(self, element: str) -> bool:
        """Trả false chắc chắn chưa thêm, true có thể đã thêm (có FPR)."""
        return self.query_hashes(self._hash_family.hash_all(element))

    def __contains__(self, element: str) -> bool:
        return self.query(element)

    def insert_hashes(self, hashes: Sequence[int]) -> None:
        """Đặt bit cho danh sách hash tính sẵn."""
        for h in hashes:
            self._bits.set(h)
        self._inserted += 1

    def query_hashes(self, hashes: Sequence[int]) -> bool:
        for h in hashes:
            if not self._bits.test(h):
                return False
        return True

    def snapshot(self) -> np.ndarray:
        """Bản sao các word 64 bit của mảng bit, dùng để lưu ra ngoài."""
        return self._bits.words()

    def clear(self) -> None:
        self._bits.clear()
        self._inserted = 0

    def m_bits(self) -> int:
        return self._bits.size

    def k_hash(self) -> int:
        return self._hash_family.num_hashes

    def get_inserted_count(self) -> int:
        """Số lần chèn (đếm logic, không khử trùng lặp)."""
        return self._inserted

    def fill_ratio(self) -> float:
        return self._bits.fill_ratio()

    def estimate_fpr(self) -> float:
        """Ước lượng FPR dựa trên độ bão hòa thực tế (tỉ lệ bit 1)^k."""
        return self.fill_ratio() ** self.k_hash()

    def __str__(self) -> str:
        return str(self._bits)

    def __repr__(self) -> str:
        return (
            f"MembershipStore(m={self.m_bits():,} bits, k={self.k_hash()}, "
            f"inserted={self._inserted:,}, fill={self.fill_ratio():.4f})"
        )
