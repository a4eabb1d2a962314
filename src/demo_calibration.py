"""CLI demo: tính và hiệu chỉnh kích thước Bloom filter.

- Bước 1: tính kích thước giải tích (bits_needed, optimize_size, FPR lý thuyết).
- Bước 2: hiệu chỉnh thực nghiệm trên chuỗi ngẫu nhiên hoặc file text.
- Menu console cho phép chọn nguồn dữ liệu và xem tiến trình.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Dict, List, Optional

import psutil

from bloomsize.bloom.bloom_params import BloomParams, bits_needed, optimize_size, probability_false
from bloomsize.bloom.membership_store import MembershipStore
from bloomsize.calibration.calibrator import Calibrator
from bloomsize.calibration.synthetic_strings import SyntheticStringGenerator
from bloomsize.hashing.hash_family import HashFamily, Murmur3HashFamily
from bloomsize.sources.text_source import read_tokens


DEFAULT_N = 1000
DEFAULT_P = 0.01
SEED = 42


def _current_memory_bytes() -> int:
    """RSS của tiến trình (bytes)."""
    return psutil.Process(os.getpid()).memory_info().rss


def _ask_float(prompt: str, default: float) -> float:
    raw = input(f"{prompt} [{default}]: ").strip()
    return float(raw) if raw else default


def _ask_int(prompt: str, default: int) -> int:
    raw = input(f"{prompt} [{default}]: ").strip()
    return int(raw) if raw else default


def show_analytic(n: int, p: float, hash_family: HashFamily) -> None:
    """In các kích thước giải tích cho (n, p)."""
    k = hash_family.num_hashes
    m_raw = bits_needed(n, p)
    m_opt = optimize_size(n, p, k)
    params = BloomParams.for_capacity(n, p)
    print(f"[Analytic] n={n} p={p} k={k}")
    print(f" ├─ bits_needed        : {m_raw:,} bits")
    print(f" ├─ optimize_size (k={k}): {m_opt:,} bits (~{m_opt // 8 / 1024:.1f} KB) fpr={probability_false(n, m_opt, k):.6f}")
    print(f" └─ k tối ưu cho m     : m={params.m_bits:,} k={params.k_hash}")


def run_calibration(elements: List[str], p: float, hash_family: HashFamily) -> Dict[str, float]:
    """Hiệu chỉnh và trả về thống kê."""
    calibrator = Calibrator(hash_family=hash_family, generator=SyntheticStringGenerator(seed=SEED))
    start_mem = _current_memory_bytes()
    start = time.time()
    chosen = calibrator.measure_size(elements, p)
    duration = time.time() - start

    store = MembershipStore(chosen, hash_family)
    store.insert_many(elements)

    result = calibrator.last_result
    return {
        "n": len(elements),
        "p": p,
        "analytic_m": optimize_size(len(elements), p, hash_family.num_hashes),
        "chosen_m": chosen,
        "best_m": calibrator.best_size,
        "best_probability": calibrator.best_probability,
        "stop_rate": result.stop_rate if result else 0.0,
        "trials": result.trials if result else 0,
        "stagnations": calibrator.metrics.stagnations,
        "estimate_fpr": store.estimate_fpr(),
        "duration_sec": duration,
        "mem_delta_bytes": _current_memory_bytes() - start_mem,
    }


def print_stats(stats: Dict[str, float]) -> None:
    print("\n=== Tóm tắt hiệu chỉnh ===")
    print(f"Số phần tử (n): {stats['n']:,}")
    print(f"FPR mục tiêu  : {stats['p']}")
    print(f"m giải tích   : {stats['analytic_m']:,} bits")
    print(f"m chọn        : {stats['chosen_m']:,} bits (best={stats['best_m']:,})")
    print(f" ├─ xác suất tại m tốt nhất (hits/m): {stats['best_probability']:.6f}")
    print(f" ├─ tỉ lệ tại vòng dừng           : {stats['stop_rate']:.6f}")
    print(f" └─ FPR ước lượng theo bão hòa    : {stats['estimate_fpr']:.4%}")
    print(f"Số vòng thử: {stats['trials']} (đứng yên {stats['stagnations']} lần)")
    print(f"Thời gian chạy: {stats['duration_sec']:.2f}s, Δmem={stats['mem_delta_bytes']:+,} bytes")


def choose_elements() -> Optional[List[str]]:
    print("\nChọn nguồn chuỗi:")
    print(" 1. Chuỗi ngẫu nhiên")
    print(" 2. File text (mỗi dòng một chuỗi)")
    choice = input("Chọn [1]: ").strip() or "1"
    if choice == "1":
        n = _ask_int("Số phần tử n", DEFAULT_N)
        return SyntheticStringGenerator(seed=SEED).generate_unique(n)
    if choice == "2":
        path = input("Nhập đường dẫn file: ").strip()
        split = input("Tách theo khoảng trắng? [y/N]: ").strip().lower() == "y"
        try:
            tokens = read_tokens(path, split_words=split)
        except FileNotFoundError as exc:
            print(exc)
            return None
        print(f"[Load] Đọc {len(tokens):,} chuỗi duy nhất từ {path}")
        return tokens
    print("Lựa chọn không hợp lệ.")
    return None


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    print("=== Demo Bloom sizing + calibration ===")
    hash_family = Murmur3HashFamily()

    while True:
        print("\nMenu:")
        print(" 1. Tính kích thước giải tích")
        print(" 2. Hiệu chỉnh thực nghiệm")
        print(" 3. Thoát")
        choice = input("Chọn [1/2/3]: ").strip()

        try:
            if choice == "1" or choice == "":
                n = _ask_int("Số phần tử n", DEFAULT_N)
                p = _ask_float("FPR mục tiêu p", DEFAULT_P)
                show_analytic(n, p, hash_family)
            elif choice == "2":
                elements = choose_elements()
                if not elements:
                    continue
                p = _ask_float("FPR mục tiêu p", DEFAULT_P)
                print_stats(run_calibration(elements, p, hash_family))
            elif choice == "3":
                print("Thoát.")
                break
            else:
                print("Lựa chọn không hợp lệ.")
        except ValueError as exc:
            print(f"Tham số không hợp lệ: {exc}")


if __name__ == "__main__":
    main()
