# benchmark/run_benchmark.py
"""
Benchmark so sánh kích thước Bloom giải tích và kích thước hiệu chỉnh thực nghiệm.

- Quét nhiều n (số phần tử) với cùng FPR mục tiêu
- Mỗi n chạy nhiều lần (seed khác nhau), lấy avg ± std cho m và FPR đo được
- Đo memory tiến trình bằng psutil (RSS)
- Nếu có file text trong 'data/', hiệu chỉnh thêm trên dữ liệu thật
- In bảng kết quả (tabulate), lưu CSV (pandas) và biểu đồ (matplotlib)
"""

import logging
import os
import time
from glob import glob
from typing import List

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import psutil
from tabulate import tabulate

from bloomsize.bloom.bloom_params import bits_needed, optimize_size, probability_false
from bloomsize.bloom.membership_store import MembershipStore
from bloomsize.calibration.calibrator import Calibrator
from bloomsize.calibration.synthetic_strings import SyntheticStringGenerator
from bloomsize.hashing.hash_family import Murmur3HashFamily
from bloomsize.sources.text_source import read_tokens

N_VALUES = [250, 500, 1000, 2000, 4000]
TARGET_P = 0.01
NUM_RUNS = 3
PROBES = 5000
OUT_DIR = "plots"


def empirical_fpr(m_bits: int, elements: List[str], generator: SyntheticStringGenerator,
                  hash_family: Murmur3HashFamily, probes: int = PROBES) -> float:
    """FPR kiểu thông thường: hits / số phép thử âm."""
    store = MembershipStore(m_bits, hash_family)
    store.insert_many(elements)
    inserted = set(elements)
    negatives = [q for q in generator.generate_unique(probes) if q not in inserted]
    false_pos = sum(1 for q in negatives if q in store)
    return false_pos / float(len(negatives))


def benchmark_one(elements: List[str], p: float, seed: int) -> dict:
    """Hiệu chỉnh một lần và đo các chỉ số."""
    hash_family = Murmur3HashFamily()
    generator = SyntheticStringGenerator(seed=seed)
    calibrator = Calibrator(hash_family=hash_family, generator=generator)
    n = len(elements)
    k = hash_family.num_hashes

    analytic = optimize_size(n, p, k)
    start = time.time()
    chosen = calibrator.measure_size(elements, p)
    duration = time.time() - start

    return {
        "n": n,
        "bits_needed": bits_needed(n, p),
        "analytic_m": analytic,
        "calibrated_m": chosen,
        "theory_p_analytic": probability_false(n, analytic, k),
        "theory_p_calibrated": probability_false(n, chosen, k),
        "empirical_p_calibrated": empirical_fpr(chosen, elements, generator, hash_family),
        "trials": calibrator.last_result.trials,
        "calibrate_time_s": duration,
        "memory_kb": psutil.Process().memory_info().rss / 1024,
    }


def run_full_benchmark(n_values: List[int], p: float = TARGET_P, num_runs: int = NUM_RUNS) -> pd.DataFrame:
    """Chạy benchmark trên chuỗi ngẫu nhiên với nhiều lần chạy"""
    rows = []
    for n in n_values:
        print(f"\n{'='*20} n={n:,} {'='*20}")
        for run in range(1, num_runs + 1):
            elements = SyntheticStringGenerator(seed=run).generate_unique(n)
            res = benchmark_one(elements, p, seed=1000 + run)
            res["run"] = run
            rows.append(res)
            print(
                f"  run {run}/{num_runs}: analytic_m={res['analytic_m']:,} calibrated_m={res['calibrated_m']:,} "
                f"emp_p={res['empirical_p_calibrated']:.4f} trials={res['trials']} time={res['calibrate_time_s']:.2f}s"
            )
    return pd.DataFrame(rows)


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Tính avg ± std theo n"""
    summary = []
    for n, group in df.groupby("n"):
        summary.append({
            "n": n,
            "analytic_m": int(group["analytic_m"].iloc[0]),
            "calibrated_m_mean": np.mean(group["calibrated_m"]),
            "calibrated_m_std": np.std(group["calibrated_m"]),
            "emp_p_mean": np.mean(group["empirical_p_calibrated"]),
            "emp_p_std": np.std(group["empirical_p_calibrated"]),
            "theory_p_mean": np.mean(group["theory_p_calibrated"]),
        })
    return pd.DataFrame(summary)


def print_results(summary: pd.DataFrame, p: float = TARGET_P):
    """In bảng kết quả"""
    table = []
    for _, s in summary.iterrows():
        table.append([
            f"{int(s['n']):,}",
            f"{int(s['analytic_m']):,}",
            f"{s['calibrated_m_mean']:,.0f} ± {s['calibrated_m_std']:,.0f}",
            f"{s['emp_p_mean']:.4%} ± {s['emp_p_std']:.4%}",
            f"{s['theory_p_mean']:.4%}",
        ])

    print(f"\n=== KẾT QUẢ BENCHMARK (p mục tiêu={p}, Avg ± Std over {NUM_RUNS} runs) ===")
    print(tabulate(table, headers=["n", "Analytic m", "Calibrated m", "Empirical FPR", "Theory FPR"], tablefmt="github"))


def plot_results(summary: pd.DataFrame, p: float = TARGET_P):
    """Vẽ biểu đồ m và FPR theo n"""
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    ax1.plot(summary["n"], summary["analytic_m"], marker="o", label="Analytic (optimize_size)")
    ax1.errorbar(summary["n"], summary["calibrated_m_mean"], yerr=summary["calibrated_m_std"],
                 marker="s", capsize=5, label="Calibrated")
    ax1.set_xlabel("n (elements)")
    ax1.set_ylabel("m (bits)")
    ax1.set_title("Bloom size")
    ax1.legend()

    ax2.errorbar(summary["n"], summary["emp_p_mean"] * 100, yerr=summary["emp_p_std"] * 100,
                 marker="s", capsize=5, color="orange", label="Empirical (calibrated m)")
    ax2.plot(summary["n"], summary["theory_p_mean"] * 100, marker="o", color="green", label="Theory (calibrated m)")
    ax2.axhline(p * 100, linestyle="--", color="gray", label="Target")
    ax2.set_xlabel("n (elements)")
    ax2.set_ylabel("False Positive Rate (%)")
    ax2.set_title("False Positive Rate")
    ax2.legend()

    plt.suptitle("Analytic vs Calibrated Bloom Sizing")
    plt.tight_layout()

    os.makedirs(OUT_DIR, exist_ok=True)
    plot_path = os.path.join(OUT_DIR, "calibration_comparison.png")
    plt.savefig(plot_path, dpi=200)
    plt.close()
    print(f"\nBiểu đồ đã lưu tại: {plot_path}")


def run_file_benchmark(paths: List[str], p: float = TARGET_P) -> None:
    """Hiệu chỉnh trên dữ liệu thật (mỗi dòng một chuỗi)"""
    for path in paths:
        tokens = read_tokens(path)
        if not tokens:
            print(f"  Bỏ qua {os.path.basename(path)} (rỗng)")
            continue
        res = benchmark_one(tokens, p, seed=7)
        print(
            f"  {os.path.basename(path)}: n={res['n']:,} analytic_m={res['analytic_m']:,} "
            f"calibrated_m={res['calibrated_m']:,} emp_p={res['empirical_p_calibrated']:.4f}"
        )


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(levelname)s - %(message)s")
    results = run_full_benchmark(N_VALUES)
    os.makedirs(OUT_DIR, exist_ok=True)
    results.to_csv(os.path.join(OUT_DIR, "calibration_runs.csv"), index=False)

    summary = summarize(results)
    print_results(summary)
    plot_results(summary)

    data_files = glob("data/*.txt")
    if data_files:
        print("\n=== Dữ liệu thật trong 'data/' ===")
        run_file_benchmark(data_files)
    else:
        print("Không tìm thấy file data/*.txt, bỏ qua phần dữ liệu thật.")
