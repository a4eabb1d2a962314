# -*- coding: utf-8 -*-
"""
Test cho vòng hiệu chỉnh kích thước Bloom.
"""

import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))
from bloomsize.bloom.bloom_params import make_multiple, optimize_size
from bloomsize.calibration.calibrator import (
    CalibrationConfig,
    Calibrator,
    FalseNegativeError,
)
from bloomsize.calibration.synthetic_strings import SyntheticStringGenerator
from bloomsize.hashing.hash_family import Murmur3HashFamily


class ConstantHashFamily:
    """Mọi chuỗi đều vào bit 0 -> mọi truy vấn đều dương."""

    def __init__(self, num_hashes=1):
        self.num_hashes = num_hashes

    def hash_all(self, text):
        return [0] * self.num_hashes


class UppercaseHashFamily:
    """Chuỗi viết hoa vào bit 0, còn lại vào bit 1 -> tập đối chứng a–z không bao giờ trúng."""

    num_hashes = 1

    def hash_all(self, text):
        return [0] if text[:1].isupper() else [1]


class CountingHashFamily:
    """Không tất định: mỗi lần gọi trả vị trí mới -> vi phạm hợp đồng băm."""

    num_hashes = 1

    def __init__(self):
        self.calls = 0

    def hash_all(self, text):
        self.calls += 1
        return [self.calls]


def elements(n):
    return [f"E{i}" for i in range(n)]


def test_rate_is_normalized_by_store_size():
    # tỉ lệ = hits / m, không phải hits / số phần tử đối chứng
    calibrator = Calibrator(hash_family=ConstantHashFamily(), generator=SyntheticStringGenerator(seed=1))
    hits, rate = calibrator.measure_one(elements(10), 640)
    assert hits == 10
    assert rate == 10 / 640.0


def test_false_negative_is_fatal():
    calibrator = Calibrator(hash_family=CountingHashFamily(), generator=SyntheticStringGenerator(seed=1))
    with pytest.raises(FalseNegativeError):
        calibrator.measure_size(elements(3), 0.5)
    assert calibrator.metrics.trials == 0


def test_first_trial_over_target_returns_analytic_size():
    calibrator = Calibrator(hash_family=ConstantHashFamily(), generator=SyntheticStringGenerator(seed=1))
    chosen = calibrator.measure_size(elements(100), 0.01)
    assert chosen == optimize_size(100, 0.01, 1)
    assert calibrator.best_size == 0
    assert calibrator.best_probability == 0.01
    result = calibrator.last_result
    assert result.bits == chosen
    assert result.trials == 1
    assert result.stop_rate == 100 / float(chosen)
    assert calibrator.metrics.rejected_trials == 1


def test_stagnation_runs_all_trials_at_minimum_size():
    calibrator = Calibrator(hash_family=UppercaseHashFamily(), generator=SyntheticStringGenerator(seed=2))
    chosen = calibrator.measure_size(elements(10), 0.1)
    # optimize_size(10, 0.1, 1) == 64; thu nhỏ luôn làm tròn lại 64
    assert chosen == 64
    assert calibrator.best_size == 64
    assert calibrator.best_probability == 0.0
    assert calibrator.last_result.trials == 10
    assert calibrator.metrics.accepted_trials == 10
    assert calibrator.metrics.stagnations == 9


def test_shrink_schedule_follows_shrink_factor():
    calibrator = Calibrator(hash_family=UppercaseHashFamily(), generator=SyntheticStringGenerator(seed=3))
    calibrator.measure_size(elements(200), 0.01)
    sizes = [r.m_bits for r in calibrator.metrics.records]
    assert sizes[0] == optimize_size(200, 0.01, 1)
    shrink = 0.9
    for prev, curr in zip(sizes, sizes[1:]):
        if curr == prev:
            continue
        assert curr == max(64, make_multiple(int(prev * shrink)))
    assert all(s % 64 == 0 and s > 0 for s in sizes)


class FixedControlGenerator:
    """Tập đối chứng cố định: `hits` chuỗi trúng bit 0, phần còn lại vào bit 1."""

    def __init__(self, hits):
        self.hits = hits

    def generate_disjoint(self, other):
        return [f"Hit{i}" for i in range(self.hits)] + [f"miss{i}" for i in range(len(other) - self.hits)]


def test_stops_at_previous_accepted_size():
    # 12 lần trúng cố định: tỉ lệ 12 / m vượt 0.01 khi m xuống 1152
    calibrator = Calibrator(hash_family=UppercaseHashFamily(), generator=FixedControlGenerator(12))
    chosen = calibrator.measure_size(elements(200), 0.01)
    sizes = [r.m_bits for r in calibrator.metrics.records]
    assert sizes == [2240, 2048, 1856, 1728, 1600, 1472, 1344, 1216, 1152]
    assert chosen == 1216
    assert calibrator.best_size == 1216
    assert calibrator.best_probability == 12 / 1216.0
    assert calibrator.last_result.stop_rate == 12 / 1152.0
    assert calibrator.last_result.trials == 9
    assert calibrator.metrics.records[-1].accepted is False


def test_max_trials_is_configurable():
    calibrator = Calibrator(
        hash_family=UppercaseHashFamily(),
        generator=SyntheticStringGenerator(seed=6),
        config=CalibrationConfig(max_trials=3),
    )
    chosen = calibrator.measure_size(elements(200), 0.01)
    assert calibrator.last_result.trials == 3
    assert chosen == 1728
    assert calibrator.best_size == 1856


def test_calibration_with_real_hashing_terminates():
    gen = SyntheticStringGenerator(seed=5)
    items = gen.generate_unique(300)
    calibrator = Calibrator(hash_family=Murmur3HashFamily(), generator=gen)
    chosen = calibrator.measure_size(items, 0.01)
    assert chosen > 0
    assert chosen % 64 == 0
    assert 1 <= calibrator.last_result.trials <= 10
    assert len(calibrator.metrics.to_frame()) == calibrator.last_result.trials


def test_rejects_invalid_input():
    calibrator = Calibrator()
    with pytest.raises(ValueError):
        calibrator.measure_size([], 0.01)
    for p in (0.0, 1.0, 2.0):
        with pytest.raises(ValueError):
            calibrator.measure_size(["abc"], p)


def test_metrics_cover_only_the_latest_run():
    calibrator = Calibrator(hash_family=UppercaseHashFamily(), generator=SyntheticStringGenerator(seed=7))
    calibrator.measure_size(elements(200), 0.01)
    calibrator.measure_size(elements(10), 0.1)
    frame = calibrator.metrics.to_frame()
    assert len(frame) == calibrator.last_result.trials == 10
    assert frame["trial"].tolist() == list(range(10))
    assert calibrator.metrics.stagnations == 9
