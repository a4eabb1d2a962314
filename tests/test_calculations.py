# -*- coding: utf-8 -*-
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))
from bloomsize.calculations import BloomCalculations
from bloomsize.calibration.synthetic_strings import SyntheticStringGenerator


class RecordingGenerator(SyntheticStringGenerator):
    def __init__(self, seed):
        super().__init__(seed=seed)
        self.requested = []

    def generate_unique(self, count):
        self.requested.append(count)
        return super().generate_unique(count)


def test_analytic_pass_through():
    calc = BloomCalculations()
    assert calc.bits_needed(1000, 0.01) == 9586
    assert calc.hashes_needed(1000, 9586) == 7
    assert calc.probability_false(1000, 9600, 7) < 0.01
    assert calc.calc_size(1000, 0.01) == 9600


def test_measure_size_rounds_odd_n_up():
    gen = RecordingGenerator(seed=8)
    calc = BloomCalculations(generator=gen)
    chosen = calc.measure_size(201, 0.01)
    assert gen.requested == [202]
    assert chosen % 64 == 0 and chosen > 0
    assert calc.best_size == calc.calibrator.best_size
    assert calc.best_probability == calc.calibrator.best_probability
    with pytest.raises(ValueError):
        calc.measure_size(0, 0.01)


def test_measure_size_from_file(tmp_path):
    words = SyntheticStringGenerator(seed=9).generate_unique(150)
    path = tmp_path / "words.txt"
    path.write_text("\n".join(words) + "\n", encoding="utf-8")

    calc = BloomCalculations(generator=SyntheticStringGenerator(seed=10))
    chosen = calc.measure_size_from_file(str(path), 0.05)
    assert chosen % 64 == 0 and chosen > 0
    assert calc.calibrator.last_result.bits == chosen
