# -*- coding: utf-8 -*-
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))
from bloomsize.metrics.metrics import CalibrationMetrics


def test_record_trials_and_frame():
    metrics = CalibrationMetrics()
    assert metrics.average_rate() == 0.0
    metrics.record_trial(640, 2, 2 / 640.0, accepted=True)
    metrics.record_trial(576, 9, 9 / 576.0, accepted=False)
    metrics.record_stagnation()

    assert metrics.trials == 2
    assert metrics.accepted_trials == 1
    assert metrics.rejected_trials == 1
    assert metrics.total_hits == 11
    assert metrics.stagnations == 1

    df = metrics.to_frame()
    assert list(df.columns) == ["trial", "m_bits", "hits", "rate", "accepted"]
    assert df["m_bits"].tolist() == [640, 576]
    assert df["trial"].tolist() == [0, 1]

    metrics.reset()
    assert metrics.trials == 0
    assert metrics.records == []
