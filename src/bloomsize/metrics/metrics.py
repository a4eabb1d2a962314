"""Bộ đếm metrics cho các vòng hiệu chỉnh kích thước Bloom."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pandas as pd


@dataclass(frozen=True)
class TrialRecord:
    trial: int
    m_bits: int
    hits: int
    rate: float
    accepted: bool


@dataclass
class CalibrationMetrics:
    trials: int = 0
    accepted_trials: int = 0
    rejected_trials: int = 0
    stagnations: int = 0
    total_hits: int = 0
    records: List[TrialRecord] = field(default_factory=list)

    def record_trial(self, m_bits: int, hits: int, rate: float, accepted: bool) -> None:
        self.records.append(
            TrialRecord(trial=self.trials, m_bits=m_bits, hits=hits, rate=rate, accepted=accepted)
        )
        self.trials += 1
        self.total_hits += hits
        if accepted:
            self.accepted_trials += 1
        else:
            self.rejected_trials += 1

    def record_stagnation(self) -> None:
        self.stagnations += 1

    def reset(self) -> None:
        self.trials = 0
        self.accepted_trials = 0
        self.rejected_trials = 0
        self.stagnations = 0
        self.total_hits = 0
        self.records = []

    def average_rate(self) -> float:
        if self.trials == 0:
            return 0.0
        return sum(r.rate for r in self.records) / float(self.trials)

    def to_frame(self) -> pd.DataFrame:
        """Bảng các lần thử (mỗi dòng một trial)."""
        columns = ["trial", "m_bits", "hits", "rate", "accepted"]
        return pd.DataFrame(
            [[r.trial, r.m_bits, r.hits, r.rate, r.accepted] for r in self.records],
            columns=columns,
        )
