"""Đọc dãy chuỗi có thứ tự từ file (text theo dòng hoặc một cột CSV)."""
from __future__ import annotations

import os
from typing import Iterable, List

import pandas as pd


def _dedupe(values: Iterable[str]) -> List[str]:
    """Khử trùng lặp, giữ thứ tự xuất hiện đầu tiên."""
    seen: set[str] = set()
    out: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out


def read_tokens(path: str, split_words: bool = False, unique: bool = True) -> List[str]:
    """Đọc file text: mỗi dòng một chuỗi (hoặc tách theo khoảng trắng), bỏ dòng trống."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Source not found: {path}")

    tokens: List[str] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            if split_words:
                tokens.extend(line.split())
            else:
                tokens.append(line)
    return _dedupe(tokens) if unique else tokens


def read_column(path: str, column: str, unique: bool = True) -> List[str]:
    """Đọc một cột của file CSV thành danh sách chuỗi (bỏ giá trị rỗng)."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Source not found: {path}")

    df = pd.read_csv(path, low_memory=False)
    if column not in df.columns:
        raise KeyError(f"Column '{column}' not in {list(df.columns)}")
    values = df[column].dropna().astype(str).tolist()
    return _dedupe(values) if unique else values
