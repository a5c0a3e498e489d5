"""
Vector similarity primitives shared by every search strategy.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two equal-length vectors.

    Returns NaN when either vector has zero magnitude; callers filter through
    :func:`meets_threshold`, which rejects NaN.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector shapes differ: {va.shape} vs {vb.shape}")
    magnitude = np.linalg.norm(va) * np.linalg.norm(vb)
    if magnitude == 0.0:
        return math.nan
    return float(np.dot(va, vb) / magnitude)


def cosine_similarities(query: Sequence[float], rows: Sequence[Sequence[float]]) -> np.ndarray:
    """Cosine of *query* against every row, as one matrix product.

    Rows with zero magnitude (or a zero query) score NaN.
    """
    q = np.asarray(query, dtype=np.float64)
    if len(rows) == 0:
        return np.empty(0, dtype=np.float64)
    matrix = np.asarray(rows, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != q.shape[0]:
        raise ValueError(f"Cannot score {matrix.shape} rows against a {q.shape} query")

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    with np.errstate(divide="ignore", invalid="ignore"):
        similarities = (matrix @ q) / norms
    similarities[norms == 0.0] = np.nan
    return similarities


def meets_threshold(similarity: float, threshold: float) -> bool:
    """Inclusive threshold check. NaN never passes."""
    return bool(similarity >= threshold)


def blend(a: Sequence[float], b: Sequence[float], weight_a: float, weight_b: float) -> list[float]:
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Vector shapes differ: {va.shape} vs {vb.shape}")
    return (weight_a * va + weight_b * vb).tolist()
