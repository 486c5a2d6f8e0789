# utils/similarity_utils.py

"""
Vector math for the in-memory index.

Vectors are L2-normalised once, on insert, so cosine similarity between a
query and every indexed chunk is a single matrix-vector product.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np


def normalize_rows(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Return a float32 matrix whose rows have unit L2 norm.

    Zero rows stay zero (their similarity to anything is 0).

    Raises:
        ValueError: If rows have different lengths or contain NaN/inf
    """
    matrix = np.asarray(vectors, dtype=np.float32)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D array of vectors, got shape {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise ValueError("Embedding contains NaN or infinite values")
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return matrix / norms


def cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of a normalised query against every normalised row."""
    return matrix @ query


def maximal_marginal_relevance(
    relevance: np.ndarray,
    matrix: np.ndarray,
    k: int,
    diversity_weight: float = 0.75,
    fetch_k: Optional[int] = None,
) -> List[Tuple[int, float]]:
    """
    Greedy diversity-aware selection.

    At every step the candidate maximising

        diversity_weight * relevance[c] - (1 - diversity_weight) * max_sim(c, selected)

    is picked, until k rows are chosen or candidates run out. With nothing
    selected yet the redundancy term is 0, so the first pick is always the
    most relevant row.

    Args:
        relevance: Cosine similarity of each row to the query, shape (n,)
        matrix: Normalised row vectors, shape (n, d)
        k: Number of rows to select
        diversity_weight: 1.0 = pure relevance, 0.0 = pure diversity
        fetch_k: Optional number of most relevant rows to consider at all

    Returns:
        List of (row index, selection score) pairs in selection order
    """
    if not 0.0 <= diversity_weight <= 1.0:
        raise ValueError(f"diversity_weight must be within [0, 1], got {diversity_weight}")

    n = relevance.shape[0]
    if n == 0 or k <= 0:
        return []

    # Stable sort keeps insertion order among equally relevant rows
    candidates = list(np.argsort(-relevance, kind="stable"))
    if fetch_k is not None:
        candidates = candidates[: max(fetch_k, k)]

    selected: List[Tuple[int, float]] = []
    # Highest similarity between each row and anything selected so far
    redundancy = np.full(n, -np.inf, dtype=np.float32)

    while candidates and len(selected) < k:
        cand = np.asarray(candidates)
        penalty = np.where(np.isfinite(redundancy[cand]), redundancy[cand], 0.0)
        scores = diversity_weight * relevance[cand] - (1.0 - diversity_weight) * penalty
        best_pos = int(np.argmax(scores))
        best = int(cand[best_pos])

        selected.append((best, float(scores[best_pos])))
        candidates.pop(best_pos)
        redundancy = np.maximum(redundancy, matrix @ matrix[best])

    return selected
