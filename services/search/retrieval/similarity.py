"""Vector similarity helpers for semantic search."""

import logging
import math
from typing import Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

VectorLike = Union[np.ndarray, Sequence[float]]


def clamp_similarity(value: Optional[float]) -> Optional[float]:
    """Bound a similarity to [-1, 1].

    NaN and infinities (e.g. pgvector's distance to a zero vector) are not
    comparable and yield None.
    """
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return max(-1.0, min(1.0, value))


def cosine_similarity(query_vector: VectorLike, candidate: VectorLike) -> Optional[float]:
    """Compute the cosine similarity between two vectors.

    Args:
        query_vector: Query embedding.
        candidate: Stored item embedding.

    Returns:
        Similarity in [-1, 1], or None when the vectors are not comparable
        (different dimensionality, a zero vector or non-finite values).
    """
    a = np.asarray(query_vector, dtype=np.float32)
    b = np.asarray(candidate, dtype=np.float32)

    if a.ndim != 1 or a.shape != b.shape:
        logger.debug(f"Skipping embedding with shape {b.shape}, query shape {a.shape}")
        return None

    denominator = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denominator == 0.0:
        return None

    return clamp_similarity(float(np.dot(a, b)) / denominator)
