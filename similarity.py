import logging

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sk_cosine_similarity

from errors import DegenerateInputError

LOGGER = logging.getLogger(__name__)


def cosine_similarity(a, b) -> float:
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.shape != b.shape:
        raise DegenerateInputError(f"Dimension mismatch: {a.shape[0]} vs {b.shape[0]}")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0.0 or norm_b == 0.0:
        raise DegenerateInputError("Cosine similarity is undefined for a zero vector")

    return float(np.dot(a, b) / (norm_a * norm_b))


def stack_embeddings(embeddings) -> np.ndarray:
    """Stack N embeddings into an [N, D] float64 matrix, rejecting ragged, non-finite or zero rows."""
    if len(embeddings) == 0:
        return np.empty((0, 0), dtype=np.float64)

    rows = [np.asarray(e, dtype=np.float64).ravel() for e in embeddings]
    dims = {row.shape[0] for row in rows}
    if len(dims) != 1:
        raise DegenerateInputError(f"Embeddings have differing dimensions: {sorted(dims)}")

    matrix = np.vstack(rows)
    bad_rows = np.flatnonzero(~np.isfinite(matrix).all(axis=1))
    if bad_rows.size:
        raise DegenerateInputError(
            f"Non-finite value in embedding at index {int(bad_rows[0])}"
        )

    norms = np.linalg.norm(matrix, axis=1)
    zero_rows = np.flatnonzero(norms == 0.0)
    if zero_rows.size:
        raise DegenerateInputError(
            f"Zero-norm embedding at index {int(zero_rows[0])}; cosine similarity is undefined"
        )
    return matrix


def pairwise_similarities(embeddings) -> np.ndarray:
    """
    Cosine similarity of every ordered pair of embeddings.

    Returns a flat row-major float64 array of length N*N, addressed as
    ``m[row * N + col]``. The matrix is always complete: diagonal and both
    halves are present even though it is symmetric.
    """
    matrix = stack_embeddings(embeddings)
    n = matrix.shape[0]
    if n == 0:
        return np.empty(0, dtype=np.float64)

    sims = sk_cosine_similarity(matrix)

    # force exact symmetry and range after floating round-off
    sims = (sims + sims.T) / 2.0
    np.clip(sims, -1.0, 1.0, out=sims)
    np.fill_diagonal(sims, 1.0)

    LOGGER.debug("Computed %dx%d similarity matrix", n, n)
    return sims.astype(np.float64).ravel()
