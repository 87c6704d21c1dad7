import logging
from typing import List, Optional

import numpy as np

from errors import InvalidConfigurationError

LOGGER = logging.getLogger(__name__)

# ClusterTable: K buckets of embedding indices, in assignment order
Table = List[List[int]]


def _check_class_count(class_count: int):
    if class_count < 1:
        raise InvalidConfigurationError(f"class_count must be >= 1, got {class_count}")


# -----------------------------
# Threshold estimation
# -----------------------------

def similarity_threshold(similarities, class_count: int) -> float:
    """
    Heuristic acceptance threshold for the seeding phase.

    The flat similarity array is cut into `class_count` contiguous chunks of
    len // class_count values (remainder dropped). The threshold is the mean
    of the per-chunk maxima averaged with the smallest of those maxima.
    """
    _check_class_count(class_count)

    similarities = np.asarray(similarities, dtype=np.float64).ravel()
    chunk_size = len(similarities) // class_count
    if chunk_size == 0:
        # every chunk is empty, so nothing can be rejected
        LOGGER.debug("Fewer similarities (%d) than classes (%d), threshold -1.0",
                     len(similarities), class_count)
        return -1.0

    max_within_clusters = [
        float(similarities[i * chunk_size:(i + 1) * chunk_size].max())
        for i in range(class_count)
    ]
    min_between_clusters = min(max_within_clusters)

    total = 0.0
    for max_similarity in max_within_clusters:
        total += max_similarity

    threshold = ((total / class_count) + min_between_clusters) / 2.0
    LOGGER.debug("Similarity threshold %.6f (chunk size %d)", threshold, chunk_size)
    return threshold


# -----------------------------
# Greedy assignment
# -----------------------------

def _lookup(similarities, first_index: int, embedding_index: int, embedding_count: int) -> Optional[float]:
    # row major offset; None when the offset falls outside the array
    offset = first_index + embedding_index * embedding_count
    if 0 <= offset < len(similarities):
        return float(similarities[offset])
    LOGGER.debug("Similarity offset %d out of range (len %d)", offset, len(similarities))
    return None


def cluster_embeddings(similarities, embedding_count: int, class_count: int,
                       threshold: Optional[float] = None) -> Table:
    """
    Partition embedding indices 0..embedding_count-1 into `class_count` buckets.

    Phase 1 walks the embeddings in order and puts each one into the first
    bucket that is empty or whose first member is at least `threshold`
    similar. It stops after `class_count` assignments in total, so some
    buckets may never be seeded.

    Phase 2 puts every remaining embedding into the non-empty bucket whose
    first member is most similar (ties keep the lower bucket).

    Only first members are compared, never centroids.
    """
    _check_class_count(class_count)
    if embedding_count < 0:
        raise InvalidConfigurationError(f"embedding_count must be >= 0, got {embedding_count}")

    similarities = np.asarray(similarities, dtype=np.float64).ravel()
    if len(similarities) != embedding_count * embedding_count:
        LOGGER.warning("Similarity array has %d values, expected %d",
                       len(similarities), embedding_count * embedding_count)

    if threshold is None:
        threshold = similarity_threshold(similarities, class_count)

    clusters: Table = [[] for _ in range(class_count)]
    assigned_count = 0
    overflow_start = 0

    # Phase 1: seeding
    # While assigned_count < class_count at least one bucket is still empty,
    # so every index visited here lands somewhere.
    for embedding_index in range(embedding_count):
        if assigned_count >= class_count:
            break

        for class_index in range(class_count):
            row = clusters[class_index]
            if row:
                similarity = _lookup(similarities, row[0], embedding_index, embedding_count)
                if similarity is None or similarity < threshold:
                    continue

            row.append(embedding_index)
            assigned_count += 1
            break

        overflow_start = embedding_index + 1

    LOGGER.debug("Seeding assigned %d embeddings, overflow starts at %d",
                 assigned_count, overflow_start)

    # Phase 2: overflow best fit
    for embedding_index in range(overflow_start, embedding_count):
        # -1.0 is the similarity of opposing vectors, any real match beats it
        best_class, best_similarity = 0, -1.0

        for class_index in range(class_count):
            row = clusters[class_index]
            if not row:
                continue
            similarity = _lookup(similarities, row[0], embedding_index, embedding_count)
            if similarity is not None and similarity > best_similarity:
                best_class, best_similarity = class_index, similarity

        clusters[best_class].append(embedding_index)

    return clusters
