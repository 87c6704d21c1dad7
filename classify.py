import logging
from typing import Callable, List, Optional

import numpy as np
from torchvision import models

from config import DEFAULT_MODEL, MODELS

LOGGER = logging.getLogger(__name__)

TopLabel = Callable[[np.ndarray], Optional[str]]


# -----------------------------
# ImageNet label lookup
# -----------------------------

class ImageNetLabeler:
    """Maps an ImageNet probability vector to the name of its top class."""

    def __init__(self, categories: Optional[List[str]] = None, model_name: str = DEFAULT_MODEL):
        if categories is None:
            _, weights_name = MODELS[model_name]
            categories = models.get_weight(weights_name).meta["categories"]
        self.categories = list(categories)

    def top_label(self, vector) -> Optional[str]:
        vector = np.asarray(vector, dtype=np.float64).ravel()
        if vector.size == 0:
            return None
        class_id = int(np.argmax(vector))
        if class_id >= len(self.categories):
            return None
        return self.categories[class_id]

    __call__ = top_label


# -----------------------------
# Class naming
# -----------------------------

def default_class_names(class_count: int) -> List[str]:
    return [f"Class {i + 1}" for i in range(class_count)]


def mean_embedding(vectors) -> np.ndarray:
    """Element-wise mean of a non-empty list of embeddings."""
    stacked = np.vstack([np.asarray(v, dtype=np.float64).ravel() for v in vectors])
    return stacked.sum(axis=0) / len(vectors)


def class_names(embeddings, table, top_label: Optional[TopLabel] = None,
                gen_names: bool = True) -> List[str]:
    """
    One name per bucket of `table`.

    With gen_names, each non-empty bucket is named after the label of its
    centroid as "{label} ({i})"; a bucket without a label gets "" and an
    empty bucket "Empty class ({i})". Without gen_names (or without a
    labeler) the positional names "Class {i}" are returned.
    """
    if not gen_names or top_label is None:
        return default_class_names(len(table))

    names = []
    for i, row in enumerate(table):
        if not row:
            names.append(f"Empty class ({i + 1})")
            continue

        centroid = mean_embedding([embeddings[index] for index in row])
        label = top_label(centroid)
        LOGGER.debug("Class %d: %d members, label %r", i + 1, len(row), label)
        names.append(f"{label} ({i + 1})" if label is not None else "")

    return names
