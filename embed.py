import logging
import os
from dataclasses import dataclass, field
from typing import List, Protocol

import numpy as np
import torch
from PIL import Image
from torchvision import models, transforms

from config import DEFAULT_MODEL, DEVICE, IMAGE_EXTENSIONS, MODELS
from errors import EmbeddingError, InvalidArgumentError

LOGGER = logging.getLogger(__name__)


class Embeddable(Protocol):
    """Anything that turns an image file into an embedding vector."""

    def embed(self, path: str) -> np.ndarray:
        ...


# -----------------------------
# Preprocessing
# -----------------------------
preprocess_224 = transforms.Compose([
    transforms.Resize((224, 224)),
    transforms.ToTensor(),
    transforms.Normalize(
        mean=[0.485, 0.456, 0.406],
        std=[0.229, 0.224, 0.225]
    )
])


# -----------------------------
# ImageNet classifier as embedding model
# -----------------------------

class ImageEmbedder:
    """
    Embeds an image as the softmax output of an ImageNet classifier.

    The embedding is the 1000-class probability vector, so the centroid of a
    group of embeddings can be read back as an ImageNet label.
    """

    def __init__(self, model=None, preprocess=None, model_name=DEFAULT_MODEL, device=DEVICE):
        if model is None:
            builder, weights_name = MODELS[model_name]
            weights = models.get_weight(weights_name)
            model = models.get_model(builder, weights=weights)
            if preprocess is None:
                preprocess = weights.transforms()

        self.device = device
        self.model = model.to(device)
        self.model.eval()
        self.preprocess = preprocess if preprocess is not None else preprocess_224

    def embed(self, path: str) -> np.ndarray:
        try:
            img = Image.open(path).convert("RGB")
            x = self.preprocess(img).unsqueeze(0).to(self.device)

            with torch.no_grad():
                logits = self.model(x)
                probs = torch.softmax(logits, dim=1)[0]
        except (OSError, RuntimeError, ValueError) as e:
            raise EmbeddingError(path, e) from e

        return probs.cpu().numpy().astype(np.float64)

    def __str__(self):
        return f"Neural network running on device: {self.device}"


# -----------------------------
# Directory scan
# -----------------------------

@dataclass
class EmbeddingResult:
    embeddings: List[np.ndarray] = field(default_factory=list)
    image_paths: List[str] = field(default_factory=list)
    missed_image_paths: List[str] = field(default_factory=list)


def is_image(path: str) -> bool:
    return path.lower().endswith(IMAGE_EXTENSIONS)


def collect_image_paths(directory: str) -> List[str]:
    if not os.path.isdir(directory):
        raise InvalidArgumentError(f"Path supplied is not a directory: {directory}")

    paths = []
    for f in sorted(os.listdir(directory)):
        full = os.path.join(directory, f)
        if os.path.isfile(full) and is_image(f):
            paths.append(full)
    return paths


def gen_image_embeddings(directory: str, embedder: Embeddable, progress: bool = False) -> EmbeddingResult:
    """Embed every image in `directory`; images that fail are reported, not fatal."""
    image_paths = collect_image_paths(directory)
    result = EmbeddingResult()

    for i, path in enumerate(image_paths):
        try:
            emb = embedder.embed(path)
        except Exception as e:
            LOGGER.debug("Embedding failed for %s: %s", path, e)
            if progress:
                print(f"[Embed] FAILED: {path} → {e}")
            result.missed_image_paths.append(path)
            continue

        result.embeddings.append(emb)
        result.image_paths.append(path)
        if progress:
            print(f"[Embed] {i+1}/{len(image_paths)}: {path}")

    return result
