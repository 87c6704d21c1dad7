"""Tests for class naming from bucket centroids."""

import pytest

pytest.importorskip("numpy")
pytest.importorskip("torchvision")

import numpy as np

from classify import ImageNetLabeler, class_names, default_class_names, mean_embedding
from clustering import cluster_embeddings
from similarity import pairwise_similarities


def test_default_class_names():
    assert default_class_names(5) == ["Class 1", "Class 2", "Class 3", "Class 4", "Class 5"]
    assert default_class_names(0) == []


def test_mean_embedding():
    mean = mean_embedding([np.array([1.0, 2.0]), np.array([3.0, 6.0])])
    np.testing.assert_allclose(mean, [2.0, 4.0])


def test_class_names_uses_centroid_label():
    """The labeler sees the element-wise mean of the bucket members."""
    embeddings = [np.array([1.0, 0.0]), np.array([0.0, 1.0]), np.array([0.6, 0.4])]
    seen = []

    def top_label(vector):
        seen.append(vector)
        return "left" if vector[0] > vector[1] else "right"

    names = class_names(embeddings, [[0, 2], [1]], top_label=top_label)

    assert names == ["left (1)", "right (2)"]
    np.testing.assert_allclose(seen[0], [0.8, 0.2])


def test_class_names_empty_bucket_and_missing_label():
    embeddings = [np.array([1.0, 0.0])]
    names = class_names(embeddings, [[], [0]], top_label=lambda v: None)
    assert names == ["Empty class (1)", ""]


def test_class_names_without_generation_skips_labeler():
    def top_label(vector):
        raise AssertionError("labeler must not be called")

    names = class_names([np.ones(2)], [[0], []], top_label=top_label, gen_names=False)
    assert names == ["Class 1", "Class 2"]


def test_class_names_without_labeler_falls_back():
    assert class_names([np.ones(2)], [[0]]) == ["Class 1"]


def test_imagenet_labeler_custom_categories():
    labeler = ImageNetLabeler(categories=["cat", "dog"])

    assert labeler.top_label([0.2, 0.8]) == "dog"
    assert labeler([0.9, 0.1]) == "cat"
    assert labeler.top_label([]) is None
    assert labeler.top_label([0.0, 0.0, 1.0]) is None


def test_imagenet_labels_end_to_end():
    """One-hot ImageNet vectors for class 0 and 1 are named tench and goldfish."""
    a = np.zeros(1000)
    a[0] = 1.0
    b = np.zeros(1000)
    b[1] = 1.0
    embeddings = [a, b]

    table = cluster_embeddings(pairwise_similarities(embeddings), 2, 2)
    assert table == [[0], [1]]

    names = class_names(embeddings, table, top_label=ImageNetLabeler())

    assert len(names) == 2
    assert "tench" in names[0]
    assert "goldfish" in names[1]
    assert names[0].endswith("(1)")
    assert names[1].endswith("(2)")
