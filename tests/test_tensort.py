"""Tests for the command-line pipeline with injected collaborators."""

import os

import pytest

pytest.importorskip("numpy")
pytest.importorskip("torch")

import numpy as np

from tensort import main, parse_args

COLORS = {
    "red": np.array([1.0, 0.0, 0.0]),
    "blue": np.array([0.0, 1.0, 0.0]),
}


class ColorEmbedder:
    """Embeds files by the color named in their file name."""

    def embed(self, path):
        name = os.path.basename(path)
        for color, vector in COLORS.items():
            if color in name:
                return vector
        raise ValueError(f"no color in {name}")


def color_label(vector):
    return "red" if vector[0] > vector[1] else "blue"


@pytest.fixture
def target(tmp_path):
    for name in ["a_red.jpg", "b_blue.jpg", "c_red.jpg", "d_broken.jpg", "notes.txt"]:
        (tmp_path / name).write_bytes(b"x")
    return tmp_path


def test_parse_args_defaults(tmp_path):
    config = parse_args([str(tmp_path), "3"])

    assert config.class_count == 3
    assert config.gen_names
    assert not config.dry_run
    assert not parse_args([str(tmp_path), "3", "--no-names"]).gen_names


@pytest.mark.parametrize("count", ["0", "-2", "three"])
def test_parse_args_rejects_bad_class_count(tmp_path, count):
    with pytest.raises(SystemExit):
        parse_args([str(tmp_path), count])


def test_main_sorts_into_named_directories(target, capsys):
    code = main([str(target), "2"], embedder=ColorEmbedder(), labeler=color_label)

    assert code == 0
    assert sorted(os.listdir(target / "red (1)")) == ["a_red.jpg", "c_red.jpg"]
    assert os.listdir(target / "blue (2)") == ["b_blue.jpg"]
    # failed and non-image files stay where they were
    assert (target / "d_broken.jpg").exists()
    assert (target / "notes.txt").exists()

    out = capsys.readouterr().out
    assert "The following images failed to process:" in out
    assert "d_broken.jpg" in out


def test_main_no_names(target):
    code = main([str(target), "2", "-n"], embedder=ColorEmbedder())

    assert code == 0
    assert sorted(os.listdir(target / "Class 1")) == ["a_red.jpg", "c_red.jpg"]
    assert os.listdir(target / "Class 2") == ["b_blue.jpg"]


def test_main_dry_run_moves_nothing(target):
    code = main([str(target), "2", "--dry-run"], embedder=ColorEmbedder(), labeler=color_label)

    assert code == 0
    assert not (target / "red (1)").exists()
    assert (target / "a_red.jpg").exists()


def test_main_not_a_directory(tmp_path, capsys):
    code = main([str(tmp_path / "missing"), "2"], embedder=ColorEmbedder(), labeler=color_label)

    assert code == 1
    assert "not a directory" in capsys.readouterr().err


def test_main_without_images(tmp_path, capsys):
    code = main([str(tmp_path), "2"], embedder=ColorEmbedder(), labeler=color_label)

    assert code == 0
    assert "No images to sort." in capsys.readouterr().out


def test_main_reports_failed_move(tmp_path, capsys):
    """A class directory that cannot be created ends the run with exit code 1."""
    (tmp_path / "a_red.jpg").write_bytes(b"x")
    (tmp_path / "Class 1").write_text("a file, not a directory")

    code = main([str(tmp_path), "1", "-n"], embedder=ColorEmbedder())

    assert code == 1
    assert "Could not create" in capsys.readouterr().err
    assert (tmp_path / "a_red.jpg").exists()


def test_main_checks_target_before_loading_model(tmp_path, monkeypatch):
    """A missing target is rejected without building the default embedder."""
    import tensort

    def no_model(*args, **kwargs):
        raise AssertionError("model must not be loaded")

    monkeypatch.setattr(tensort, "ImageEmbedder", no_model)

    assert main([str(tmp_path / "missing"), "3"]) == 1
