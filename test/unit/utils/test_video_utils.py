import os

import pytest

from utils.video_utils import build_output_path, clamp_quality, remove_partial_output


@pytest.mark.parametrize(
    "quality, expected",
    [(-10, 0), (0, 0), (20, 20), (63, 63), (64, 63), (1000, 63)],
)
def test_clamp_quality(quality, expected):
    assert clamp_quality(quality) == expected


def test_output_path_defaults_to_input_directory(tmp_path):
    src = tmp_path / "clip.mov"
    assert build_output_path(str(src), "") == str(tmp_path / "clip.webm")


def test_output_path_uses_given_folder(tmp_path):
    src = tmp_path / "in" / "clip.mov"
    out_dir = tmp_path / "out"
    assert build_output_path(str(src), str(out_dir)) == str(out_dir / "clip.webm")


def test_output_path_keeps_dotted_base_name(tmp_path):
    src = tmp_path / "logo.v2.final.mov"
    assert build_output_path(str(src), None) == str(tmp_path / "logo.v2.final.webm")


def test_remove_partial_output(tmp_path):
    target = tmp_path / "clip.webm"
    target.write_bytes(b"partial")

    assert remove_partial_output(str(target)) is True
    assert not target.exists()
    # Nothing left to remove
    assert remove_partial_output(str(target)) is False


def test_remove_partial_output_logs_failure(monkeypatch, tmp_path):
    target = tmp_path / "clip.webm"
    target.write_bytes(b"partial")

    def deny(path):
        raise PermissionError("file in use")

    monkeypatch.setattr(os, "remove", deny)
    assert remove_partial_output(str(target)) is False
