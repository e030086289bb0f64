"""Unit tests for ArtifactLocator.

Uses a real temporary deploy tree; mtimes are set explicitly so the
tie-break is deterministic.
"""
import os
import pytest
from pathlib import Path

from vistadeploy.core import RealFileSystemService
from vistadeploy.utils.locator import ArtifactLocator

PATTERN = "vista-web-ui_*.ipk"


def make_ipk(root: Path, relative: str, mtime: float) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"ipk")
    os.utime(path, (mtime, mtime))
    return path


class TestFind:
    """Test ArtifactLocator.find."""

    def test_empty_directory_returns_none(self, tmp_path):
        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find(tmp_path, PATTERN) is None

    def test_missing_directory_returns_none(self, tmp_path):
        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find(tmp_path / "does-not-exist", PATTERN) is None

    def test_non_matching_files_ignored(self, tmp_path):
        make_ipk(tmp_path, "cortexa53/other-package_1.0.ipk", 1000)
        make_ipk(tmp_path, "cortexa53/vista-web-ui-dev_1.0.ipk", 1000)

        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find(tmp_path, PATTERN) is None

    def test_finds_artifact_in_nested_directory(self, tmp_path):
        ipk = make_ipk(tmp_path, "cortexa53/vista-web-ui_1.2.3.ipk", 1000)

        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find(tmp_path, PATTERN) == ipk

    def test_newest_wins_by_default(self, tmp_path):
        make_ipk(tmp_path, "a/vista-web-ui_1.2.4.ipk", 1000)
        newer = make_ipk(tmp_path, "b/vista-web-ui_1.2.3.ipk", 2000)

        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find(tmp_path, PATTERN) == newer

    def test_equal_mtime_breaks_tie_by_path(self, tmp_path):
        make_ipk(tmp_path, "a/vista-web-ui_1.0.0.ipk", 1000)
        last = make_ipk(tmp_path, "b/vista-web-ui_1.0.0.ipk", 1000)

        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find(tmp_path, PATTERN) == last

    def test_lexicographic_order_ignores_mtime(self, tmp_path):
        highest = make_ipk(tmp_path, "x/vista-web-ui_1.2.9.ipk", 1000)
        make_ipk(tmp_path, "x/vista-web-ui_1.2.3.ipk", 5000)

        locator = ArtifactLocator(RealFileSystemService(), order='lexicographic')
        assert locator.find(tmp_path, PATTERN) == highest

    def test_directories_matching_pattern_are_not_artifacts(self, tmp_path):
        (tmp_path / "vista-web-ui_1.0.ipk").mkdir()

        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find(tmp_path, PATTERN) is None


class TestFindAll:
    """Test ArtifactLocator.find_all ordering."""

    def test_returns_best_first(self, tmp_path):
        old = make_ipk(tmp_path, "vista-web-ui_1.ipk", 1000)
        mid = make_ipk(tmp_path, "vista-web-ui_2.ipk", 2000)
        new = make_ipk(tmp_path, "vista-web-ui_3.ipk", 3000)

        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find_all(tmp_path, PATTERN) == [new, mid, old]

    def test_missing_directory_returns_empty_list(self, tmp_path):
        locator = ArtifactLocator(RealFileSystemService())
        assert locator.find_all(tmp_path / "nope", PATTERN) == []


def test_unknown_order_rejected():
    with pytest.raises(ValueError):
        ArtifactLocator(RealFileSystemService(), order='random')
