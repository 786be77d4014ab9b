"""Tests for locating and hashing built images."""

import hashlib
from pathlib import Path

import pytest

from csctl_openstack.builds.artifacts import (
    compute_file_hash,
    expected_artifact_path,
    locate_artifact,
)
from csctl_openstack.errors import MissingResourceError


class TestComputeFileHash:
    """Tests for compute_file_hash."""

    def test_hash(self, tmp_path):
        """Should match hashlib over the whole content."""
        content = b"x" * 200_000
        path = tmp_path / "image"
        path.write_bytes(content)
        assert compute_file_hash(path) == hashlib.sha256(content).hexdigest()

    def test_small_chunks(self, tmp_path):
        """Chunk size should not change the digest."""
        path = tmp_path / "image"
        path.write_bytes(b"abcdef")
        assert compute_file_hash(path, chunk_size=2) == hashlib.sha256(b"abcdef").hexdigest()


class TestLocateArtifact:
    """Tests for expected_artifact_path and locate_artifact."""

    def test_expected_path(self, tmp_path):
        """Should join cwd, output directory and image directory."""
        path = expected_artifact_path(Path("./output"), "ubuntu-2204", cwd=tmp_path)
        assert path == tmp_path / "output" / "ubuntu-2204"

    def test_defaults_to_cwd(self, tmp_path, monkeypatch):
        """Should resolve a relative output directory against the cwd."""
        monkeypatch.chdir(tmp_path)
        path = expected_artifact_path(Path("output"), "img")
        assert path == tmp_path / "output" / "img"

    def test_locate_existing(self, tmp_path):
        """Should return the artifact path when the file exists."""
        artifact = tmp_path / "output" / "ubuntu-2204"
        artifact.parent.mkdir()
        artifact.write_bytes(b"image")
        assert locate_artifact(Path("output"), "ubuntu-2204", cwd=tmp_path) == artifact

    def test_locate_missing(self, tmp_path):
        """Should raise MissingResourceError when nothing was built."""
        with pytest.raises(MissingResourceError) as exc_info:
            locate_artifact(Path("output"), "ubuntu-2204", cwd=tmp_path)
        assert exc_info.value.path == str(tmp_path / "output" / "ubuntu-2204")

    def test_locate_directory_is_not_artifact(self, tmp_path):
        """A directory at the expected path is not an artifact."""
        (tmp_path / "output" / "ubuntu-2204").mkdir(parents=True)
        with pytest.raises(MissingResourceError):
            locate_artifact(Path("output"), "ubuntu-2204", cwd=tmp_path)
