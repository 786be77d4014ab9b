"""Locating and fingerprinting builder output.

The builder is expected to write each image to
``{output_directory}/{imageDir}`` relative to the working directory. This
naming is a convention shared with the packer templates of the cluster
stack.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from csctl_openstack.errors import MissingResourceError

logger = logging.getLogger(__name__)

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB


def compute_file_hash(
    file_path: Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks for streaming hash.

    Returns:
        SHA-256 hex digest.
    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def expected_artifact_path(
    output_directory: Path,
    image_dir: str,
    cwd: Path | None = None,
) -> Path:
    """Return where the builder writes the image for ``image_dir``.

    Args:
        output_directory: Builder output directory (relative or absolute).
        image_dir: Image directory name from the manifest.
        cwd: Base for a relative output directory (default: current directory).

    Returns:
        Absolute path of the expected artifact.
    """
    base = cwd if cwd is not None else Path.cwd()
    return base / output_directory / image_dir


def locate_artifact(
    output_directory: Path,
    image_dir: str,
    cwd: Path | None = None,
) -> Path:
    """Find the artifact produced for an image.

    Args:
        output_directory: Builder output directory.
        image_dir: Image directory name from the manifest.
        cwd: Base for a relative output directory.

    Returns:
        Path to the artifact file.

    Raises:
        MissingResourceError: If the builder left no file at the expected path.
    """
    path = expected_artifact_path(output_directory, image_dir, cwd=cwd)
    if not path.is_file():
        raise MissingResourceError(
            f"Built image not found at {path}; the builder must write the image "
            f"named after its directory '{image_dir}'",
            path=str(path),
        )
    logger.debug("Located artifact %s (%d bytes)", path, path.stat().st_size)
    return path


__all__ = [
    "HASH_CHUNK_SIZE",
    "compute_file_hash",
    "expected_artifact_path",
    "locate_artifact",
]
