"""Shared type definitions for csctl_openstack.

This module contains dataclasses and enums shared across subpackages to
avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum


class BuildMethod(str, Enum):
    """Node image method selected in the cluster stack's csctl.yaml."""

    GET = "get"
    BUILD = "build"


@dataclass(frozen=True)
class BuildInfo:
    """Version metadata of the plugin binary."""

    version: str
    commit: str = "unknown"


@dataclass
class URLRecord:
    """Outcome of recording a download URL in the manifest."""

    url: str
    updated: bool


@dataclass
class PublishResult:
    """Information about an uploaded object."""

    bucket: str
    object_key: str
    size_bytes: int
    sha256: str
    etag: str | None = None


@dataclass
class ImageResult:
    """Per-image outcome of a build run."""

    index: int
    name: str
    image_dir: str
    artifact_path: str
    url: str
    url_updated: bool
    size_bytes: int
    sha256: str
    build_command: str = ""
    build_seconds: float = 0.0


@dataclass
class PipelineResult:
    """Result of a create-node-images run."""

    method: BuildMethod
    manifest_path: str
    release_path: str
    images: list[ImageResult] = field(default_factory=list)


__all__ = [
    "BuildInfo",
    "BuildMethod",
    "ImageResult",
    "PipelineResult",
    "PublishResult",
    "URLRecord",
]
