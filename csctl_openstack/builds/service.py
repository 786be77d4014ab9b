"""Build service module.

This module provides the high-level node image API:
- create_node_images(): Main entry point used by the CLI
- Passthrough of an existing manifest (method "get")
- Build, upload and URL recording for every image (method "build")

Steps run strictly in sequence and the first error aborts the run. Images
published before a failure stay published and their URLs stay recorded.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from csctl_openstack.builds.artifacts import locate_artifact
from csctl_openstack.builds.runner import run_build
from csctl_openstack.clusterstack import load_csctl_config, resolve_build_method
from csctl_openstack.config import get_settings
from csctl_openstack.errors import (
    MissingResourceError,
    PipelineError,
    ValidationError,
)
from csctl_openstack.nodeimages.io import load_node_images
from csctl_openstack.nodeimages.updater import record_url
from csctl_openstack.registry.io import load_registry_config
from csctl_openstack.registry.publisher import publish_artifact
from csctl_openstack.types import BuildMethod, ImageResult, PipelineResult

if TYPE_CHECKING:
    from csctl_openstack.config import Settings
    from csctl_openstack.nodeimages.schema import NodeImages
    from csctl_openstack.registry.schema import RegistryConfig

logger = logging.getLogger(__name__)


def copy_to_release(manifest_path: Path, release_dir: Path, file_name: str) -> Path:
    """Copy the manifest verbatim into the release directory.

    Args:
        manifest_path: Node image manifest.
        release_dir: Release directory (must exist).
        file_name: File name of the copy.

    Returns:
        Path of the copy.

    Raises:
        MissingResourceError: If the release directory does not exist.
        PipelineError: If the copy fails.
    """
    if not release_dir.is_dir():
        raise MissingResourceError(
            f"Release directory does not exist: {release_dir}", path=str(release_dir)
        )
    dest = release_dir / file_name
    try:
        shutil.copyfile(manifest_path, dest)
    except OSError as e:
        raise PipelineError(
            f"Error copying {manifest_path.name} to release directory: {e}",
            code="copy_error",
        ) from e
    logger.info("%s copied to release directory as %s", manifest_path.name, file_name)
    return dest


def validate_image_dirs(doc: NodeImages, node_images_dir: Path) -> list[Path]:
    """Check that every image has an existing template directory.

    All images are checked before the first build starts.

    Args:
        doc: Validated manifest.
        node_images_dir: Directory that holds the image directories.

    Returns:
        Template directory of each image, in manifest order.

    Raises:
        ValidationError: If an image has no imageDir.
        MissingResourceError: If an image directory does not exist.
    """
    template_dirs: list[Path] = []
    for index, image in enumerate(doc.open_stack_node_images):
        if not image.image_dir:
            raise ValidationError(
                f"image {index}: no images to build, image directory is not "
                "defined in the node images config"
            )
        template_dir = node_images_dir / image.image_dir
        if not template_dir.is_dir():
            raise MissingResourceError(
                f"Image folder {template_dir} does not exist", path=str(template_dir)
            )
        template_dirs.append(template_dir)
    return template_dirs


def build_and_publish(
    manifest_path: Path,
    doc: NodeImages,
    registry: RegistryConfig,
    node_images_dir: Path,
    settings: Settings,
) -> list[ImageResult]:
    """Build, upload and record every image of the manifest in order.

    The upload always happens, even when the image already has a URL; only
    the URL write is skipped in that case.

    Args:
        manifest_path: Node image manifest (rewritten as URLs are recorded).
        doc: Manifest as loaded at the start of the run.
        registry: Registry descriptor.
        node_images_dir: Directory that holds the image directories.
        settings: Plugin settings.

    Returns:
        Per-image results.

    Raises:
        PipelineError: On the first failing step.
    """
    template_dirs = validate_image_dirs(doc, node_images_dir)

    results: list[ImageResult] = []
    total = len(doc.open_stack_node_images)
    for index, (image, template_dir) in enumerate(
        zip(doc.open_stack_node_images, template_dirs, strict=True)
    ):
        image_dir = image.image_dir or ""
        name = image.create_opts.name if image.create_opts else image_dir
        logger.info("Building image %d/%d: %s", index + 1, total, image_dir)

        build = run_build(
            template_dir=template_dir,
            build_name=image_dir,
            output_directory=settings.output_directory,
            builder_command=settings.builder_command,
        )

        artifact_path = locate_artifact(settings.output_directory, image_dir)

        published = publish_artifact(artifact_path, image_dir, registry)

        record = record_url(
            manifest_path,
            registry,
            index,
            image_dir,
            require_visibility=settings.require_visibility,
        )
        if not record.updated:
            logger.info("URL already exists for image %s, left unchanged", image_dir)

        results.append(
            ImageResult(
                index=index,
                name=name,
                image_dir=image_dir,
                artifact_path=str(artifact_path),
                url=record.url,
                url_updated=record.updated,
                size_bytes=published.size_bytes,
                sha256=published.sha256,
                build_command=build.command,
                build_seconds=build.duration_seconds,
            )
        )
    return results


def create_node_images(
    cluster_stack_dir: Path,
    release_dir: Path,
    registry_config_path: Path | None = None,
    settings: Settings | None = None,
) -> PipelineResult:
    """Create the node images of a cluster stack release.

    Args:
        cluster_stack_dir: Cluster stack directory containing csctl.yaml and
            the node images directory.
        release_dir: Release directory receiving the manifest copy.
        registry_config_path: Registry descriptor; required for "build".
        settings: Plugin settings; uses defaults if not provided.

    Returns:
        PipelineResult of the run.

    Raises:
        PipelineError: On the first failing step.
    """
    if settings is None:
        settings = get_settings()

    csctl_config = load_csctl_config(cluster_stack_dir)

    node_images_dir = cluster_stack_dir / settings.node_images_dir_name
    manifest_path = node_images_dir / settings.manifest_file_name
    doc = load_node_images(manifest_path, require_visibility=settings.require_visibility)

    method = resolve_build_method(csctl_config)

    if not release_dir.is_dir():
        raise MissingResourceError(
            f"Release directory does not exist: {release_dir}", path=str(release_dir)
        )

    images: list[ImageResult] = []
    if method is BuildMethod.BUILD:
        if registry_config_path is None:
            raise ValidationError(
                "A node image registry config is required for method 'build'"
            )
        registry = load_registry_config(registry_config_path)
        images = build_and_publish(
            manifest_path, doc, registry, node_images_dir, settings
        )

    release_path = copy_to_release(
        manifest_path, release_dir, settings.release_file_name
    )

    return PipelineResult(
        method=method,
        manifest_path=str(manifest_path),
        release_path=str(release_path),
        images=images,
    )


__all__ = [
    "build_and_publish",
    "copy_to_release",
    "create_node_images",
    "validate_image_dirs",
]
