"""Recording download URLs in the node image manifest.

The manifest is re-read from disk on every call so that URLs recorded by
earlier iterations of the same run are seen. A URL, once recorded, is never
replaced.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from csctl_openstack.errors import UpdateError, ValidationError
from csctl_openstack.nodeimages.io import load_node_images, save_node_images
from csctl_openstack.types import URLRecord

if TYPE_CHECKING:
    from csctl_openstack.registry.schema import RegistryConfig

logger = logging.getLogger(__name__)


def compose_image_url(registry: RegistryConfig, image_key: str) -> str:
    """Compose the public download URL of an uploaded image.

    Args:
        registry: Registry descriptor (endpoint already without scheme).
        image_key: Object key of the image in the bucket.

    Returns:
        URL of the form ``https://{endpoint}/{bucket}/{key}``.
    """
    endpoint = registry.config.endpoint.rstrip("/")
    bucket = registry.config.bucket.strip("/")
    key = image_key.lstrip("/")
    return f"https://{endpoint}/{bucket}/{key}"


def record_url(
    manifest_path: Path,
    registry: RegistryConfig,
    image_index: int,
    image_key: str,
    require_visibility: bool = True,
) -> URLRecord:
    """Record the download URL of a published image in the manifest.

    Args:
        manifest_path: Path to the node image manifest.
        registry: Registry descriptor the image was uploaded to.
        image_index: Position of the image in the manifest.
        image_key: Object key of the uploaded image.
        require_visibility: Validation rule used when re-reading the manifest.

    Returns:
        URLRecord with the effective URL and whether the file was written.

    Raises:
        UpdateError: If the manifest cannot be read, parsed or written, or the
            index does not address an image.
    """
    try:
        doc = load_node_images(manifest_path, require_visibility=require_visibility)
    except ValidationError as e:
        raise UpdateError(f"failed to read {manifest_path}: {e}") from e

    images = doc.open_stack_node_images
    if not 0 <= image_index < len(images):
        raise UpdateError(
            f"image index {image_index} out of range for {manifest_path} "
            f"({len(images)} images)"
        )

    image = images[image_index]
    if image.has_url:
        logger.info("URL already exists for image %d: %s", image_index, image.url)
        return URLRecord(url=image.url, updated=False)

    image.url = compose_image_url(registry, image_key)
    try:
        save_node_images(doc, manifest_path)
    except OSError as e:
        raise UpdateError(f"failed to write {manifest_path}: {e}") from e

    logger.info("URL updated for image %d: %s", image_index, image.url)
    return URLRecord(url=image.url, updated=True)


__all__ = ["compose_image_url", "record_url"]
