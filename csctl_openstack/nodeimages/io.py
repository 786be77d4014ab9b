"""Node image manifest load/save functionality.

This module reads the node image manifest from YAML, validates it and
writes it back. Writes replace the whole file atomically so a reader never
sees a half-written manifest.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from csctl_openstack.errors import ValidationError
from csctl_openstack.nodeimages.schema import NodeImages

logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def parse_node_images(
    data: dict[str, Any],
    require_visibility: bool = True,
) -> NodeImages:
    """Parse and validate manifest data.

    Args:
        data: Dictionary containing manifest data.
        require_visibility: Whether createOpts.visibility is mandatory.

    Returns:
        Validated NodeImages instance.

    Raises:
        ValidationError: If data does not match the schema or rules.
    """
    try:
        doc = NodeImages.from_document(data)
    except PydanticValidationError as e:
        raise ValidationError(f"failed to unmarshal node images: {e}") from e
    doc.validate_images(require_visibility=require_visibility)
    return doc


def load_node_images(path: Path, require_visibility: bool = True) -> NodeImages:
    """Load and validate the node image manifest.

    Args:
        path: Path to the manifest file.
        require_visibility: Whether createOpts.visibility is mandatory.

    Returns:
        Validated NodeImages instance.

    Raises:
        ValidationError: If the file cannot be read, parsed or validated.
    """
    try:
        data = load_yaml(path)
    except OSError as e:
        raise ValidationError(f"failed to read config file {path}: {e}") from e
    except (yaml.YAMLError, ValueError) as e:
        raise ValidationError(f"failed to unmarshal config yaml {path}: {e}") from e
    return parse_node_images(data, require_visibility=require_visibility)


def node_images_to_yaml_string(doc: NodeImages) -> str:
    """Convert a manifest to a YAML string.

    Manifests loaded from a file keep the key names they were read with.

    Args:
        doc: NodeImages instance to convert.

    Returns:
        YAML string representation.
    """
    data = doc.to_document()
    result: str = yaml.safe_dump(
        data, default_flow_style=False, allow_unicode=True, sort_keys=False
    )
    return result


def save_node_images(doc: NodeImages, path: Path) -> None:
    """Write a manifest, replacing the file in one step.

    The content goes to a temporary file next to ``path`` which is then
    renamed over it.

    Args:
        doc: NodeImages instance to write.
        path: Destination path.

    Raises:
        OSError: If the file cannot be written.
    """
    content = node_images_to_yaml_string(doc)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote node images manifest to %s", path)


__all__ = [
    "load_node_images",
    "load_yaml",
    "node_images_to_yaml_string",
    "parse_node_images",
    "save_node_images",
]
