"""Loading the node image registry descriptor."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from csctl_openstack.errors import MissingResourceError, ValidationError
from csctl_openstack.nodeimages.io import load_yaml
from csctl_openstack.registry.schema import SUPPORTED_REGISTRY_TYPE, RegistryConfig

logger = logging.getLogger(__name__)


def load_registry_config(path: Path) -> RegistryConfig:
    """Load and validate a registry descriptor.

    Args:
        path: Path to the registry YAML file.

    Returns:
        RegistryConfig with the endpoint scheme stripped.

    Raises:
        MissingResourceError: If the file does not exist.
        ValidationError: If the file cannot be parsed or names an
            unsupported registry type.
    """
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        raise MissingResourceError(
            f"registry config file not found: {path}", path=str(path)
        ) from e
    except OSError as e:
        raise ValidationError(f"error opening registry config file: {e}") from e
    except (yaml.YAMLError, ValueError) as e:
        raise ValidationError(f"error decoding registry config file: {e}") from e

    try:
        registry = RegistryConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"error decoding registry config file: {e}") from e

    if registry.type != SUPPORTED_REGISTRY_TYPE:
        raise ValidationError(
            f"unsupported registry type '{registry.type}', "
            f"expected '{SUPPORTED_REGISTRY_TYPE}'"
        )

    logger.debug(
        "Loaded registry %s/%s from %s",
        registry.config.endpoint,
        registry.config.bucket,
        path,
    )
    return registry


__all__ = ["load_registry_config"]
