"""Reading the csctl configuration of a cluster stack.

Only the parts the node image plugin needs are modelled: the provider type
and the provider's ``method`` setting. Everything else in ``csctl.yaml`` is
ignored.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from csctl_openstack.errors import MissingResourceError, ValidationError
from csctl_openstack.nodeimages.io import load_yaml
from csctl_openstack.types import BuildMethod

logger = logging.getLogger(__name__)

CSCTL_CONFIG_FILE_NAME = "csctl.yaml"

# Provider type this plugin serves
PROVIDER_TYPE = "openstack"


class ProviderSchema(BaseModel):
    """Provider section of csctl.yaml."""

    model_config = ConfigDict(extra="ignore")

    type: str = ""
    api_version: str | None = Field(default=None, alias="apiVersion")
    config: dict[str, Any] = Field(default_factory=dict)


class CsctlConfigSection(BaseModel):
    """``config`` section of csctl.yaml."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kubernetes_version: str | None = Field(default=None, alias="kubernetesVersion")
    cluster_stack_name: str | None = Field(default=None, alias="clusterStackName")
    provider: ProviderSchema = Field(default_factory=ProviderSchema)


class CsctlConfig(BaseModel):
    """Root document of csctl.yaml."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    api_version: str | None = Field(default=None, alias="apiVersion")
    config: CsctlConfigSection = Field(default_factory=CsctlConfigSection)

    @property
    def provider_type(self) -> str:
        return self.config.provider.type

    @property
    def method(self) -> str:
        value = self.config.provider.config.get("method", "")
        return str(value) if value is not None else ""


def load_csctl_config(cluster_stack_dir: Path) -> CsctlConfig:
    """Load csctl.yaml from a cluster stack directory.

    Args:
        cluster_stack_dir: Cluster stack directory.

    Returns:
        Parsed CsctlConfig.

    Raises:
        MissingResourceError: If csctl.yaml does not exist.
        ValidationError: If csctl.yaml cannot be parsed.
    """
    path = cluster_stack_dir / CSCTL_CONFIG_FILE_NAME
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        raise MissingResourceError(
            f"csctl config not found: {path}", path=str(path)
        ) from e
    except OSError as e:
        raise ValidationError(f"failed to read csctl config {path}: {e}") from e
    except (yaml.YAMLError, ValueError) as e:
        raise ValidationError(f"failed to unmarshal csctl config {path}: {e}") from e

    try:
        return CsctlConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"invalid csctl config {path}: {e}") from e


def resolve_build_method(config: CsctlConfig) -> BuildMethod:
    """Check the provider type and return the configured node image method.

    Args:
        config: Parsed csctl configuration.

    Returns:
        The BuildMethod selected by ``config.provider.config.method``.

    Raises:
        ValidationError: If the provider is not openstack or the method is
            unknown.
    """
    if config.provider_type != PROVIDER_TYPE:
        raise ValidationError(
            f"Wrong provider '{config.provider_type}' in csctl config. "
            f"Expected {PROVIDER_TYPE}"
        )
    try:
        return BuildMethod(config.method)
    except ValueError:
        raise ValidationError(f"Unknown method: '{config.method}'") from None


__all__ = [
    "CSCTL_CONFIG_FILE_NAME",
    "PROVIDER_TYPE",
    "CsctlConfig",
    "load_csctl_config",
    "resolve_build_method",
]
