"""Node image registry module.

This module handles:
- Registry descriptor schema and loading
- Uploading built images to S3-compatible object storage
"""

from csctl_openstack.registry.schema import RegistryConfig, RegistryConnectionSchema

__all__ = ["RegistryConfig", "RegistryConnectionSchema"]
