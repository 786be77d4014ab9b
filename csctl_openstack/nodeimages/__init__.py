"""Node image manifest module.

This module handles:
- Manifest schema and validation
- Loading and atomically rewriting the manifest
- Recording download URLs of published images
"""

from csctl_openstack.nodeimages.schema import (
    CreateOptsSchema,
    NodeImages,
    OpenStackNodeImage,
)

__all__ = ["CreateOptsSchema", "NodeImages", "OpenStackNodeImage"]
