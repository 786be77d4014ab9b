"""Build orchestration module.

This module handles:
- Running packer for each node image
- Locating and hashing the built images
- Publishing images and recording their URLs
- Copying the manifest to the release directory
"""

# Submodules are imported directly to avoid circular imports.
# Access via csctl_openstack.builds.service, csctl_openstack.builds.runner, etc.
