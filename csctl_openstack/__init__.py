"""csctl-openstack - node image plugin for csctl.

This package builds OpenStack node images with packer, publishes them to
S3-compatible object storage and records their download URLs in the
cluster stack's node image manifest.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
