"""Shared fixtures for cluster stack layouts."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from csctl_openstack.registry.schema import RegistryConfig

MANIFEST_API_VERSION = "openstack.csctl.clusterstack.x-k8s.io/v1alpha1"


def make_image(
    image_dir: str | None = "ubuntu-capi-image-v1.27.8",
    url: str = "",
    **create_opts: str,
) -> dict[str, Any]:
    """Return manifest data for one node image."""
    opts = {
        "name": image_dir or "ubuntu-capi-image",
        "disk_format": "qcow2",
        "container_format": "bare",
        "visibility": "public",
    }
    opts.update(create_opts)
    image: dict[str, Any] = {"url": url, "createOpts": opts}
    if image_dir is not None:
        image["imageDir"] = image_dir
    return image


def write_yaml(path: Path, data: dict[str, Any]) -> Path:
    """Write data as YAML, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def make_cluster_stack(
    root: Path,
    images: list[dict[str, Any]],
    method: str = "build",
    provider: str = "openstack",
    create_image_dirs: bool = True,
) -> Path:
    """Create a cluster stack directory with csctl.yaml and a manifest."""
    root.mkdir(parents=True, exist_ok=True)
    write_yaml(
        root / "csctl.yaml",
        {
            "apiVersion": "csctl.clusterstack.x-k8s.io/v1alpha1",
            "config": {
                "kubernetesVersion": "v1.27.8",
                "clusterStackName": "ferrol",
                "provider": {
                    "type": provider,
                    "apiVersion": "openstack.csctl.clusterstack.x-k8s.io/v1alpha1",
                    "config": {"method": method},
                },
            },
        },
    )
    write_yaml(
        root / "node-images" / "config.yaml",
        {"apiVersion": MANIFEST_API_VERSION, "openStackNodeImages": images},
    )
    if create_image_dirs:
        for image in images:
            if image.get("imageDir"):
                image_dir = root / "node-images" / image["imageDir"]
                image_dir.mkdir(parents=True, exist_ok=True)
                (image_dir / "image.pkr.hcl").write_text("# packer template\n")
    return root


@pytest.fixture
def registry_data() -> dict[str, Any]:
    """Return registry descriptor data with a schemed endpoint."""
    return {
        "type": "s3",
        "config": {
            "endpoint": "https://minio.example.com:9000",
            "bucket": "node-images",
            "accessKey": "AKIDEXAMPLE",
            "secretKey": "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
        },
    }


@pytest.fixture
def registry_file(tmp_path: Path, registry_data: dict[str, Any]) -> Path:
    """Write the registry descriptor to a file."""
    return write_yaml(tmp_path / "registry.yaml", registry_data)


@pytest.fixture
def registry(registry_data: dict[str, Any]) -> RegistryConfig:
    """Return a parsed registry descriptor."""
    return RegistryConfig.model_validate(registry_data)
