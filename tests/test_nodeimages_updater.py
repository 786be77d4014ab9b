"""Tests for recording image URLs in the manifest."""

import pytest
import yaml
from conftest import MANIFEST_API_VERSION, make_image, write_yaml

from csctl_openstack.errors import UpdateError
from csctl_openstack.nodeimages.updater import compose_image_url, record_url
from csctl_openstack.registry.io import load_registry_config


@pytest.fixture
def manifest_path(tmp_path):
    """Write a manifest with two unpublished images."""
    return write_yaml(
        tmp_path / "node-images" / "config.yaml",
        {
            "apiVersion": MANIFEST_API_VERSION,
            "openStackNodeImages": [
                make_image("ubuntu-capi-image-v1.27.8"),
                make_image("ubuntu-capi-image-v1.28.4"),
            ],
        },
    )


def read_urls(path):
    data = yaml.safe_load(path.read_text())
    return [image.get("url", "") for image in data["openStackNodeImages"]]


class TestComposeImageUrl:
    """Tests for compose_image_url."""

    def test_url_format(self, registry):
        """Should build https://endpoint/bucket/key."""
        url = compose_image_url(registry, "ubuntu-capi-image-v1.27.8")
        assert url == (
            "https://minio.example.com:9000/node-images/ubuntu-capi-image-v1.27.8"
        )

    def test_no_double_slashes(self, registry):
        """Should not produce double slashes from stray separators."""
        registry.config.endpoint = "minio.example.com/"
        registry.config.bucket = "/node-images/"
        url = compose_image_url(registry, "/image")
        assert url == "https://minio.example.com/node-images/image"

    def test_scheme_not_duplicated(self, tmp_path, registry_data):
        """A schemed endpoint in the descriptor should not leak into the URL."""
        registry_data["config"]["endpoint"] = "http://minio.example.com"
        registry = load_registry_config(write_yaml(tmp_path / "r.yaml", registry_data))
        url = compose_image_url(registry, "image")
        assert url == "https://minio.example.com/node-images/image"
        assert url.count("://") == 1


class TestRecordUrl:
    """Tests for record_url."""

    def test_records_url_for_index(self, manifest_path, registry):
        """Should set the URL of the addressed image only."""
        record = record_url(manifest_path, registry, 1, "ubuntu-capi-image-v1.28.4")

        assert record.updated is True
        assert record.url == (
            "https://minio.example.com:9000/node-images/ubuntu-capi-image-v1.28.4"
        )
        assert read_urls(manifest_path) == ["", record.url]

    def test_sequential_indexes(self, manifest_path, registry):
        """URLs recorded one after another should all be kept."""
        first = record_url(manifest_path, registry, 0, "ubuntu-capi-image-v1.27.8")
        second = record_url(manifest_path, registry, 1, "ubuntu-capi-image-v1.28.4")
        assert read_urls(manifest_path) == [first.url, second.url]

    def test_idempotent(self, manifest_path, registry):
        """Second call should neither change nor rewrite the file."""
        first = record_url(manifest_path, registry, 0, "ubuntu-capi-image-v1.27.8")
        content = manifest_path.read_bytes()
        mtime = manifest_path.stat().st_mtime_ns

        second = record_url(manifest_path, registry, 0, "ubuntu-capi-image-v1.27.8")

        assert second.updated is False
        assert second.url == first.url
        assert manifest_path.read_bytes() == content
        assert manifest_path.stat().st_mtime_ns == mtime

    def test_existing_url_not_overwritten(self, manifest_path, registry):
        """An already recorded URL should win over a different key."""
        record_url(manifest_path, registry, 0, "first-key")
        record = record_url(manifest_path, registry, 0, "second-key")
        assert record.updated is False
        assert record.url.endswith("/first-key")
        assert read_urls(manifest_path)[0].endswith("/first-key")

    def test_rereads_file(self, manifest_path, registry):
        """Should see a URL written to the file by someone else."""
        data = yaml.safe_load(manifest_path.read_text())
        data["openStackNodeImages"][0]["url"] = "https://mirror/image.qcow2"
        write_yaml(manifest_path, data)

        record = record_url(manifest_path, registry, 0, "ubuntu-capi-image-v1.27.8")
        assert record.updated is False
        assert record.url == "https://mirror/image.qcow2"

    def test_index_out_of_range(self, manifest_path, registry):
        """Should raise UpdateError for an index past the list."""
        with pytest.raises(UpdateError, match="out of range"):
            record_url(manifest_path, registry, 5, "image")

    def test_unreadable_manifest(self, tmp_path, registry):
        """Should raise UpdateError when the manifest is missing."""
        with pytest.raises(UpdateError):
            record_url(tmp_path / "missing.yaml", registry, 0, "image")

    def test_unparseable_manifest(self, manifest_path, registry):
        """Should raise UpdateError when the manifest is broken."""
        manifest_path.write_text("openStackNodeImages: [\n")
        with pytest.raises(UpdateError):
            record_url(manifest_path, registry, 0, "image")

    def test_write_failure(self, manifest_path, registry, monkeypatch):
        """Should raise UpdateError when the manifest cannot be written."""

        def fail_save(doc, path):
            raise PermissionError("read-only file system")

        monkeypatch.setattr(
            "csctl_openstack.nodeimages.updater.save_node_images", fail_save
        )
        with pytest.raises(UpdateError, match="failed to write"):
            record_url(manifest_path, registry, 0, "image")

    def test_keeps_short_key_names(self, tmp_path, registry):
        """Recording a URL should leave the key names and other entries as read."""

        def entry(name):
            return {
                "buildSourceDir": name,
                "createOptions": {
                    "name": name,
                    "diskFormat": "qcow2",
                    "containerFormat": "bare",
                    "visibility": "public",
                },
            }

        data = {"apiVersion": MANIFEST_API_VERSION, "images": [entry("a"), entry("b")]}
        path = write_yaml(tmp_path / "config.yaml", data)

        record = record_url(path, registry, 0, "a")

        expected = {
            "apiVersion": MANIFEST_API_VERSION,
            "images": [{**entry("a"), "url": record.url}, entry("b")],
        }
        assert path.read_text() == yaml.safe_dump(
            expected, default_flow_style=False, allow_unicode=True, sort_keys=False
        )
        assert yaml.safe_load(path.read_text())["images"][1] == entry("b")
