"""Artifact publishing to S3-compatible object storage.

This module handles:
- Building the TLS context (minimum TLS 1.2, optional custom CA bundle)
- Signing a single-object PUT with AWS Signature Version 4
- Streaming the artifact to the bucket

The PUT is sent with httpx rather than a boto3 client because boto3 cannot
be given an ``ssl.SSLContext``, so it cannot pin the minimum TLS version or
trust only a custom CA bundle. botocore is used just for the signature.

Uploads are not retried; any failure is reported as PublishError.
"""

from __future__ import annotations

import logging
import re
import ssl
from collections.abc import Iterator
from pathlib import Path
from urllib.parse import quote, unquote

import httpx
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from csctl_openstack.builds.artifacts import compute_file_hash
from csctl_openstack.errors import PublishError
from csctl_openstack.registry.schema import RegistryConfig
from csctl_openstack.types import PublishResult

logger = logging.getLogger(__name__)

# Chunk size for streaming uploads (bytes)
UPLOAD_CHUNK_SIZE = 64 * 1024  # 64 KB

MINIMUM_TLS_VERSION = ssl.TLSVersion.TLSv1_2

_PEM_CERT_RE = re.compile(
    r"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----",
    re.DOTALL,
)


def build_ssl_context(cacert: Path | None = None) -> ssl.SSLContext:
    """Create the TLS context used for uploads.

    When ``cacert`` is given, every certificate in the PEM bundle that parses
    is trusted and the system roots are not. If no certificate in the bundle
    can be used, the system default trust store is used instead.

    Args:
        cacert: Optional path to a PEM CA bundle.

    Returns:
        Configured SSLContext.

    Raises:
        PublishError: If the CA bundle cannot be read.
    """
    context: ssl.SSLContext | None = None

    if cacert is not None:
        try:
            pem_data = cacert.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise PublishError(f"error reading CA certificate {cacert}: {e}") from e

        custom = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        loaded = 0
        for block in _PEM_CERT_RE.findall(pem_data):
            try:
                custom.load_verify_locations(cadata=block)
            except (ssl.SSLError, ValueError) as e:
                logger.debug("Skipping unusable certificate in %s: %s", cacert, e)
                continue
            loaded += 1

        if loaded:
            logger.debug("Trusting %d certificate(s) from %s", loaded, cacert)
            context = custom
        else:
            logger.warning(
                "No usable certificates in %s, using system trust store", cacert
            )

    if context is None:
        context = ssl.create_default_context()

    context.minimum_version = MINIMUM_TLS_VERSION
    return context


def compose_object_url(registry: RegistryConfig, object_key: str) -> str:
    """Compose the path-style URL of an object for the upload request.

    Args:
        registry: Registry descriptor.
        object_key: Object key in the bucket.

    Returns:
        URL using https when TLS verification is enabled, http otherwise.
    """
    scheme = "https" if registry.config.verify else "http"
    endpoint = registry.config.endpoint.rstrip("/")
    bucket = quote(registry.config.bucket.strip("/"), safe="")
    key = quote(object_key.lstrip("/"), safe="/")
    return f"{scheme}://{endpoint}/{bucket}/{key}"


def sign_put_request(
    registry: RegistryConfig,
    url: str,
    size_bytes: int,
    sha256: str,
) -> dict[str, str]:
    """Compute SigV4 headers for a single-object PUT.

    Args:
        registry: Registry descriptor with credentials and region.
        url: Object URL.
        size_bytes: Content length of the body.
        sha256: Hex SHA-256 of the body.

    Returns:
        Headers to send with the request.
    """
    # The signer encodes the path itself, so it gets the unquoted form.
    request = AWSRequest(
        method="PUT",
        url=unquote(url),
        headers={
            "Content-Length": str(size_bytes),
            "Content-Type": "application/octet-stream",
            "X-Amz-Content-SHA256": sha256,
        },
    )
    credentials = Credentials(registry.config.access_key, registry.config.secret_key)
    SigV4Auth(credentials, "s3", registry.config.region).add_auth(request)
    return dict(request.headers.items())


def _iter_file(file_path: Path, chunk_size: int = UPLOAD_CHUNK_SIZE) -> Iterator[bytes]:
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            yield chunk


def publish_artifact(
    file_path: Path,
    object_key: str,
    registry: RegistryConfig,
    client: httpx.Client | None = None,
) -> PublishResult:
    """Upload a local file as a single object.

    An existing object with the same key is overwritten.

    Args:
        file_path: Path to the file to upload.
        object_key: Object key in the bucket.
        registry: Registry descriptor.
        client: Optional HTTPX client; one is created from the registry
            settings when not given.

    Returns:
        PublishResult describing the uploaded object.

    Raises:
        PublishError: If the file cannot be read or the upload fails.
    """
    if not file_path.is_file():
        raise PublishError(f"error opening file: {file_path} does not exist")

    try:
        size_bytes = file_path.stat().st_size
        sha256 = compute_file_hash(file_path)
    except OSError as e:
        raise PublishError(f"error opening file {file_path}: {e}") from e

    url = compose_object_url(registry, object_key)
    headers = sign_put_request(registry, url, size_bytes, sha256)

    logger.info(
        "Uploading %s to bucket %s as %s (%d bytes)",
        file_path,
        registry.config.bucket,
        object_key,
        size_bytes,
    )

    own_client = client is None
    if client is None:
        cacert = Path(registry.config.cacert) if registry.config.cacert else None
        verify: ssl.SSLContext | bool = (
            build_ssl_context(cacert) if registry.config.verify else False
        )
        client = httpx.Client(verify=verify, timeout=None)

    try:
        response = client.put(url, content=_iter_file(file_path), headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise PublishError(
            f"error uploading file: {e.response.status_code} "
            f"{e.response.reason_phrase}: {e.response.text[:500]}",
            status_code=e.response.status_code,
        ) from e
    except httpx.RequestError as e:
        raise PublishError(f"error uploading file: {e}") from e
    except OSError as e:
        raise PublishError(f"error reading file {file_path}: {e}") from e
    finally:
        if own_client:
            client.close()

    logger.info("Uploaded %s to %s", object_key, registry.config.bucket)
    return PublishResult(
        bucket=registry.config.bucket,
        object_key=object_key,
        size_bytes=size_bytes,
        sha256=sha256,
        etag=response.headers.get("ETag"),
    )


__all__ = [
    "MINIMUM_TLS_VERSION",
    "UPLOAD_CHUNK_SIZE",
    "build_ssl_context",
    "compose_object_url",
    "publish_artifact",
    "sign_put_request",
]
