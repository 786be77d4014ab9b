"""Pydantic models for the node image registry descriptor.

The registry descriptor (``registry.yaml``) names the S3-compatible object
storage that built images are uploaded to.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# The only supported registry backend
SUPPORTED_REGISTRY_TYPE = "s3"

DEFAULT_REGION = "us-east-1"

_SCHEME_PREFIXES = ("http://", "https://")


def strip_scheme(endpoint: str) -> str:
    """Remove a leading ``http://`` or ``https://`` from an endpoint."""
    for prefix in _SCHEME_PREFIXES:
        if endpoint.startswith(prefix):
            return endpoint[len(prefix) :]
    return endpoint


class RegistryConnectionSchema(BaseModel):
    """Connection settings of the object storage.

    Attributes:
        endpoint: host[:port] of the storage, without scheme.
        bucket: Destination bucket.
        access_key: Access key ID.
        secret_key: Secret access key.
        verify: Use TLS with certificate verification (default True).
        cacert: Optional PEM bundle of trusted CA certificates.
        region: Region used for request signing.
    """

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str = Field(description="Storage endpoint (host[:port])")
    bucket: str = Field(description="Destination bucket")
    access_key: str = Field(
        default="",
        alias="accessKey",
        validation_alias=AliasChoices("accessKey", "access_key"),
    )
    secret_key: str = Field(
        default="",
        alias="secretKey",
        validation_alias=AliasChoices("secretKey", "secret_key"),
    )
    verify: bool = Field(
        default=True,
        validation_alias=AliasChoices("verify", "verifyTLS"),
        description="Use secure transport",
    )
    cacert: str | None = Field(
        default=None,
        validation_alias=AliasChoices("cacert", "caCertPath"),
        description="Path to a PEM CA bundle",
    )
    region: str = Field(default=DEFAULT_REGION, description="Signing region")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Strip the transport scheme; the storage client needs a bare host."""
        return strip_scheme(v.strip())


class RegistryConfig(BaseModel):
    """Root document of the registry descriptor."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(
        validation_alias=AliasChoices("type", "kind"),
        description="Registry backend",
    )
    config: RegistryConnectionSchema


__all__ = [
    "DEFAULT_REGION",
    "SUPPORTED_REGISTRY_TYPE",
    "RegistryConfig",
    "RegistryConnectionSchema",
    "strip_scheme",
]
