"""Pydantic models for the node image manifest.

The manifest lives at ``<cluster-stack>/node-images/config.yaml`` and lists
the OpenStack node images of a cluster stack together with their Glance
create options and (once published) their download URLs.

Field names follow the csctl node image format. The shorter names
``images``, ``buildSourceDir``, ``createOptions``, ``diskFormat`` and
``containerFormat`` are accepted on read. A manifest loaded from a file is
written back in the spelling it was read with; only recorded URLs change.
Keys written without a value (``url:``) read as empty strings.
"""

import copy
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
)

from csctl_openstack.errors import ValidationError

IMAGES_KEYS = ("openStackNodeImages", "images", "open_stack_node_images")


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


class CreateOptsSchema(BaseModel):
    """Glance image create options of a node image.

    Attributes:
        name: Image name in Glance.
        disk_format: Disk format (e.g., 'qcow2', 'raw').
        container_format: Container format (e.g., 'bare').
        visibility: Image visibility (e.g., 'public', 'private').
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(default="", description="Image name")
    disk_format: str = Field(
        default="",
        validation_alias=AliasChoices("disk_format", "diskFormat"),
        description="Disk format",
    )
    container_format: str = Field(
        default="",
        validation_alias=AliasChoices("container_format", "containerFormat"),
        description="Container format",
    )
    visibility: str = Field(default="", description="Image visibility")

    @field_validator(
        "name", "disk_format", "container_format", "visibility", mode="before"
    )
    @classmethod
    def empty_when_null(cls, v: Any) -> Any:
        """Read a key without a value as an empty string."""
        return _none_to_empty(v)


class OpenStackNodeImage(BaseModel):
    """A single buildable and publishable node image.

    Attributes:
        url: Download URL; empty until the image has been published.
        image_dir: Directory (under node-images/) with the packer templates.
        create_opts: Glance create options, ``None`` when absent.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    url: str = Field(default="", description="Download URL of the image")
    image_dir: str | None = Field(
        default=None,
        alias="imageDir",
        validation_alias=AliasChoices("imageDir", "buildSourceDir", "image_dir"),
        description="Packer template directory",
    )
    create_opts: CreateOptsSchema | None = Field(
        default=None,
        alias="createOpts",
        validation_alias=AliasChoices("createOpts", "createOptions", "create_opts"),
        description="Glance create options",
    )

    @field_validator("url", mode="before")
    @classmethod
    def url_empty_when_null(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @property
    def has_url(self) -> bool:
        """Whether a download URL has already been recorded."""
        return bool(self.url)


class NodeImages(BaseModel):
    """Root document of the node image manifest."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    api_version: str = Field(
        default="",
        alias="apiVersion",
        validation_alias=AliasChoices("apiVersion", "api_version"),
    )
    open_stack_node_images: list[OpenStackNodeImage] = Field(
        default_factory=list,
        alias="openStackNodeImages",
        validation_alias=AliasChoices(*IMAGES_KEYS),
    )

    _source: dict[str, Any] | None = PrivateAttr(default=None)

    @field_validator("api_version", mode="before")
    @classmethod
    def api_version_empty_when_null(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("open_stack_node_images", mode="before")
    @classmethod
    def images_empty_when_null(cls, v: Any) -> Any:
        return [] if v is None else v

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "NodeImages":
        """Validate a parsed YAML document and remember it for writing back.

        Raises:
            pydantic.ValidationError: If the document does not match the schema.
        """
        doc = cls.model_validate(data)
        doc._source = copy.deepcopy(data)
        return doc

    def to_document(self) -> dict[str, Any]:
        """Return the manifest as a YAML-ready mapping.

        A manifest read with ``from_document`` is returned as it was read,
        key spelling and unknown keys included, with the URLs recorded since
        then filled in. Other manifests are dumped with the canonical names.
        """
        if self._source is None:
            return self.model_dump(by_alias=True, exclude_none=True)

        data = copy.deepcopy(self._source)
        key = next((k for k in IMAGES_KEYS if k in data), None)
        entries = data.get(key) if key else None
        if not isinstance(entries, list):
            return self.model_dump(by_alias=True, exclude_none=True)
        for entry, image in zip(entries, self.open_stack_node_images, strict=True):
            if image.url and entry.get("url") != image.url:
                entry["url"] = image.url
        return data

    def validate_images(self, require_visibility: bool = True) -> None:
        """Check the manifest rules, failing on the first violation.

        Args:
            require_visibility: Whether createOpts.visibility is mandatory.

        Raises:
            ValidationError: If a rule is violated.
        """
        if not self.api_version:
            raise ValidationError("api version must not be empty")

        if not self.open_stack_node_images:
            raise ValidationError(
                "at least one node image needs to exist in openStackNodeImages list"
            )

        for index, image in enumerate(self.open_stack_node_images):
            opts = image.create_opts
            if opts is None:
                raise ValidationError(
                    f"image {index}: field createOpts must not be empty"
                )
            required = [
                ("name", opts.name),
                ("disk_format", opts.disk_format),
                ("container_format", opts.container_format),
            ]
            if require_visibility:
                required.append(("visibility", opts.visibility))
            for field_name, value in required:
                if not value:
                    raise ValidationError(
                        f"image {index}: field '{field_name}' in createOpts must be defined"
                    )


__all__ = ["CreateOptsSchema", "NodeImages", "OpenStackNodeImage"]
