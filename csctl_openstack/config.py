"""Configuration settings for csctl_openstack.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI arguments > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Plugin settings.

    Settings are loaded from environment variables with the CSCTL_OPENSTACK_
    prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="CSCTL_OPENSTACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Builder
    builder_command: str = Field(
        default="packer",
        description="Executable used to build node images",
    )
    output_directory: Path = Field(
        default=Path("./output"),
        description="Directory (relative to the working directory) where the builder writes images",
    )

    # Cluster stack layout
    node_images_dir_name: str = Field(
        default="node-images",
        description="Directory inside the cluster stack holding the node image manifest",
    )
    manifest_file_name: str = Field(
        default="config.yaml",
        description="File name of the node image manifest",
    )
    release_file_name: str = Field(
        default="node-images.yaml",
        description="File name of the manifest copy in the release directory",
    )

    # Validation
    require_visibility: bool = Field(
        default=True,
        description="Require createOpts.visibility on every node image",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the plugin settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
