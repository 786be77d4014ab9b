"""Version metadata of the plugin."""

from csctl_openstack import __version__
from csctl_openstack.types import BuildInfo

# Replaced by the release build with the commit the version is cut from.
COMMIT = "unknown"


def get_build_info() -> BuildInfo:
    """Return the version metadata of this installation."""
    return BuildInfo(version=__version__, commit=COMMIT)


def format_version(info: BuildInfo) -> str:
    """Render version metadata for display.

    Args:
        info: Version metadata.

    Returns:
        Two-line version text.
    """
    return f"csctl-openstack version: {info.version}\ncommit: {info.commit}"


__all__ = ["COMMIT", "format_version", "get_build_info"]
