"""Allow running as ``python -m csctl_openstack``."""

from csctl_openstack.cli import app

if __name__ == "__main__":
    app()
