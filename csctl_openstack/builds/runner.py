"""Build runner for executing packer.

This module handles:
- Composing the `packer build` command for a node image directory
- Executing builds with subprocess, output streamed to the operator

The builder's output is not captured; stdout and stderr are inherited.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from csctl_openstack.errors import BuildFailure

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a builder execution.

    Attributes:
        exit_code: Process exit code.
        started_at: Build start time.
        finished_at: Build finish time.
        command: The command that was executed.
    """

    exit_code: int
    started_at: datetime
    finished_at: datetime
    command: str

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


def compose_build_command(
    template_dir: Path,
    build_name: str,
    output_directory: Path,
    builder_command: str = "packer",
) -> list[str]:
    """Compose the `packer build` command for a node image.

    The templates must declare the ``build_name`` and ``output_directory``
    variables.

    Args:
        template_dir: Directory with the packer templates.
        build_name: Build name, equal to the image directory name.
        output_directory: Directory where packer writes the image.
        builder_command: Builder executable.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    return [
        builder_command,
        "build",
        "-var",
        f"build_name={build_name}",
        "-var",
        f"output_directory={output_directory}",
        str(template_dir),
    ]


def run_build(
    template_dir: Path,
    build_name: str,
    output_directory: Path,
    builder_command: str = "packer",
) -> BuildResult:
    """Run the builder for one node image and wait for it.

    Args:
        template_dir: Directory with the packer templates.
        build_name: Build name, equal to the image directory name.
        output_directory: Directory where packer writes the image.
        builder_command: Builder executable.

    Returns:
        BuildResult of the successful build.

    Raises:
        BuildFailure: If the builder cannot be started or exits non-zero.
    """
    cmd = compose_build_command(
        template_dir=template_dir,
        build_name=build_name,
        output_directory=output_directory,
        builder_command=builder_command,
    )
    cmd_str = shlex.join(cmd)
    logger.info("Running %s build: %s", builder_command, cmd_str)

    started_at = datetime.now(timezone.utc)
    try:
        result = subprocess.run(cmd, check=False)
    except OSError as e:
        raise BuildFailure(
            f"Failed to execute {builder_command}: {e}",
            code="execution_error",
        ) from e
    finished_at = datetime.now(timezone.utc)

    if result.returncode != 0:
        message = f"Error running {builder_command} build: exit code {result.returncode}"
        logger.error(message)
        raise BuildFailure(message, exit_code=result.returncode)

    build = BuildResult(
        exit_code=result.returncode,
        started_at=started_at,
        finished_at=finished_at,
        command=cmd_str,
    )
    logger.info(
        "Build %s completed successfully in %.1fs", build_name, build.duration_seconds
    )
    return build


__all__ = [
    "BuildResult",
    "compose_build_command",
    "run_build",
]
