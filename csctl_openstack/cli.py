"""Thin CLI wrapper for csctl_openstack.

This module provides the csctl plugin command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from csctl_openstack.config import get_settings, print_settings_json
from csctl_openstack.errors import PipelineError
from csctl_openstack.log import setup_logging
from csctl_openstack.types import BuildMethod
from csctl_openstack.version import format_version, get_build_info

app = typer.Typer(
    name="csctl-openstack",
    help="csctl plugin - build, publish and release OpenStack node images",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(format_version(get_build_info()))
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """csctl plugin - build, publish and release OpenStack node images."""
    setup_logging(get_settings().log_level)


@app.command("version")
def version_cmd() -> None:
    """Print the version of csctl-openstack."""
    console.print(format_version(get_build_info()))


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
    else:
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Builder:[/bold]")
        console.print(f"  Builder command:     {settings.builder_command}")
        console.print(f"  Output directory:    {settings.output_directory}")
        console.print()
        console.print("[bold]Cluster stack:[/bold]")
        console.print(f"  Node images dir:     {settings.node_images_dir_name}")
        console.print(f"  Manifest file:       {settings.manifest_file_name}")
        console.print(f"  Release file:        {settings.release_file_name}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Require visibility:  {settings.require_visibility}")
        console.print(f"  Log level:           {settings.log_level}")


@app.command("create-node-images")
def create_node_images_cmd(
    cluster_stack_dir: Annotated[
        Path, typer.Argument(help="Cluster stack directory")
    ],
    release_dir: Annotated[
        Path, typer.Argument(help="Cluster stack release directory")
    ],
    registry_config: Annotated[
        Path | None,
        typer.Argument(help="Node image registry config (required for 'build')"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Build and publish node images, or copy existing ones into a release."""
    from csctl_openstack.builds.service import create_node_images

    settings = get_settings()

    try:
        result = create_node_images(
            cluster_stack_dir,
            release_dir,
            registry_config_path=registry_config,
            settings=settings,
        )
    except PipelineError as e:
        if json_output:
            typer.echo(json.dumps({"code": e.code, "message": str(e)}, indent=2))
        else:
            console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    if result.method is BuildMethod.BUILD:
        console.print(f"[bold]Built {len(result.images)} node image(s):[/bold]")
        for image in result.images:
            marker = "" if image.url_updated else " (URL already set)"
            console.print(f"  [green]✓ {image.image_dir}[/green]{marker}")
            console.print(f"      {image.url}")
    console.print(
        f"[green]{Path(result.manifest_path).name} copied to release directory "
        f"as {Path(result.release_path).name}[/green]"
    )


__all__ = ["app"]
