"""Unpack command."""

import click
from pathlib import Path

from bundler import BundlerError, unpack as unpack_bundle


@click.command()
@click.argument("bundle_path", type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(path_type=Path))
@click.pass_context
def unpack(ctx: click.Context, bundle_path: Path, destination: Path):
    """Rebuild a project directory from a bundle file."""
    try:
        written = unpack_bundle(bundle_path, destination)
    except BundlerError as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(e.exit_code)

    click.echo(f"✅ Unpacked {written} files into {destination}")
