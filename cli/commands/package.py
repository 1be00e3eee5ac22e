"""Package command."""

import click
from pathlib import Path

from bundler import BundlerError, package as package_directory


@click.command()
@click.option("--strip-meta", is_flag=True, help="Omit reconstruction metadata (bundle can't be unpacked)")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Bundle file to write")
@click.pass_context
def package(ctx: click.Context, strip_meta: bool, output: Path):
    """Pack the current directory into a bundle file."""
    output = output or Path(ctx.obj.bundle_name)

    try:
        bundle_path = package_directory(Path("."), output, strip_meta=strip_meta)
    except BundlerError as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(e.exit_code)

    click.echo(f"✅ Created bundle file at {bundle_path}")
