"""CLI entrypoint."""

import sys

import click
from loguru import logger

from bundler.errors import EXIT_CODES

from .commands.package import package
from .commands.unpack import unpack
from .config import get_settings

EXIT_CODES_EPILOG = "\b\nExit codes:\n" + "\n".join(f"  {code:>3}  {meaning}" for code, meaning in EXIT_CODES)


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> | {message}")


@click.group(epilog=EXIT_CODES_EPILOG)
@click.version_option(version="0.1.0", prog_name="bundler")
@click.option(
    "--log-level",
    type=click.Choice(["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log verbosity (defaults to BUNDLER_LOG_LEVEL or WARNING)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str):
    """Bundler CLI - pack a project directory into one JSON bundle and back."""
    settings = get_settings()
    ctx.obj = settings
    configure_logging((log_level or settings.log_level).upper())


cli.add_command(package)
cli.add_command(unpack)


if __name__ == "__main__":
    cli()
