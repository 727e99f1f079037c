import logging
import sys

import click

from .config import get_broker_config
from .exceptions import CatalogCheckError
from .utils import check_catalog
from .version import __version__


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """CMR search broker - collection search gateway for the browser."""
    logging.basicConfig(level=logging.INFO)


@cli.command()
@click.option("--host", default="localhost", help="Host to bind.")
@click.option("--port", default=8080, help="Port to bind.", type=int)
@click.option(
    "--skip-catalog-check",
    is_flag=True,
    default=False,
    help="Skip the catalog reachability check at startup.",
)
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, *, skip_catalog_check: bool) -> None:
    """Start the broker HTTP server."""
    try:
        config = get_broker_config()
    except ValueError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        ctx.exit(1)

    if not skip_catalog_check:
        try:
            check_catalog(config.catalog_url)
        except CatalogCheckError as e:
            click.echo(str(e), err=True)
            sys.stderr.flush()
            ctx.exit(1)
    else:
        click.echo("Skipping catalog check as requested.")

    import uvicorn

    from .server import create_app

    click.echo("Starting CMR search broker")
    click.echo(f"Version: {__version__}")
    click.echo(f"Catalog: {config.catalog_url}")
    click.echo(f"Server URL: http://{host}:{port}")
    click.echo("Press CTRL+C to stop")

    uvicorn.run(create_app(config), host=host, port=port)


def main() -> None:
    """Main entry point for the CLI."""
    cli()
