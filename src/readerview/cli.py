"""Command-line interface for readerview."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from readerview import __version__
from readerview.config import Config, load_config
from readerview.exceptions import ReaderViewError
from readerview.observability.logging import configure_logging, get_logger
from readerview.service import STDIN_PATH, OutputMode, ReaderService

logger = get_logger(__name__)

HELP = """Extract the article contents of a web page.

SOURCE can be a URL or a filesystem path to an HTML file. Pass "-" or no
argument to read the HTML document from standard input. Use "--http :0" to
let the HTTP server pick an available port.
"""


def parse_listen_address(value: str, default_host: str) -> Tuple[str, int]:
    """Split ``host:port`` (host optional) into its parts."""
    host, sep, port = value.rpartition(":")
    if not sep:
        host, port = "", value
    try:
        port_number = int(port)
    except ValueError:
        raise click.BadParameter(f"invalid listen address: {value!r}", param_hint="--http") from None
    if not 0 <= port_number <= 65535:
        raise click.BadParameter(f"invalid port: {port_number}", param_hint="--http")
    return host.strip("[]") or default_host, port_number


def _load_config(config_path: Optional[str]) -> Config:
    try:
        return load_config(Path(config_path) if config_path else None)
    except (ValueError, OSError) as e:
        raise click.ClickException(f"failed to load configuration: {e}") from e


@click.command(help=HELP, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--http", "-l", "http_listen", metavar="ADDR", help='Start the HTTP server at ADDR (example: ":3000").')
@click.option("--metadata", "-m", "metadata_only", is_flag=True, help="Only print the page's metadata.")
@click.option("--text", "-t", "text_only", is_flag=True, help="Only print the page's text.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option("--force", "-f", is_flag=True, help="Continue parsing documents that failed the readerable check.")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.argument("source", default=STDIN_PATH, required=False)
def cli(
    http_listen: Optional[str],
    metadata_only: bool,
    text_only: bool,
    verbose: bool,
    force: bool,
    config_path: Optional[str],
    source: str,
) -> None:
    config = _load_config(config_path)
    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config.logging)

    if http_listen:
        from readerview.web.main import run_web_server

        host, port = parse_listen_address(http_listen, "0.0.0.0")
        click.echo(f"Starting HTTP server at http://{host}:{port}", err=True)
        run_web_server(host=host, port=port, config=config)
        return

    service = ReaderService(config)
    try:
        content = service.get_content(
            source,
            OutputMode.from_flags(metadata_only=metadata_only, text_only=text_only),
            force=force,
            verbose=verbose,
            warn=lambda message: click.echo(message, err=True),
        )
    except ReaderViewError as e:
        logger.debug("extraction failed", **e.to_dict())
        click.echo(e.message, err=True)
        sys.exit(1)
    finally:
        service.close()

    click.echo(content)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
