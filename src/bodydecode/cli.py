"""Command line interface.

Usage:
    bodydecode validate config.yaml
    bodydecode decode -t application/json body.json
    echo 'a=1&b=2' | bodydecode decode -t application/x-www-form-urlencoded
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, BinaryIO

import click

from bodydecode.config import load_config
from bodydecode.exceptions import (
    BodyDecodeError,
    ConfigurationError,
    ConfigValidationError,
)
from bodydecode.registry import new
from bodydecode.request import Request


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Decode HTTP request bodies by content type."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("config_file", type=click.Path(dir_okay=False))
def validate(config_file: str) -> None:
    """Validate a configuration file."""
    try:
        config = load_config(config_file)
    except ConfigValidationError as e:
        click.echo(f"Configuration is invalid: {e.message}", err=True)
        for error in e.errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo("Configuration is valid")
    for key, value in config.to_dict().items():
        click.echo(f"  {key}: {value}")


@main.command()
@click.option("-t", "--content-type", required=True, help="Content-Type header value.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file for the built-in decoders.",
)
@click.argument("body", type=click.File("rb"), default="-")
def decode(content_type: str, config_file: str | None, body: BinaryIO) -> None:
    """Decode BODY (a file, or - for stdin) and print the fields as JSON."""
    try:
        decoders = new(load_config(config_file) if config_file else None)
        request = Request({"Content-Type": content_type}, body.read())
        target: dict[str, Any] = {}
        decoders.decode(request, target)
    except BodyDecodeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(target, indent=2, default=str))
    for name, files in request.files.items():
        for file in files:
            click.echo(f"file {name}: {file.file_name!r} ({file.size} bytes)", err=True)
            file.close()


if __name__ == "__main__":
    main()
