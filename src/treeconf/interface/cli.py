"""
===========================
treeconf Command Line Tools
===========================

``treeconf`` provides the tool :command:`treeconf` for inspecting
configuration sources from the command line.

.. list-table:: ``treeconf`` sub-commands
    :header-rows: 1
    :widths: 30, 40

    *   - Name
        - Description
    *   - | **show**
        - | Loads a file or URL, optionally layered over fallbacks, and prints
          | the resolved tree or the failures met while loading it.

.. click:: treeconf.interface.cli:treeconf
   :prog: treeconf
   :show-nested:

"""
from __future__ import annotations

import json

import click
import yaml
from loguru import logger

from treeconf import sources
from treeconf.config_source import ConfigObjectSource
from treeconf.logging import configure_logging_to_terminal
from treeconf.result import Err

FORMATS = ("yaml", "json")


@click.group()
def treeconf() -> None:
    """A command line utility for inspecting configuration sources.

    Use the ``show`` sub-command to print the resolved configuration found in
    a file or at a URL.
    """
    pass


@treeconf.command()
@click.argument("source")
@click.option(
    "--at",
    "namespace",
    default="",
    help="Only show the value at this path, e.g. 'database.replicas[0]'.",
)
@click.option(
    "--fallback",
    "fallbacks",
    multiple=True,
    help="A file or URL to use for keys SOURCE does not define. May be repeated; "
    "earlier fallbacks take priority.",
)
@click.option(
    "--optional-fallback",
    "optional_fallbacks",
    multiple=True,
    help="Like --fallback, but ignored if it cannot be read.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMATS),
    default="yaml",
    show_default=True,
    help="The output format.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Logs verbosely. Useful for debugging and development.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppresses all logging except for warnings and errors.",
)
def show(
    source: str,
    namespace: str,
    fallbacks: tuple[str, ...],
    optional_fallbacks: tuple[str, ...],
    output_format: str,
    verbose: bool,
    quiet: bool,
) -> None:
    """Print the configuration found in SOURCE.

    SOURCE is a path to a YAML or JSON file, or a file://, http:// or https://
    URL. Substitutions are resolved after all fallbacks are layered in. If the
    configuration cannot be loaded, every failure is printed and the command
    exits with status 1.
    """
    if verbose and quiet:
        raise click.UsageError("Cannot be both verbose and quiet.")
    verbosity = 1 + int(verbose) - int(quiet)
    configure_logging_to_terminal(verbosity=verbosity, long_format=False)

    config_source = _source_for(source)
    for fallback in fallbacks:
        config_source = config_source.with_fallback(_source_for(fallback))
    for fallback in optional_fallbacks:
        config_source = config_source.with_optional_fallback(_source_for(fallback))

    with logger.contextualize(source=source):
        result = config_source.at(namespace).value()
        if isinstance(result, Err):
            logger.debug("Loading {} failed with {} failure(s).", source, len(result.failures))
            click.secho(f"Unable to load configuration from {source}:", fg="red", err=True)
            click.echo(result.failures.pretty_print(indent=1), err=True)
            raise click.exceptions.Exit(1)
        logger.debug("Loaded configuration from {}.", source)

    click.echo(_render(result.value.unwrapped(), output_format), nl=False)


def _source_for(location: str) -> ConfigObjectSource:
    if "://" in location:
        return sources.url(location)
    return sources.file(location)


def _render(data: object, output_format: str) -> str:
    if output_format == "json":
        return json.dumps(data, indent=2) + "\n"
    return yaml.dump(data, default_flow_style=False, sort_keys=False)
