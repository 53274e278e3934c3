"""CLI entry point for sqlsession.

Runs ad-hoc queries and updates against the configured data source,
mostly useful to check a configuration before wiring it into an
application.
"""

import json
from pathlib import Path
from typing import Any

import click

from sqlsession import __version__
from sqlsession.errors import SqlSessionError


def _coerce(value: str) -> object:
    """Interpret a --param string as NULL, int, float or text."""
    if value.lower() == "null":
        return None
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def _load_settings(config: Path | None) -> Any:
    """Load configuration and set up logging for a command."""
    from sqlsession.config.loader import load_config
    from sqlsession.utils.logging import configure_logging

    try:
        cfg = load_config(config)
    except (SqlSessionError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    configure_logging(cfg.logging)
    return cfg


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
param_option = click.option(
    "--param",
    "-p",
    "params",
    multiple=True,
    help="Positional parameter value (repeatable; 'null' for NULL)",
)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Resource-safe SQL sessions over DB-API drivers.

    Reads the data source from a YAML configuration file or
    SQLSESSION_* environment variables.
    """
    pass


@cli.command()
@click.argument("sql")
@param_option
@config_option
def query(sql: str, params: tuple[str, ...], config: Path | None) -> None:
    """Run a query and print its rows as JSON."""
    from sqlsession.extractors import extract_dict
    from sqlsession.factory import SessionFactory
    from sqlsession.models.query import sql_query

    cfg = _load_settings(config)

    try:
        with SessionFactory(cfg).session() as session:
            rows = session.json_array(sql_query(sql, *(_coerce(p) for p in params)), extract_dict)
    except SqlSessionError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(rows, indent=2, default=str))


@cli.command()
@click.argument("sql")
@param_option
@config_option
def execute(sql: str, params: tuple[str, ...], config: Path | None) -> None:
    """Run an update in a transaction and print the affected row count."""
    from sqlsession.factory import SessionFactory
    from sqlsession.models.query import sql_query

    cfg = _load_settings(config)

    try:
        statement = sql_query(sql, *(_coerce(p) for p in params))
        with SessionFactory(cfg).session() as session:
            count = session.transaction(lambda tx: tx.update(statement))
    except SqlSessionError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"{count} row(s) affected")


if __name__ == "__main__":
    cli()
