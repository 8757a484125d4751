"""``flask seed`` commands loading the sample workout catalogue.

``flask seed run`` adds the sample workouts that are missing (matched by name)
plus a short completion history. ``flask seed fresh`` rebuilds the schema
first and is refused when ``APP_ENV`` is ``production``.
"""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from gym_buddy.core.extensions import db
from gym_buddy.seeds import seed_data

LOGGER = logging.getLogger(__name__)

verbose_option = click.option(
    "--verbose", is_flag=True, help="Log every seeded workout."
)
completions_option = click.option(
    "--completions/--no-completions",
    default=True,
    show_default=True,
    help="Also back-fill sample completion history.",
)


def _seed(*, verbose: bool, completions: bool) -> dict[str, dict[str, int]]:
    if verbose:
        logging.getLogger(seed_data.__name__).setLevel(logging.INFO)
    try:
        return seed_data.run_all(db, verbose=verbose, with_completions=completions)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise click.ClickException(f"Seeding failed: {exc}") from exc


def _report(summary: dict[str, dict[str, int]]) -> None:
    if not summary:
        click.echo("Nothing to seed.")
        return
    for table, counters in sorted(summary.items()):
        click.echo(
            f"{table}: {counters.get('created', 0)} added, "
            f"{counters.get('existing', 0)} already present"
        )


@click.group("seed")
def seed_cli() -> None:
    """Load sample workouts for local development."""


@seed_cli.command("run")
@verbose_option
@completions_option
@with_appcontext
def run_command(verbose: bool, completions: bool) -> None:
    """Add the sample workouts that are not present yet."""
    _report(_seed(verbose=verbose, completions=completions))


@seed_cli.command("fresh")
@click.option("--yes", is_flag=True, help="Do not ask before dropping every table.")
@verbose_option
@completions_option
@with_appcontext
def fresh_command(yes: bool, verbose: bool, completions: bool) -> None:
    """Drop and recreate every table, then seed."""
    if str(current_app.config.get("APP_ENV", "")).lower() == "production":
        raise click.UsageError("'flask seed fresh' is restricted to non-production environments.")
    if not yes:
        click.confirm("Drop all workouts, exercises and completions?", abort=True)

    LOGGER.warning("Rebuilding schema for %s", db.engine.url.render_as_string(hide_password=True))
    db.session.remove()
    db.drop_all()
    db.create_all()
    _report(_seed(verbose=verbose, completions=completions))
