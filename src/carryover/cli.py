"""Admin CLI for carryover."""

from __future__ import annotations

import click

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelPeriodRepository
from .logging_config import setup_logging
from .services.overview import load_period_overview
from .services.periods import month_label
from .services.rollover import RolloverPropagator


def _format_amount(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Inspect and recompute monthly budget balances."""

    config = ctx.obj if isinstance(ctx.obj, BaseConfig) else BaseConfig()
    setup_logging(config)
    _, session_factory = bootstrap_database(config)
    repository = SQLModelPeriodRepository(session_factory)
    ctx.obj = {
        "config": config,
        "repository": repository,
        "propagator": RolloverPropagator(repository),
    }


@cli.command("init-db")
def init_db() -> None:
    """Create database tables."""

    # Tables are created by the group callback.
    click.echo("Database ready.")


def _load_period(ctx: click.Context, user_id: int, year: int, month: int):
    repository: SQLModelPeriodRepository = ctx.obj["repository"]
    period = repository.get_period(user_id, month, year)
    if period is None:
        click.echo(f"No period for user {user_id} in {month_label(month, year)}.", err=True)
        ctx.exit(1)
    return period


_period_options = [
    click.option("--user-id", type=int, required=True, help="Owner of the period"),
    click.option("--year", type=int, required=True, help="Calendar year, e.g. 2025"),
    click.option("--month", type=click.IntRange(1, 12), required=True, help="Calendar month, 1-12"),
]


def period_options(func):
    for option in reversed(_period_options):
        func = option(func)
    return func


@cli.command("recompute")
@period_options
@click.pass_context
def recompute(ctx: click.Context, user_id: int, year: int, month: int) -> None:
    """Recompute a period and cascade the rollover into later months."""

    period = _load_period(ctx, user_id, year, month)
    propagator: RolloverPropagator = ctx.obj["propagator"]
    balance = propagator.recompute_and_propagate(period)
    if balance is None:
        click.echo(f"Recompute of {month_label(month, year)} failed; see logs.", err=True)
        ctx.exit(2)

    click.echo(f"{month_label(month, year)}")
    click.echo(f"  rollover in:      {_format_amount(balance.rollover_in)}")
    click.echo(f"  ending balance:   {_format_amount(balance.ending_balance)}")
    click.echo(f"  rollover balance: {_format_amount(balance.rollover_balance)}")

    repository: SQLModelPeriodRepository = ctx.obj["repository"]
    for later in repository.list_for_user(user_id):
        if (later.year, later.month) <= (year, month):
            continue
        click.echo(
            f"  {month_label(later.month, later.year)}: "
            f"ending {_format_amount(later.ending_balance)}, "
            f"carry {_format_amount(later.rollover_balance)}"
        )


@cli.command("show")
@period_options
@click.pass_context
def show(ctx: click.Context, user_id: int, year: int, month: int) -> None:
    """Print the balance figures of a period."""

    period = _load_period(ctx, user_id, year, month)
    overview = load_period_overview(ctx.obj["repository"], ctx.obj["propagator"], period.id)
    metrics = overview.metrics

    click.echo(f"{month_label(month, year)}")
    if overview.rollover_line is not None:
        click.echo(f"  {overview.rollover_line.name}: {overview.rollover_line.kind} {_format_amount(overview.rollover_line.amount)}")
    click.echo(f"  income:    {_format_amount(metrics.total_income)}")
    click.echo(f"  expenses:  {_format_amount(metrics.total_expenses)}")
    click.echo(f"  available: {_format_amount(metrics.available)}")
    click.echo(f"  remaining: {_format_amount(metrics.remaining)}")
    click.echo(f"  realized:  {_format_amount(overview.realized.realized_balance)}")


def main() -> None:  # pragma: no cover - console entry point
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
