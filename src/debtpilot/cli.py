"""Command-line entry points for DebtPilot."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
import pandas as pd

from .config import BaseConfig
from .exceptions import DebtPilotError
from .logging_config import get_logger, setup_logging
from .models.debt import Debt

logger = get_logger("cli")


def _failure(message: str, **context) -> click.ClickException:
    logger.warning("Command failed: %s", message, extra=context)
    return click.ClickException(message)


def _money(value: float) -> str:
    return f"{value:,.2f}"


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Debt payoff planning and statement import tools."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = config


def _debt_options(func):
    func = click.option("--rate", type=float, default=0.0, show_default=True, help="Annual interest rate in percent")(func)
    func = click.option("--installment", type=float, required=True, help="Monthly installment")(func)
    func = click.option("--balance", type=float, required=True, help="Remaining balance")(func)
    return func


@cli.command("simulate")
@_debt_options
@click.option("--extra", type=float, default=0.0, show_default=True, help="Extra monthly payment")
@click.option("--schedule", is_flag=True, default=False, help="Print the month-by-month schedule")
@click.pass_obj
def simulate_command(
    config: BaseConfig, balance: float, installment: float, rate: float, extra: float, schedule: bool
) -> None:
    """Simulate paying off a single debt."""

    from .services.amortization import calculate_payoff_date, simulate

    debt = Debt(remaining_amount=balance, installment_value=installment, interest_rate=rate)
    try:
        result = simulate(debt, extra, max_horizon_months=config.MAX_HORIZON_MONTHS)
    except DebtPilotError as exc:
        raise _failure(str(exc), command="simulate") from exc

    if schedule:
        click.echo(f"{'month':>5}  {'payment':>12}  {'interest':>10}  {'principal':>12}  {'remaining':>12}")
        for step in result.history:
            click.echo(
                f"{step.month:>5}  {_money(step.payment):>12}  {_money(step.interest):>10}  "
                f"{_money(step.principal):>12}  {_money(step.remaining):>12}"
            )

    click.echo(f"Months: {result.months}")
    click.echo(f"Total interest: {_money(result.total_interest)}")
    click.echo(f"Total paid: {_money(result.total_paid)}")
    if result.horizon_exceeded:
        click.echo(
            f"Not paid off within {config.MAX_HORIZON_MONTHS} months; "
            f"{_money(result.remaining)} would still be owed."
        )
    else:
        click.echo(f"Payoff date: {calculate_payoff_date(result.months).isoformat()}")


@cli.command("compare")
@_debt_options
@click.option(
    "--extra",
    "extras",
    type=float,
    multiple=True,
    help="Extra monthly payment to compare; the first one is the baseline",
)
@click.pass_obj
def compare_command(
    config: BaseConfig, balance: float, installment: float, rate: float, extras: tuple[float, ...]
) -> None:
    """Compare extra-payment scenarios for a single debt."""

    from .services.amortization import DEFAULT_SCENARIOS, compare_scenarios

    debt = Debt(remaining_amount=balance, installment_value=installment, interest_rate=rate)
    try:
        rows = compare_scenarios(
            debt, extras or DEFAULT_SCENARIOS, max_horizon_months=config.MAX_HORIZON_MONTHS
        )
    except DebtPilotError as exc:
        raise _failure(str(exc), command="compare") from exc

    click.echo(f"{'extra':>10}  {'months':>6}  {'interest':>12}  {'saved':>12}  {'months saved':>12}")
    for row in rows:
        marker = " *" if row.horizon_exceeded else ""
        click.echo(
            f"{_money(row.extra_payment):>10}  {row.months:>6}  {_money(row.total_interest):>12}  "
            f"{_money(row.savings):>12}  {row.months_saved:>12}{marker}"
        )


@cli.command("prioritize")
@click.argument("debts_csv", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--method",
    type=click.Choice(["snowball", "avalanche"]),
    default="snowball",
    show_default=True,
)
@click.option("--insights/--no-insights", default=False, help="Also print debt insights")
def prioritize_command(debts_csv: Path, method: str, insights: bool) -> None:
    """Rank the debts listed in DEBTS_CSV."""

    from .services.debts import calculate_monthly_interest, prioritize, priority_label
    from .services.insights import generate_debt_insights

    frame = pd.read_csv(debts_csv)
    frame.columns = [c.strip() for c in frame.columns]
    frame = frame.astype(object).where(pd.notna(frame), None)
    try:
        debts = [Debt.from_record(record) for record in frame.to_dict(orient="records")]
    except (KeyError, TypeError, ValueError) as exc:
        raise _failure(f"Could not read debts from {debts_csv.name}: {exc}", command="prioritize") from exc

    ranked = prioritize(debts, method)
    if not ranked:
        click.echo("No active debts.")
        return
    for item in ranked:
        click.echo(
            f"{priority_label(item.priority):>5}  {item.name or '-':<24}  "
            f"{_money(item.remaining_amount):>12}  {item.interest_rate:>6g}%"
        )
    click.echo(f"Monthly interest: {_money(calculate_monthly_interest(debts))}")

    if insights:
        report = generate_debt_insights(debts)
        for insight in report.insights:
            click.echo(f"[{insight.severity}] {insight.title}: {insight.message} ({insight.detail})")


@cli.command("import")
@click.argument("statement", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--user-id", required=True, help="Owner of the imported transactions")
@click.option("--database-url", default=None, help="Override DEBTPILOT_DATABASE_URL")
@click.option("--keep-duplicates", is_flag=True, default=False, help="Import flagged duplicates too")
@click.option("--date-column", default=None, help="Date header for generic CSV files")
@click.option("--description-column", default=None, help="Description header for generic CSV files")
@click.option("--amount-column", default=None, help="Amount header for generic CSV files")
@click.pass_obj
def import_command(
    config: BaseConfig,
    statement: Path,
    user_id: str,
    database_url: str | None,
    keep_duplicates: bool,
    date_column: str | None,
    description_column: str | None,
    amount_column: str | None,
) -> None:
    """Import an OFX or CSV STATEMENT, skipping probable duplicates."""

    from .infra import SQLModelTransactionStore, create_db_engine, create_session_factory, init_database
    from .services.importer import import_statement
    from .services.statements import ColumnMapping

    mapping = None
    if date_column or description_column or amount_column:
        if not (date_column and description_column and amount_column):
            raise click.UsageError(
                "--date-column, --description-column and --amount-column go together"
            )
        mapping = ColumnMapping(date=date_column, description=description_column, amount=amount_column)

    if database_url:
        config.DATABASE_URL = database_url
    engine = create_db_engine(config)
    init_database(engine)
    store = SQLModelTransactionStore(create_session_factory(engine))

    result = asyncio.run(
        import_statement(
            statement,
            store=store,
            user_id=user_id,
            mapping=mapping,
            skip_duplicates=not keep_duplicates,
            config=config,
        )
    )
    engine.dispose()

    if result.errors:
        raise _failure("; ".join(result.errors), command="import", user_id=user_id, file_name=statement.name)
    click.echo(f"Imported {result.created} transaction(s); skipped {result.skipped}.")
    for txn in result.duplicates:
        click.echo(f"  duplicate: {txn.date.isoformat()} {txn.description} {_money(txn.amount)}")
    if result.duplicate_check_failed:
        click.echo("Duplicate check unavailable; all transactions were treated as new.")


def main() -> None:  # pragma: no cover - console script
    cli()
