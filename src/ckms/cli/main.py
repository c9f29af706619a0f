import asyncio
import datetime
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from fastapi import HTTPException
from pydantic import ValidationError
from tortoise import Tortoise

from ..core import logging_config  # noqa: F401  (configures the "ckms" logger)
from ..core.config import TORTOISE_ORM
from ..features.auth.security import create_user_token
from ..features.reports.row_source import TortoiseRowSource
from ..features.reports.schemas import ExportQuery
from ..features.reports.service import ReportsService
from ..features.stores.models import Store

logger = logging.getLogger(__name__)

app = typer.Typer(name="ckms-cli", help="CLI for the CKMS reporting service.")


# Shared async context manager for database connection
class DBConnection:
    def __init__(self, generate_schemas: bool = False):
        self.generate_schemas = generate_schemas

    async def __aenter__(self):
        await Tortoise.init(config=TORTOISE_ORM)
        if self.generate_schemas:
            await Tortoise.generate_schemas(safe=True) # Generate schema if it doesn't exist
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()


db_app = typer.Typer(name="db", help="Database utilities.")
reports_app = typer.Typer(name="reports", help="Run reports from the command line.")
tokens_app = typer.Typer(name="tokens", help="Developer bearer tokens.")
app.add_typer(db_app)
app.add_typer(reports_app)
app.add_typer(tokens_app)


@db_app.command("init")
def init_db_command():
    """Creates any missing tables."""
    asyncio.run(_init_db())


async def _init_db():
    async with DBConnection(generate_schemas=True):
        typer.secho("Database schema is up to date.", fg=typer.colors.GREEN)


@db_app.command("check")
def check_db_command():
    """Tests the database connection and counts stores."""
    asyncio.run(_check_db())


async def _check_db():
    async with DBConnection():
        typer.echo("Successfully connected to the database.")
        store_count = await Store.all().count()
        typer.echo(f"Found {store_count} store(s) in the database.")


def _report_query(
    report_type: str, date_from: Optional[datetime.datetime], date_to: Optional[datetime.datetime],
    store_id: Optional[int], group_by: str, chain_id: Optional[int],
) -> ExportQuery:
    try:
        return ExportQuery(
            type=report_type,
            date_from=date_from.date() if date_from else None,
            date_to=date_to.date() if date_to else None,
            store_id=store_id,
            group_by=group_by,
            chain_id=chain_id,
        )
    except ValidationError as e:
        raise typer.BadParameter("; ".join(err["msg"] for err in e.errors()))


async def _build_report(query: ExportQuery):
    service = ReportsService(TortoiseRowSource())
    async with DBConnection():
        if query.type == "orders":
            return await service.get_orders_report(query)
        if query.type == "production":
            return await service.get_production_report(query)
        if query.type == "inventory":
            return await service.get_inventory_report(query)
        return await service.get_delivery_report(query)


async def _export(query: ExportQuery):
    async with DBConnection():
        return await ReportsService(TortoiseRowSource()).export_report(query)


@reports_app.command("show")
def show_report_command(
    report_type: str = typer.Argument("orders", help="orders, production, inventory or delivery"),
    date_from: Optional[datetime.datetime] = typer.Option(None, "--date-from", formats=["%Y-%m-%d"]),
    date_to: Optional[datetime.datetime] = typer.Option(None, "--date-to", formats=["%Y-%m-%d"]),
    store_id: Optional[int] = typer.Option(None, "--store-id"),
    group_by: str = typer.Option("day", "--group-by", help="day, week or month"),
    chain_id: Optional[int] = typer.Option(None, "--chain-id", help="Limit to one chain"),
):
    """Prints a report as JSON."""
    query = _report_query(report_type, date_from, date_to, store_id, group_by, chain_id)
    try:
        report = asyncio.run(_build_report(query))
    except HTTPException as e:
        typer.secho(f"Error: {e.detail}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(report.model_dump(mode="json", by_alias=True), indent=2))


@reports_app.command("export")
def export_report_command(
    report_type: str = typer.Argument("orders", help="orders, production, inventory or delivery"),
    output_dir: Path = typer.Option(Path("."), "--output-dir", file_okay=False, help="Where to write the file"),
    date_from: Optional[datetime.datetime] = typer.Option(None, "--date-from", formats=["%Y-%m-%d"]),
    date_to: Optional[datetime.datetime] = typer.Option(None, "--date-to", formats=["%Y-%m-%d"]),
    store_id: Optional[int] = typer.Option(None, "--store-id"),
    group_by: str = typer.Option("day", "--group-by", help="day, week or month"),
    chain_id: Optional[int] = typer.Option(None, "--chain-id", help="Limit to one chain"),
):
    """Writes a report as CSV."""
    query = _report_query(report_type, date_from, date_to, store_id, group_by, chain_id)
    try:
        exported = asyncio.run(_export(query))
    except HTTPException as e:
        typer.secho(f"Error: {e.detail}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / exported.filename
    target.write_bytes(exported.content)
    logger.info("Exported %s report to %s", query.type, target)
    typer.secho(f"Wrote {target}", fg=typer.colors.GREEN)


@tokens_app.command("issue")
def issue_token_command(
    sub: str = typer.Option(..., help="Subject (user id) for the token."),
    chain_id: int = typer.Option(..., "--chain-id", help="Chain the user belongs to."),
    role: str = typer.Option("manager", help="Role claim, e.g. admin or manager."),
    email: Optional[str] = typer.Option(None, help="Email claim."),
    store_id: Optional[int] = typer.Option(None, "--store-id", help="Home store claim."),
    minutes: int = typer.Option(60, help="Lifetime in minutes."),
):
    """Prints a signed bearer token for local development."""
    token = create_user_token(
        sub=sub, chain_id=chain_id, role=role, email=email, store_id=store_id,
        expires_delta=datetime.timedelta(minutes=minutes),
    )
    typer.echo(token)


if __name__ == "__main__":
    app()
