"""WorkflowKart command line - API server, migrations and workflow runs."""

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

import click
import uvicorn

from src.workflowkart.core.config import get_settings
from src.workflowkart.core.db import dispose_engine, get_session
from src.workflowkart.core.db.migrations import run_migrations_sync
from src.workflowkart.core.logging import setup_logging
from src.workflowkart.core.redis import close_redis
from src.workflowkart.repositories import WorkflowLogRepository
from src.workflowkart.schemas.execution import WorkflowExecutionRead, WorkflowLogRead
from src.workflowkart.services.factory import open_runtime_engine
from src.workflowkart.services.runtime_engine import Failed, RuntimeEngine


def _run[T](fn: Callable[[RuntimeEngine], Awaitable[T]]) -> T:
    """Run `fn` against a fresh RuntimeEngine and release connections afterwards."""

    async def main() -> T:
        try:
            async with open_runtime_engine() as engine:
                return await fn(engine)
        finally:
            await close_redis()
            await dispose_engine()

    return asyncio.run(main())


def _parse_input(ctx: click.Context, param: click.Parameter, value: str | None) -> Any:
    if value is None:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise click.BadParameter("must be a JSON object")
    return parsed


user_option = click.option(
    "--user", "user_id", type=click.UUID, required=True, help="ID of the user running the workflow"
)


@click.group()
def cli() -> None:
    """WorkflowKart CLI - runtime server, database and workflow management."""
    setup_logging(get_settings().debug)


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind the server to")  # noqa: S104
@click.option("--port", default=8000, help="Port to bind the server to")
@click.option("--reload/--no-reload", default=False, help="Enable/disable auto-reload")
@click.option("--log-level", default="info", help="Logging level")
@click.option("--workers", default=1, help="Number of worker processes")
def serve(host: str, port: int, reload: bool, log_level: str, workers: int) -> None:
    """Start the API server."""
    click.echo(f"Starting WorkflowKart API on {host}:{port}")
    uvicorn.run(
        app="src.workflowkart.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers if not reload else 1,
        log_level=log_level,
        log_config=None,  # keep the structlog handlers installed by setup_logging
    )


@cli.command()
@click.option("--revision", default="head", help="Target revision")
def migrate(revision: str) -> None:
    """Run database migrations."""
    click.echo(f"Upgrading database to {revision}...")
    try:
        run_migrations_sync(revision)
    except Exception as e:
        click.echo(f"Migration failed: {e}", err=True)
        sys.exit(1)
    click.echo("Migrations completed")


@cli.group()
def workflow() -> None:
    """Execute workflows and inspect their history."""


@workflow.command("execute")
@click.argument("workflow_id", type=click.UUID)
@user_option
@click.option("--input", "input_", callback=_parse_input, help="Workflow input as a JSON object")
def execute(workflow_id: UUID, user_id: UUID, input_: dict[str, Any] | None) -> None:
    """Execute WORKFLOW_ID as --user and print the execution record."""
    click.echo(f"Executing workflow {workflow_id}...")
    execution, outcome = _run(lambda engine: engine.run(workflow_id, user_id, input_))

    click.echo(WorkflowExecutionRead.model_validate(execution).model_dump_json(indent=2))
    if isinstance(outcome, Failed):
        click.echo(f"Execution failed: {outcome.message}", err=True)
        sys.exit(1)
    click.echo("Execution completed")


@workflow.command("executions")
@click.argument("workflow_id", type=click.UUID)
@user_option
@click.option("--limit", default=10, type=click.IntRange(min=1), help="Max items to show")
@click.option("--offset", default=0, type=click.IntRange(min=0), help="Items to skip")
def executions(workflow_id: UUID, user_id: UUID, limit: int, offset: int) -> None:
    """List a user's executions of WORKFLOW_ID, newest first."""
    records = _run(
        lambda engine: engine.list_executions(workflow_id, user_id, limit=limit, offset=offset)
    )
    if not records:
        click.echo("No executions found")
        return
    for record in records:
        read = WorkflowExecutionRead.model_validate(record)
        line = f"{read.id}  {read.status:<9}  {read.started_at:%Y-%m-%d %H:%M:%S}"
        if read.error:
            line += f"  {read.error}"
        click.echo(line)


@workflow.command("logs")
@click.argument("workflow_id", type=click.UUID)
@user_option
@click.option("--limit", default=50, type=click.IntRange(min=1), help="Max items to show")
@click.option("--offset", default=0, type=click.IntRange(min=0), help="Items to skip")
def logs(workflow_id: UUID, user_id: UUID, limit: int, offset: int) -> None:
    """Show log entries for WORKFLOW_ID written for --user, newest first."""
    entries = _run(
        lambda engine: engine.list_logs(workflow_id, user_id, limit=limit, offset=offset)
    )
    if not entries:
        click.echo("No logs found")
        return
    for entry in entries:
        read = WorkflowLogRead.model_validate(entry)
        click.echo(f"[{read.timestamp:%Y-%m-%d %H:%M:%S}] {read.level}: {read.message}")
        if read.metadata:
            click.echo(f"    {json.dumps(read.metadata, default=str)}")


@workflow.command("cleanup-logs")
@click.option(
    "--days", type=click.IntRange(min=1), help="Retention in days (default from settings)"
)
def cleanup_logs(days: int | None) -> None:
    """Delete workflow log entries older than the retention period."""
    retention_days = days or get_settings().log_retention_days

    async def main() -> int:
        try:
            async with get_session() as session:
                return await WorkflowLogRepository(session).cleanup_old_logs(retention_days)
        finally:
            await dispose_engine()

    deleted = asyncio.run(main())
    click.echo(f"Deleted {deleted} log entries older than {retention_days} days")


if __name__ == "__main__":
    cli()
