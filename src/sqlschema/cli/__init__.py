"""CLI module for MySQL table schema synchronization.

Provides commands for listing profiles, inspecting live tables, and planning
or applying the DDL that brings tables in line with a definition file.

Usage:
    sqlschema profiles
    DB_PROFILE=local sqlschema inspect users
    sqlschema --profile local plan --schema-file tables.toml
    sqlschema --profile local sync --schema-file tables.toml --table users --confirm

Commands:
    profiles  - List available profiles
    inspect   - Show the live structure of a table
    plan      - Show the statements needed to sync declared tables
    sync      - Apply those statements
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from sqlschema.config.loader import load_db_config, load_table_definitions
from sqlschema.config.models import TableDefinitions
from sqlschema.errors import SchemaSyncError
from sqlschema.factory import ProfileNotFoundError, get_adapter, get_active_profile_name
from sqlschema.schema.introspector import SchemaIntrospector
from sqlschema.schema.models import TableSchema
from sqlschema.schema.sync import SyncPlan, apply_sync, plan_sync

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _config_path(args: argparse.Namespace) -> Path | None:
    return Path(args.config) if getattr(args, "config", None) else None


def _load_definitions(args: argparse.Namespace) -> TableDefinitions:
    """Load the table definition file named by ``--schema-file`` or db.toml.

    Raises:
        FileNotFoundError: If the definition file (or db.toml) is missing.
        ValueError: If the file is invalid or ``--table`` is not declared.
    """
    schema_file = args.schema_file
    if schema_file is None:
        schema_file = load_db_config(_config_path(args)).schema_file

    definitions = load_table_definitions(schema_file)
    if args.table:
        table = definitions.get(args.table)
        if table is None:
            raise ValueError(f"Table '{args.table}' not declared in {schema_file}")
        definitions = TableDefinitions(tables=[table])
    return definitions


def _print_table_schema(schema: TableSchema) -> None:
    """Print a table structure as rich tables."""
    options = ", ".join(
        f"{label}={value}"
        for label, value in (
            ("engine", schema.engine),
            ("collation", schema.collation),
            ("comment", schema.comment),
        )
        if value
    )
    columns = Table(
        title=f"{schema.name}" + (f" ({options})" if options else ""),
        show_header=True,
        header_style="bold",
    )
    columns.add_column("Column")
    columns.add_column("Type")
    columns.add_column("Null")
    columns.add_column("Default")
    columns.add_column("Extra", style="dim")
    columns.add_column("Comment", style="dim")
    for column in schema.columns:
        columns.add_row(
            column.name,
            column.data_type,
            "YES" if column.is_nullable else "NO",
            column.default if column.default is not None else "",
            "auto_increment" if column.auto_increment else "",
            column.comment,
        )
    console.print(columns)

    if schema.indexes:
        indexes = Table(title="Indexes", show_header=True, header_style="bold")
        indexes.add_column("Name")
        indexes.add_column("Kind")
        indexes.add_column("Columns")
        for index in schema.indexes:
            indexes.add_row(index.name, index.kind.value, ", ".join(index.columns))
        console.print(indexes)


def _print_plan(plan: SyncPlan) -> None:
    if plan.action == "none":
        console.print(f"[bold green]v[/bold green] {plan.table}: in sync")
        return

    if plan.action == "create":
        console.print(f"[bold yellow]+[/bold yellow] {plan.table}: [bold]CREATE TABLE[/bold]")
    else:
        console.print(f"[bold yellow]~[/bold yellow] {plan.table}: {len(plan.changes)} change(s)")
        for change in plan.changes:
            console.print(f"    - {change}")
    for sql in plan.statements:
        console.print(f"    [cyan]{sql};[/cyan]", highlight=False, soft_wrap=True)


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_inspect(args: argparse.Namespace) -> int:
    """Async implementation for inspect command.

    Returns:
        0 if the table exists, 1 otherwise.
    """
    adapter = get_adapter(args.profile, env_prefix=args.env_prefix, config_path=_config_path(args))
    try:
        schema = await SchemaIntrospector(adapter).read_table(args.table_name)
    finally:
        await adapter.close()

    if schema is None:
        console.print(f"[yellow]Table '{args.table_name}' not found.[/yellow]")
        return 1

    _print_table_schema(schema)
    return 0


async def _async_plan(args: argparse.Namespace, apply: bool) -> int:
    """Async implementation for plan and sync commands.

    Args:
        args: Parsed arguments.
        apply: Execute the statements (sync) instead of only showing them.

    Returns:
        0 on success, 1 on failure.
    """
    definitions = _load_definitions(args)

    adapter = get_adapter(args.profile, env_prefix=args.env_prefix, config_path=_config_path(args))
    try:
        pending = 0
        for desired in definitions.tables:
            plan = await plan_sync(adapter, desired)
            _print_plan(plan)
            if not plan.has_changes:
                continue
            pending += 1

            if apply:
                result = await apply_sync(adapter, plan, dry_run=False, confirm=args.confirm)
                if not result.success:
                    console.print(f"\n[red]Error: {result.error}[/red]")
                    console.print("[dim]Re-run with[/dim] [cyan]--confirm[/cyan] [dim]to apply.[/dim]")
                    return 1
                console.print(
                    f"  [bold green]v[/bold green] {result.statement_count} statement(s) applied"
                )
    finally:
        await adapter.close()

    console.print()
    if pending == 0:
        console.print("[bold green]v[/bold green] All tables in sync")
    elif not apply:
        console.print(f"{pending} table(s) need changes. Run [cyan]sqlschema sync --confirm[/cyan] to apply.")
    return 0


# ============================================================================
# Command wrappers (sync entry points)
# ============================================================================


def _run(coro) -> int:
    """Run an async command, reporting expected failures as exit code 1."""
    try:
        return asyncio.run(coro)
    except (FileNotFoundError, ValueError, ProfileNotFoundError, SchemaSyncError) as e:
        console.print(f"\n[red]Error: {e}[/red]")
        if e.__cause__ is not None:
            console.print(f"[dim]Caused by: {e.__cause__}[/dim]")
        return 1


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    try:
        config = load_db_config(_config_path(args))
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    try:
        current = args.profile or get_active_profile_name(args.env_prefix, config)
    except ProfileNotFoundError:
        current = None

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        table.add_row(
            marker,
            f"[bold cyan]{name}[/bold cyan]" if name == current else name,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = active profile")

    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Show the live structure of a table.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return _run(_async_inspect(args))


def cmd_plan(args: argparse.Namespace) -> int:
    """Show the statements that would sync the declared tables.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return _run(_async_plan(args, apply=False))


def cmd_sync(args: argparse.Namespace) -> int:
    """Apply the statements that sync the declared tables.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return _run(_async_plan(args, apply=True))


# ============================================================================
# Main entry point
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="sqlschema",
        description="Synchronize MySQL table structures with declared schemas",
    )
    parser.add_argument("--config", default=None, help="Path to db.toml (default: ./db.toml)")
    parser.add_argument("--profile", "-p", default=None, help="Profile name from db.toml")
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log probes and statements")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    # inspect command
    p_inspect = subparsers.add_parser("inspect", help="Show the live structure of a table")
    p_inspect.add_argument("table_name", help="Table to inspect")
    p_inspect.set_defaults(func=cmd_inspect)

    # plan and sync commands
    for name, func, help_text in (
        ("plan", cmd_plan, "Show the statements needed to sync declared tables"),
        ("sync", cmd_sync, "Apply the statements needed to sync declared tables"),
    ):
        p_cmd = subparsers.add_parser(name, help=help_text)
        p_cmd.add_argument(
            "--schema-file",
            default=None,
            help="TOML table definition file (default: [schema] file in db.toml)",
        )
        p_cmd.add_argument("--table", default=None, help="Only this declared table")
        if name == "sync":
            p_cmd.add_argument("--confirm", action="store_true", help="Apply changes")
        p_cmd.set_defaults(func=func)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
