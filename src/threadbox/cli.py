"""Command-line tools for inspecting inbox snapshots.

Loads a JSON snapshot through ``SnapshotInboxApi``, runs the same
build/reconcile pipeline the application uses and prints the result.
"""

import asyncio
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from threadbox.api import SnapshotInboxApi, StaticTokenProvider
from threadbox.config import InboxConfig, load_config
from threadbox.errors import InboxError
from threadbox.models import Thread
from threadbox.monitoring import configure_logging
from threadbox.projection import FilterMode
from threadbox.tracker import InboxStore

console = Console()

FILTER_CHOICES = [mode.value for mode in FilterMode]


def _format_time(thread: Thread) -> str:
    if thread.last_activity is None:
        return "-"
    return thread.last_activity.strftime("%d/%m/%Y %H:%M")


def _preview(text: str, width: int = 40) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 1] + "…"


def _load_store(ctx: click.Context, snapshot: Path) -> InboxStore:
    config: InboxConfig = ctx.obj["config"]
    store = InboxStore(SnapshotInboxApi.from_file(snapshot), StaticTokenProvider(config.api_token), config)
    try:
        asyncio.run(store.refresh())
    except InboxError as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)
    return store


@click.group()
@click.option("-v", "--verbose", is_flag=True)
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Load settings from this .env file.",
)
@click.option("--token", envvar="THREADBOX_API_TOKEN", help="API token (overrides config).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write logs to this file.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    env_file: Path | None,
    token: str | None,
    log_file: Path | None,
):
    """Inspect inbox threads built from a snapshot."""
    try:
        config = load_config(env_file)
    except InboxError as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)
    if token:
        config = config.model_copy(update={"api_token": token})

    configure_logging("DEBUG" if verbose else config.log_level, log_file=log_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command("threads")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--filter",
    "mode",
    type=click.Choice(FILTER_CHOICES),
    default=FilterMode.ALL.value,
    show_default=True,
)
@click.pass_context
def threads_(ctx: click.Context, snapshot: Path, mode: str):
    """List threads, most recent activity first."""
    store = _load_store(ctx, snapshot)
    threads = store.project(mode)

    if not threads:
        console.print(f"[yellow]No {mode} threads[/]" if mode != "all" else "[yellow]No messages[/]")
        return

    table = Table(title=f"Threads ({mode})")
    table.add_column("ID", justify="right")
    table.add_column("Correspondent")
    table.add_column("Last activity")
    table.add_column("Unread", justify="right")
    table.add_column("Replies", justify="right")
    table.add_column("Last message")

    for thread in threads:
        last = thread.last_message
        table.add_row(
            str(thread.id),
            thread.correspondent.name,
            _format_time(thread),
            f"[bold blue]{thread.unread_count}[/]" if thread.unread_count else "0",
            str(thread.reply_count),
            _preview(last.content) if last else "",
        )

    console.print(table)
    console.print(f"Unread: [bold]{store.global_unread}[/]")
    if store.discarded:
        console.print(f"[dim]Discarded {store.discarded} message(s) without correspondent[/]")


@cli.command("show")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("correspondent_id", type=int)
@click.pass_context
def show_(ctx: click.Context, snapshot: Path, correspondent_id: int):
    """Show the messages of one thread."""
    store = _load_store(ctx, snapshot)
    try:
        thread = store.get_thread(correspondent_id)
    except KeyError:
        console.print(f"[red]Error: Thread {correspondent_id} not found[/]")
        sys.exit(1)

    console.print(
        f"[bold]{thread.correspondent.name}[/] <{thread.correspondent.email}>"
        f"  unread: {thread.unread_count}  anchor: {thread.anchor_id}"
    )
    for message in thread.messages:
        who = "admin" if message.is_admin else "user"
        stamp = message.timestamp.strftime("%H:%M") if message.timestamp else "--:--"
        flag = " [blue]•[/]" if message.is_unread else ""
        style = "green" if message.is_admin else "default"
        console.print(f"[dim]{stamp}[/] [{style}]{who:>5}[/]: {message.content}{flag}")


@cli.command("stats")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def stats_(ctx: click.Context, snapshot: Path):
    """Show API call metrics for loading a snapshot."""
    store = _load_store(ctx, snapshot)

    table = Table(title="API calls")
    table.add_column("Operation")
    table.add_column("Total", justify="right")
    table.add_column("OK", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Avg (s)", justify="right")
    for operation, stats in sorted(store.metrics.get_operation_breakdown().items()):
        table.add_row(
            operation,
            str(stats["total"]),
            str(stats["successful"]),
            str(stats["failed"]),
            f"{stats['avg_duration']:.3f}",
        )
    console.print(table)

    summary = store.metrics.get_stats()
    console.print(
        f"Calls: [bold]{summary['total_operations']}[/]"
        f"  success rate: {summary['success_rate']}%"
    )

    errors = store.metrics.get_recent_errors()
    if errors:
        console.print("[bold red]Recent errors[/]")
        for error in errors:
            console.print(f"  [dim]{error['timestamp']}[/] {error['operation']}: {error['error']}")


if __name__ == "__main__":
    cli()
