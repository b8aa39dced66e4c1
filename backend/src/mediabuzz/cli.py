"""Command-line interface for MediaBuzz."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from mediabuzz.api.deps import ServiceContainer
from mediabuzz.earnings.models import WithdrawStatus
from mediabuzz.logging_config import get_logger, setup_logging
from mediabuzz.settings import settings
from mediabuzz.storage.store import build_record_store

# Configure logging
setup_logging(settings)
logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="mediabuzz",
    help="MediaBuzz - referral, share earnings and withdraw requests",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


def _services() -> ServiceContainer:
    """Services over the configured record store."""
    return ServiceContainer(settings, build_record_store(settings))


@app.command("serve")
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "0.0.0.0",
    port: Annotated[int, typer.Option("--port", "-p", help="Port")] = 8080,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Run the API server."""
    import uvicorn

    console.print(f"[bold blue]Starting MediaBuzz API on {host}:{port}...[/bold blue]")
    uvicorn.run("mediabuzz.api.main:app", host=host, port=port, reload=reload)


@app.command("add-coins")
def add_coins(
    email: Annotated[str, typer.Argument(help="Email of the user to credit")],
    coins: Annotated[int, typer.Argument(help="Coins to add")],
    note: Annotated[str | None, typer.Option("--note", "-n", help="Admin note")] = None,
) -> None:
    """Credit coins to a user as an approved admin grant."""
    if coins <= 0:
        console.print("[red]Coins must be a positive number[/red]")
        raise typer.Exit(1)

    services = _services()
    user = services.repos.users.find_by_email(email)

    if not user:
        console.print(f"[red]User not found with email: {email}[/red]")
        users = services.users.list_users()
        if users:
            console.print("\n[bold]Available users:[/bold]")
            for existing in users:
                console.print(f"  - {existing.email} (ID: {existing.id})")
        else:
            console.print("[yellow]No users registered yet[/yellow]")
        raise typer.Exit(1)

    record = services.shares.grant_admin_coins(user.id, coins, note)
    earnings = services.ledger.compute_balance(user.id)

    console.print(f"[bold green]✓[/bold green] Added {coins} coins to {user.email}")
    console.print(f"  Record ID: {record.id}")
    console.print(f"  Available coins: {earnings.available_coins}")


@app.command("balance")
def show_balance(
    user: Annotated[str, typer.Argument(help="User id, identity-provider uid or email")],
) -> None:
    """Show a user's coin balance."""
    services = _services()
    primary_id, aliases = services.user_ids(user)
    earnings = services.ledger.compute_balance(primary_id, *aliases)

    table = Table(title=f"Earnings for {user}")
    table.add_column("Metric", style="cyan")
    table.add_column("Coins", justify="right")

    table.add_row("Referral", str(earnings.referral_coins))
    table.add_row("Admin post shares", str(earnings.admin_post_share_coins))
    table.add_row("Link shares", str(earnings.random_share_coins))
    table.add_row("Total", str(earnings.total_coins))
    table.add_row("Pending review", str(earnings.pending_coins))
    table.add_row("Pending withdraw", str(earnings.pending_withdraw))
    table.add_row("Approved withdraw", str(earnings.approved_withdraw))
    table.add_row("[bold]Available[/bold]", f"[bold]{earnings.available_coins}[/bold]")

    console.print(table)


@app.command("withdrawals")
def list_withdrawals(
    status: Annotated[
        WithdrawStatus | None, typer.Option("--status", "-s", help="Only requests in this status")
    ] = None,
) -> None:
    """List withdraw requests."""
    services = _services()
    users = services.users.index_by_id()
    requests = services.repos.withdraw_requests.list_all()
    if status:
        requests = [r for r in requests if r.status == status]

    if not requests:
        console.print("[yellow]No withdraw requests found[/yellow]")
        return

    table = Table(title="Withdraw Requests")
    table.add_column("ID", style="cyan")
    table.add_column("User", style="green")
    table.add_column("Coins", justify="right")
    table.add_column("Payout (BDT)", justify="right")
    table.add_column("bKash")
    table.add_column("Status")
    table.add_column("Created At")

    for request in requests:
        user = users.get(request.user_id)
        table.add_row(
            request.id,
            user.email if user else request.user_id,
            str(request.amount_coins),
            f"{request.payout_amount:.2f}",
            request.destination,
            request.status.value,
            request.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


if __name__ == "__main__":
    app()
