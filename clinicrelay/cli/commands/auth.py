"""Credential diagnostics commands."""

import asyncio

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from clinicrelay.auth.exceptions import CredentialError
from clinicrelay.auth.manager import CredentialsManager
from clinicrelay.auth.models import CredentialStatus
from clinicrelay.config.settings import get_settings
from clinicrelay.core.logging import setup_logging


app = typer.Typer(name="auth", help="Upstream credential diagnostics")

console = Console()


def get_credentials_manager() -> CredentialsManager:
    return CredentialsManager(get_settings())


def render_status(status: CredentialStatus) -> Table:
    table = Table(title="Upstream credential", box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("State", status.state.value)
    table.add_row("Access token", "present" if status.has_access_token else "absent")
    table.add_row("Refresh token", "present" if status.has_refresh_token else "absent")
    table.add_row(
        "Expires at", status.expires_at.isoformat() if status.expires_at else "-"
    )
    table.add_row(
        "Seconds remaining",
        f"{status.seconds_remaining:.0f}" if status.seconds_remaining is not None else "-",
    )
    if status.storage:
        table.add_row("Storage", status.storage)
    if status.last_error:
        table.add_row("Last error", f"[red]{status.last_error}[/red]")
    return table


async def _check(manager: CredentialsManager) -> tuple[CredentialStatus, str | None]:
    async with manager:
        await manager.acquirer.initialize(acquire=False)
        try:
            await manager.get_access_token()
        except CredentialError as e:
            return manager.status(), f"{type(e).__name__}: {e}"
        return manager.status(), None


@app.command("check")
def check() -> None:
    """Acquire and validate an upstream token once, then report the result."""
    settings = get_settings()
    setup_logging(log_level=settings.server.log_level)

    status, error = asyncio.run(_check(get_credentials_manager()))
    console.print(render_status(status))

    if error:
        console.print(f"[red]Token acquisition failed:[/red] {error}")
        raise typer.Exit(1)
    console.print("[green]Token acquired and validated[/green]")
