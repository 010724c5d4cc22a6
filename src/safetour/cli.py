"""Typer CLI for SafeTour."""

import asyncio

import typer
from rich.console import Console

app = typer.Typer(name="safetour", help="SafeTour: tourist safety backend")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(3000, help="Bind port"),
):
    """Start the SafeTour API server."""
    import uvicorn
    from safetour.app import create_app

    console.print(f"[bold green]Starting SafeTour on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def promote(
    email: str = typer.Argument(..., help="Email of the identity to change"),
    role: str = typer.Argument(..., help="tourist, admin or police"),
):
    """Set an identity's role. Roles are never changed over the HTTP API."""
    from safetour.common.exceptions import SafeTourError
    from safetour.deps import get_db, get_identity_service

    async def _run():
        db = get_db()
        await db.init()
        await db.create_all()
        try:
            async with db.get_session() as session:
                return await get_identity_service().set_role(session, email, role)
        finally:
            await db.close()

    try:
        identity = asyncio.run(_run())
    except SafeTourError as e:
        console.print(f"[bold red]{e.code}[/bold red] - {e.message}")
        raise typer.Exit(1)
    console.print(f"[bold green]{identity.email}[/bold green] is now {identity.role}")


@app.command()
def health(
    url: str = typer.Option("http://localhost:3000", help="Server URL"),
):
    """Check SafeTour server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] - v{data['version']}")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
