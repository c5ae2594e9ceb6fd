"""
CLI tool for running and poking at the chat relay.

Provides commands for serving the relay, viewing the effective
configuration and chatting with a running relay from the terminal.
"""

import asyncio
import json

import typer
import uvicorn
import websockets
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chat_relay.settings import app_settings

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="chat-relay",
    help="Chat relay CLI - Run the relay and talk to it",
    add_completion=False,
)
console = Console()

SENDER_STYLES = {
    "user": "cyan",
    "bot": "green",
    "server_info": "yellow",
}


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default: HOST)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (default: PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """
    Run the relay with uvicorn.

    Example:
        python cli.py serve --port 3000
    """
    uvicorn.run(
        "chat_relay:application",
        factory=True,
        host=host or app_settings.HOST,
        port=port or app_settings.PORT,
        reload=reload,
    )


@typer_app.command(name="config")
def show_config():
    """
    Display the effective configuration.

    Secrets are masked. Shows whether the AI provider credential is set.

    Example:
        python cli.py config
    """
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Chat relay configuration[/bold cyan]",
            border_style="cyan",
        )
    )
    console.print()

    table = Table("Setting", "Value", title=f"ENV={app_settings.ENV.value}")
    for name, value in app_settings.model_dump().items():
        if name == "GOOGLE_API_KEY":
            value = "[green]set[/green]" if value else "[red]not set[/red]"
        table.add_row(name, str(value))

    console.print(table)
    console.print()

    if not app_settings.ai.is_configured:
        console.print(
            "[yellow]⚠[/yellow] GOOGLE_API_KEY is not set, "
            "bot replies will use the fallback text"
        )
        console.print()


def format_frame(raw: str) -> str:
    """Render one relay frame as a rich markup line."""
    try:
        frame = json.loads(raw)
    except ValueError:
        return f"[red]? {raw}[/red]"
    if not isinstance(frame, dict):
        return f"[red]? {raw}[/red]"

    if frame.get("event") == "aiTyping":
        return "[dim]bot is typing...[/dim]" if frame.get("isTyping") else ""

    sender = frame.get("sender", "?")
    style = SENDER_STYLES.get(sender, "white")
    who = frame.get("originalClientId") if sender == "user" else sender
    return f"[{style}]{who}[/{style}]: {frame.get('text', '')}"


async def _chat(url: str) -> None:
    async with websockets.connect(url) as websocket:
        console.print(f"[green]✓[/green] Connected to {url} (Ctrl+D to quit)")

        async def printer() -> None:
            async for raw in websocket:
                line = format_frame(raw)
                if line:
                    console.print(line)

        printer_task = asyncio.create_task(printer())
        try:
            while True:
                text = await asyncio.to_thread(input)
                await websocket.send(json.dumps({"text": text}))
        except EOFError:
            pass
        finally:
            printer_task.cancel()


@typer_app.command(name="chat")
def chat(
    url: str = typer.Option(
        None, "--url", "-u", help="Relay WebSocket URL (default: ws://localhost:PORT/ws)"
    ),
):
    """
    Interactive terminal client: every line typed is sent as a chat message.

    Example:
        python cli.py chat --url ws://localhost:3000/ws
    """
    url = url or f"ws://localhost:{app_settings.PORT}/ws"
    try:
        asyncio.run(_chat(url))
    except (OSError, websockets.exceptions.WebSocketException) as ex:
        console.print(f"[red]✗[/red] Connection failed: {ex}")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Bye[/yellow]")


if __name__ == "__main__":
    typer_app()
