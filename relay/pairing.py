"""Terminal display of a transport pairing challenge."""
from typing import Optional

from rich.console import Console
from rich.panel import Panel


def render_pairing_challenge(challenge: str, console: Optional[Console] = None) -> None:
    console = console or Console()
    panel = Panel(
        f"[bold]{challenge}[/bold]\n\nUse this code on your device to link the bot.",
        title="📱 Pairing required",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(panel)
