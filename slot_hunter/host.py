"""
Host collaborator: whatever drives the hunt and talks to the person.

The core only needs three things from its host: a bounded wait for the
site's code-entry form, a one-time code, and a place to report the final
outcome. ``ConsoleHost`` provides them in a terminal using rich.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt


class HostCollaborator(Protocol):
    """Capabilities the hunt borrows from its host."""

    async def await_external_signal(self, timeout: float) -> bool: ...

    async def request_code(self) -> str | None: ...

    def notify(self, success: bool, message: str) -> None: ...


class ConsoleHost:
    """Terminal host: prompts for SMS codes and prints the final result."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    async def await_external_signal(self, timeout: float) -> bool:
        # The SMS is sent as soon as the server asks for 2FA and the prompt
        # below is our code-entry form, so there is nothing to wait for.
        self.console.print("[yellow]📱 Verification code requested by server[/yellow]")
        return True

    async def request_code(self) -> str | None:
        code = await asyncio.to_thread(
            Prompt.ask, "[bold yellow]📱 Enter the code from the SMS[/bold yellow]", default=""
        )
        code = code.strip()
        return code or None

    def notify(self, success: bool, message: str) -> None:
        if success:
            self.console.print(Panel.fit(f"[bold green]🎉 {message}[/bold green]", title="Booked"))
        else:
            self.console.print(Panel.fit(f"[bold red]❌ {message}[/bold red]", title="Stopped"))
