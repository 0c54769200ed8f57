"""
Refresh the slot listing cassette replayed by tests/test_amain.py.

Needs SLOT_HUNTER_ACCESS_TOKEN (and the other SLOT_HUNTER_ settings) in the
environment or slot_hunter/.env.
"""

import subprocess
import sys

from pydantic import ValidationError
from rich.console import Console

from slot_hunter.auth_token import ensure_usable_token
from slot_hunter.config import HunterSettings
from slot_hunter.errors import PreconditionFailure

console = Console()


def main() -> int:
    try:
        settings = HunterSettings()
        ensure_usable_token(settings.access_token)
    except (ValidationError, PreconditionFailure) as e:
        console.print(f"[red]Cannot record: {e}[/red]")
        return 1

    result = subprocess.run(["pytest", "tests/test_amain.py", "-m", "live", "-v"])
    if result.returncode == 0:
        console.print("[green]Cassettes written to tests/cassettes/[/green]")
    return result.returncode


if __name__ == "__main__":
    sys.exit(main())
