"""Output sink for command responses."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.json import JSON


class Printer:
    """Prints responses as JSON, highlighted when color is requested."""

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def println(self, response: Any, color: bool) -> None:
        if isinstance(response, str):
            self.console.print(response, highlight=color, markup=False)
            return
        text = json.dumps(response, indent=2)
        if color:
            self.console.print(JSON(text))
        else:
            self.console.print(text, highlight=False, markup=False)

    def eprintln(self, message: str, color: bool) -> None:
        style = "bold red" if color else None
        self.err_console.print(message, style=style, highlight=False, markup=False)
