"""
NetLog Console Manager

Shared Rich Console with the net log theme.

Usage:
    from utils.console import get_console
    console = get_console()
    console.print("[callsign]W1AW[/callsign] checked in")
"""

from rich.console import Console
from rich.theme import Theme
from typing import Optional
import threading

_console: Optional[Console] = None
_lock = threading.Lock()

NETLOG_THEME = Theme({
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red bold",
    "heading": "bold magenta",
    "dim": "dim white",
    "callsign": "bold cyan",
    "tactical": "bold yellow",
    "status.pending": "yellow",
    "status.active": "bold green",
    "status.closed": "dim white",
})


def get_console(force_terminal: bool = None,
                no_color: bool = None,
                width: int = None) -> Console:
    """
    Get the singleton Console instance.

    Args:
        force_terminal: Force terminal mode (for testing)
        no_color: Disable color output
        width: Override console width

    Returns:
        The shared Console instance
    """
    global _console

    if _console is None:
        with _lock:
            if _console is None:
                _console = Console(
                    theme=NETLOG_THEME,
                    force_terminal=force_terminal,
                    no_color=no_color,
                    width=width,
                    highlight=False,
                    markup=True,
                )

    return _console


def reset_console():
    """Reset the console singleton (useful for testing)."""
    global _console
    with _lock:
        _console = None


def print_success(message: str):
    get_console().print(f"[success]✓ {message}[/success]")


def print_error(message: str):
    get_console().print(f"[error]✗ {message}[/error]")


def print_warning(message: str):
    get_console().print(f"[warning]⚠ {message}[/warning]")


def print_heading(message: str):
    console = get_console()
    console.print(f"\n[heading]{message}[/heading]")
    console.print("[dim]" + "─" * len(message) + "[/dim]")
