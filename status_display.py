#!/usr/bin/env python3
"""
Operator-facing status and diagnostics output
Writes to stderr so CSV reports on stdout stay clean
"""

from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.text import Text


class StatusDisplay:
    """Handle live status updates and diagnostic messages with rich"""

    def __init__(self, console: Optional[Console] = None, quiet: bool = False):
        self.console = console or Console(stderr=True)
        self.quiet = quiet
        self.live = None
        self.current_status = ""
        self.warning_count = 0

    def start(self, initial_message: str = "Starting..."):
        """Start the status display"""
        if self.quiet:
            return
        self.current_status = initial_message
        text = Text(initial_message, style="cyan")
        self.live = Live(text, console=self.console, refresh_per_second=4, transient=True)
        self.live.start()

    def update(self, message: str, style: str = "cyan"):
        """Update the status message"""
        self.current_status = message
        if self.live:
            self.live.update(Text(message, style=style))

    def stop(self, final_message: str = None):
        """Stop the status display"""
        if self.live:
            self.live.stop()
            self.live = None
        self.current_status = ""
        if final_message:
            self.print(final_message)

    def print(self, message: str, style: str = None):
        """Print a message without disrupting status display"""
        if self.quiet:
            return
        # Live re-renders its status line below anything printed through its console
        self.console.print(message, style=style)

    def warning(self, message: str):
        """Report a recoverable problem; shown even in quiet mode"""
        self.warning_count += 1
        self.console.print(f"⚠️  {message}", style="yellow")

    def error(self, message: str):
        """Report a fatal problem; shown even in quiet mode"""
        self.console.print(f"❌ {message}", style="red bold")
