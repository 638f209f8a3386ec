"""
Colored console output.

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

import sys

from colorama import init, Fore, Style

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class ConsoleLogger:
    """Prints tagged, colored status lines. Warnings and errors go to stderr."""

    def __init__(self, debug: bool = False):
        self.debug_enabled = debug

    def debug(self, message: str) -> None:
        """Log debug message with color (only if debug mode is enabled)."""
        if self.debug_enabled:
            print(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {message}")

    def info(self, message: str) -> None:
        print(f"{Fore.GREEN}[INFO]{Style.RESET_ALL} {message}")

    def warning(self, message: str) -> None:
        print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}", file=sys.stderr)

    def success(self, message: str) -> None:
        print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {message}")
