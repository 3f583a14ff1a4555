#!/usr/bin/env python3
"""
Coloured console logging shared by the generator and the exporter.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import threading

from colorama import Fore, Style, init

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class ConsoleLogMixin:
    """Adds _log_* helpers. Classes using it set self.debug."""

    debug: bool = False
    _log_lock = threading.Lock()

    def _log_debug(self, message: str) -> None:
        """Log debug message with color (only if debug mode is enabled)."""
        if self.debug:
            with self._log_lock:
                print(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {message}")

    def _log_info(self, message: str) -> None:
        with self._log_lock:
            print(f"{Fore.GREEN}[INFO]{Style.RESET_ALL} {message}")

    def _log_warning(self, message: str) -> None:
        with self._log_lock:
            print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}")

    def _log_error(self, message: str) -> None:
        with self._log_lock:
            print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}")

    def _log_success(self, message: str) -> None:
        with self._log_lock:
            print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {message}")
