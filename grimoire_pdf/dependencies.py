#!/usr/bin/env python3
"""
Dependency checking for the grimoire PDF exporter.
Provides installation guidance for Playwright and its Chromium build.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import importlib.util
import subprocess
import sys
from typing import List, Optional, Tuple

from colorama import Fore, Style, init

init(autoreset=True)


class DependencyChecker:
    """Check and report on required and optional dependencies."""

    def __init__(self):
        self.missing_python_packages: List[str] = []

    def check_python_package(self, package_name: str, import_name: Optional[str] = None) -> bool:
        """Check if a Python package is installed."""
        if import_name is None:
            import_name = package_name

        if importlib.util.find_spec(import_name) is None:
            self.missing_python_packages.append(package_name)
            return False
        return True

    def check_playwright_browsers(self) -> bool:
        """Check if the Playwright Chromium build is installed."""
        try:
            result = subprocess.run(
                [sys.executable, "-m", "playwright", "install", "--dry-run", "chromium"],
                capture_output=True,
                text=True,
                timeout=10
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def get_playwright_install_command(self) -> str:
        return f"{sys.executable} -m playwright install chromium"

    def check_all(self, check_optional: bool = False) -> Tuple[bool, List[str]]:
        """Check all dependencies and return status and messages."""
        messages: List[str] = []
        all_ok = True

        print(f"{Fore.CYAN}Checking Python packages...{Style.RESET_ALL}")

        if not self.check_python_package("playwright"):
            all_ok = False
            messages.append(f"{Fore.RED}[MISSING]{Style.RESET_ALL} playwright - Run: pip install playwright")
            messages.append(f"  Then install browser: {self.get_playwright_install_command()}")
        else:
            print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} playwright is available")

            if not self.check_playwright_browsers():
                all_ok = False
                messages.append(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} Playwright browsers not installed")
                messages.append(f"  Run: {self.get_playwright_install_command()}")
            else:
                print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} Playwright browsers are installed")

        if check_optional:
            if not self.check_python_package("reportlab"):
                messages.append(f"{Fore.YELLOW}[OPTIONAL]{Style.RESET_ALL} reportlab (required for the text-only fallback renderer)")
                messages.append("  Run: pip install reportlab")
            else:
                print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} reportlab is available")

        return all_ok, messages

    def print_summary(self, check_optional: bool = False) -> bool:
        """Check dependencies and print summary. Returns True if all required deps are available."""
        all_ok, messages = self.check_all(check_optional)

        if messages:
            print(f"\n{Fore.YELLOW}Dependency Summary:{Style.RESET_ALL}")
            for msg in messages:
                print(f"  {msg}")
        else:
            print(f"\n{Fore.GREEN}All dependencies are available!{Style.RESET_ALL}")

        return all_ok


def check_dependencies(check_optional: bool = False) -> bool:
    """Convenience function to check dependencies."""
    checker = DependencyChecker()
    return checker.print_summary(check_optional)
