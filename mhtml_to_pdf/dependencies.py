"""
Runtime dependency checks: Playwright and its Chromium build.

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

import os
import subprocess
import sys

from .console import ConsoleLogger


def chromium_executable() -> str:
    """Return the path Playwright expects the Chromium executable at."""
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        return p.chromium.executable_path


def check_dependencies(logger: ConsoleLogger = None) -> bool:
    """Check that Playwright is importable and Chromium is installed."""
    logger = logger or ConsoleLogger()

    try:
        import playwright  # noqa: F401
    except ImportError:
        logger.error("Playwright is not installed. Run: pip install playwright")
        return False
    logger.success("Playwright is available")

    try:
        executable = chromium_executable()
    except Exception as e:
        logger.error(f"Could not locate Playwright Chromium: {e}")
        return False

    if not os.path.exists(executable):
        logger.error(f"Chromium not found at {executable}")
        logger.info("Install it with: mhtml-to-pdf --install-browsers")
        return False

    logger.success(f"Chromium is available ({executable})")
    return True


def install_browsers(logger: ConsoleLogger = None) -> bool:
    """Install the Chromium build Playwright drives."""
    logger = logger or ConsoleLogger()
    cmd = [sys.executable, "-m", "playwright", "install", "chromium"]

    logger.info("Installing Playwright Chromium...")
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"Failed to install Playwright Chromium: {e.stderr}")
        return False
    logger.success("Playwright Chromium installed successfully")
    return True
