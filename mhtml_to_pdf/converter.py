#!/usr/bin/env python3
"""
Saved web page (MHTML) to single-page PDF converter.

Loads the archive in headless Chromium through Playwright, measures the full
rendered content (scrollable regions and frames included), sizes the viewport
and the PDF page to fit, and prints everything onto one page.

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from playwright.async_api import async_playwright
from tqdm import tqdm

from .config import Config
from .console import ConsoleLogger
from .dependencies import check_dependencies, install_browsers
from .dimensions import SizeSpec, parse_dimension
from .measure import measure_content
from .resolver import ResolvedOutput, measure_if_needed, resolve_output

DEFAULT_OUTPUT = "out.pdf"

# Command line flags, shared by the --help parser and parse_command_line()
OPTION_FLAGS = [
    ("--width", {"help": "Page width: pixels (e.g. 900), 8.5in, 210mm or a4. Default: measured content width"}),
    ("--height", {"help": "Page height: pixels (e.g. 1200), 11in, 297mm or a4. Default: measured content height"}),
    ("--delay", {"help": "Milliseconds to wait after load before measuring (default: 250)"}),
    ("--max-height", {"help": "Maximum page height in pixels; taller pages are capped (default: 20000)"}),
    ("--min-width", {"help": "Minimum viewport width in pixels (default: 200)"}),
    ("--timeout", {"help": "Navigation timeout in milliseconds (default: 30000)"}),
    ("--wait-until", {"help": "Load state to wait for: load, domcontentloaded, networkidle, commit (default: networkidle)"}),
    ("--print-background", {"help": "Print background colors and images: true/false (default: true)"}),
    ("--debug", {"action": "store_true", "help": "Enable debug logging for detailed output"}),
    ("--check", {"action": "store_true", "help": "Check that Playwright and Chromium are installed before converting"}),
    ("--install-browsers", {"action": "store_true", "help": "Install the Playwright Chromium build and exit"}),
]

# Flags that never take a value, so "--debug page.mhtml" keeps the input path
BOOLEAN_FLAGS = {"help"} | {
    flag[2:] for flag, kwargs in OPTION_FLAGS if kwargs.get("action") == "store_true"
}


class MhtmlToPDFConverter:
    """Converts one saved page to a single-page PDF using Playwright."""

    def __init__(self, config: Optional[Config] = None, logger: Optional[ConsoleLogger] = None):
        self.config = config or Config()
        self.logger = logger or ConsoleLogger(self.config.is_debug())
        self._playwright = None
        self._browser = None
        self._page = None

    async def _launch_browser(self) -> None:
        """Launch a fresh Chromium browser instance and open a page."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=True,
            args=self.config.get_browser_args()
        )
        self._page = await self._browser.new_page()
        self.logger.debug("Browser instance started")

    async def _close_browser(self) -> None:
        """Close browser and cleanup resources."""
        # Grab references and null them out first to prevent double-close on crash
        page = self._page
        browser = self._browser
        pw = self._playwright
        self._page = None
        self._browser = None
        self._playwright = None

        try:
            if page and not page.is_closed():
                await page.close()
        except Exception:
            pass
        try:
            if browser and browser.is_connected():
                await browser.close()
        except Exception:
            pass
        try:
            if pw:
                await pw.stop()
        except Exception:
            pass

        self.logger.debug("Browser instance closed and cleaned up")

    async def render_page(self, page, url: str, output_pdf: Path,
                          user_width: Optional[SizeSpec] = None,
                          user_height: Optional[SizeSpec] = None) -> ResolvedOutput:
        """Load ``url`` in ``page``, size it and export it as a one-page PDF.

        Args:
            page: Playwright page (or anything with the same async methods)
            url: Document URL, usually a file:// URI
            output_pdf: Where the PDF is written
            user_width: Width override; measured from the page when None
            user_height: Height override; measured from the page when None

        Returns:
            The sizes used for the viewport and the PDF page
        """
        name = Path(output_pdf).name
        with tqdm(total=5, desc=f"  {name}", unit="step", leave=False) as pbar:
            # Step 1: Navigate
            pbar.set_description(f"  {name} - Loading")
            await page.goto(url, wait_until=self.config.get_wait_until(), timeout=self.config.get_timeout_ms())
            pbar.update(1)

            # Step 2: Give script-driven layout a moment to settle
            pbar.set_description(f"  {name} - Settling")
            delay_ms = self.config.get_delay_ms()
            if delay_ms > 0:
                await page.wait_for_timeout(delay_ms)
            pbar.update(1)

            # Step 3: Measure, only when an axis has no override
            pbar.set_description(f"  {name} - Measuring")
            extent = await measure_if_needed(user_width, user_height, lambda: measure_content(page))
            if extent is not None:
                self.logger.debug(f"Measured content extent: {extent.width_px}x{extent.height_px}px")
            else:
                self.logger.debug("Both dimensions given, skipping measurement")
            pbar.update(1)

            # Step 4: Resolve sizes and size the viewport
            pbar.set_description(f"  {name} - Sizing")
            resolved = resolve_output(user_width, user_height, extent,
                                      limits=self.config.get_size_limits(),
                                      logger=self.logger)
            viewport = resolved.viewport_size()
            await page.set_viewport_size(viewport)
            self.logger.debug(f"Viewport set to {viewport['width']}x{viewport['height']}px")
            self.logger.info(f"Using PDF size: {resolved.export_width} x {resolved.export_height}")
            pbar.update(1)

            # Step 5: Export
            pbar.set_description(f"  {name} - PDF")
            await page.pdf(
                path=str(output_pdf),
                width=resolved.export_width,
                height=resolved.export_height,
                print_background=self.config.get_print_background(),
                prefer_css_page_size=False
            )
            pbar.update(1)

        return resolved

    async def convert_async(self, input_file, output_pdf,
                            user_width: Optional[SizeSpec] = None,
                            user_height: Optional[SizeSpec] = None) -> ResolvedOutput:
        """Run one conversion; the browser is always released afterwards."""
        input_path = Path(input_file).resolve()
        output_pdf = Path(output_pdf)
        output_pdf.parent.mkdir(parents=True, exist_ok=True)

        self.logger.debug(f"Loading {input_path.as_uri()}")
        try:
            await self._launch_browser()
            resolved = await self.render_page(self._page, input_path.as_uri(), output_pdf,
                                              user_width, user_height)
        finally:
            await self._close_browser()

        self.logger.success(f"PDF written to {output_pdf}")
        return resolved

    def convert(self, input_file, output_pdf,
                user_width: Optional[SizeSpec] = None,
                user_height: Optional[SizeSpec] = None) -> ResolvedOutput:
        return asyncio.run(self.convert_async(input_file, output_pdf, user_width, user_height))


@dataclass
class CommandLine:
    """Positional arguments plus every --key value pair seen on the command line."""

    input_file: Optional[str] = None
    output_file: str = DEFAULT_OUTPUT
    options: Dict[str, str] = field(default_factory=dict)

    def flag(self, key: str) -> bool:
        return str(self.options.get(key, "")).lower() == "true"


def parse_command_line(argv: List[str]) -> CommandLine:
    """Permissive command line parsing.

    The first two plain tokens are the input and output paths. Any
    ``--key value`` pair lands in ``options`` under the lowercased key; a flag
    with no following non-flag value is recorded as ``"true"``.
    """
    positionals = []
    options = {}
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "-h":
            options["help"] = "true"
        elif token.startswith("--") and len(token) > 2:
            key = token[2:].lower()
            value = argv[i + 1] if i + 1 < len(argv) else None
            if key not in BOOLEAN_FLAGS and value is not None and not value.startswith("--"):
                options[key] = value
                i += 1
            else:
                options[key] = "true"
        else:
            positionals.append(token)
        i += 1

    cmd = CommandLine(options=options)
    if positionals:
        cmd.input_file = positionals[0]
    if len(positionals) > 1:
        cmd.output_file = positionals[1]
    return cmd


def build_parser() -> argparse.ArgumentParser:
    """Parser used for --help and usage text."""
    parser = argparse.ArgumentParser(
        prog="mhtml-to-pdf",
        description="Convert a saved web page (MHTML) to a single-page PDF sized to its content"
    )
    parser.add_argument("input_file", help="Saved page to convert (.mhtml, .html, ...)")
    parser.add_argument("output_file", nargs="?", default=DEFAULT_OUTPUT, help=f"Output PDF (default: {DEFAULT_OUTPUT})")
    for flag, kwargs in OPTION_FLAGS:
        parser.add_argument(flag, **kwargs)
    return parser


def parse_override(token: Optional[str], is_width: bool, logger: ConsoleLogger) -> Optional[SizeSpec]:
    """Parse a --width/--height token, warning when it is not understood."""
    if token is None:
        return None
    spec = parse_dimension(token, is_width)
    if spec is None:
        axis = "width" if is_width else "height"
        logger.warning(f"Ignoring unrecognised --{axis} value '{token}', using the measured {axis} instead")
    return spec


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    cmd = parse_command_line(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    if cmd.flag("help"):
        parser.print_help()
        return

    if cmd.flag("install-browsers"):
        sys.exit(0 if install_browsers() else 1)

    if not cmd.input_file:
        parser.print_usage(sys.stderr)
        print("error: the input file is required", file=sys.stderr)
        sys.exit(1)

    # Build config from CLI options
    cli_config = {key: cmd.options[key] for key in Config.DEFAULTS if key in cmd.options}
    config = Config(cli_config)
    try:
        config.validate()
    except ValueError as e:
        ConsoleLogger().error(str(e))
        sys.exit(1)
    logger = ConsoleLogger(config.is_debug())

    if cmd.flag("check") and not check_dependencies(logger):
        sys.exit(1)

    input_path = Path(cmd.input_file).resolve()
    if not input_path.is_file():
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)

    user_width = parse_override(cmd.options.get("width"), True, logger)
    user_height = parse_override(cmd.options.get("height"), False, logger)

    converter = MhtmlToPDFConverter(config, logger)
    converter.convert(input_path, Path(cmd.output_file), user_width, user_height)


if __name__ == "__main__":
    main()
