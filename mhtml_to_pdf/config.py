"""
Configuration management for the MHTML to PDF converter.

Values are looked up in order: CLI options, environment variables, defaults.

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

import os
from typing import Any, Dict, List, Optional

from .resolver import DEFAULT_MAX_HEIGHT_PX, DEFAULT_MIN_WIDTH_PX, SizeLimits

ENV_PREFIX = "MHTML_TO_PDF_"

# Playwright load states accepted by page.goto(wait_until=...)
WAIT_UNTIL_CHOICES = ("load", "domcontentloaded", "networkidle", "commit")

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


class Config:
    """Layered settings for a single conversion run."""

    DEFAULTS = {
        "delay": 250,
        "max-height": DEFAULT_MAX_HEIGHT_PX,
        "min-width": DEFAULT_MIN_WIDTH_PX,
        "timeout": 30000,
        "wait-until": "networkidle",
        "print-background": True,
        "debug": False,
    }

    ENV_VARS = {
        "delay": "DELAY_MS",
        "max-height": "MAX_HEIGHT_PX",
        "min-width": "MIN_WIDTH_PX",
        "timeout": "TIMEOUT_MS",
        "wait-until": "WAIT_UNTIL",
        "print-background": "PRINT_BACKGROUND",
        "debug": "DEBUG",
    }

    BROWSER_ARGS = [
        '--disable-dev-shm-usage',  # Use /tmp instead of /dev/shm (prevents OOM crashes)
        '--disable-gpu',             # No GPU in headless mode
        '--no-sandbox',              # Required in some environments
    ]

    def __init__(self, cli_config: Optional[Dict[str, Any]] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize configuration.

        Args:
            cli_config: Options from the command line, keyed like DEFAULTS
            environ: Environment mapping (defaults to os.environ)
        """
        self.cli_config = dict(cli_config or {})
        self.environ = os.environ if environ is None else environ

    def _lookup(self, key: str) -> Any:
        if self.cli_config.get(key) is not None:
            return self.cli_config[key]
        env_value = self.environ.get(ENV_PREFIX + self.ENV_VARS[key])
        if env_value not in (None, ""):
            return env_value
        return self.DEFAULTS[key]

    def _get_int(self, key: str, minimum: int) -> int:
        raw = self._lookup(key)
        try:
            value = int(str(raw).strip())
        except ValueError:
            raise ValueError(f"Invalid value for '{key}': '{raw}'. Expected a whole number.")
        if value < minimum:
            raise ValueError(f"Invalid value for '{key}': {value}. Minimum value is {minimum}.")
        return value

    def _get_bool(self, key: str) -> bool:
        raw = self._lookup(key)
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
        raise ValueError(f"Invalid value for '{key}': '{raw}'. Use true or false.")

    def get_delay_ms(self) -> int:
        """Pause after load so script-driven layout can settle."""
        return self._get_int("delay", 0)

    def get_max_height_px(self) -> int:
        return self._get_int("max-height", 1)

    def get_min_width_px(self) -> int:
        return self._get_int("min-width", 1)

    def get_timeout_ms(self) -> int:
        return self._get_int("timeout", 0)

    def get_wait_until(self) -> str:
        value = str(self._lookup("wait-until")).strip().lower()
        if value not in WAIT_UNTIL_CHOICES:
            raise ValueError(f"Invalid value for 'wait-until': '{value}'. Available: {', '.join(WAIT_UNTIL_CHOICES)}")
        return value

    def get_print_background(self) -> bool:
        return self._get_bool("print-background")

    def is_debug(self) -> bool:
        return self._get_bool("debug")

    def get_size_limits(self) -> SizeLimits:
        return SizeLimits(max_height_px=self.get_max_height_px(), min_width_px=self.get_min_width_px())

    def get_browser_args(self) -> List[str]:
        return list(self.BROWSER_ARGS)

    def validate(self) -> None:
        """Read every setting once so bad values fail before the browser starts."""
        self.get_delay_ms()
        self.get_size_limits()
        self.get_timeout_ms()
        self.get_wait_until()
        self.get_print_background()
        self.is_debug()
