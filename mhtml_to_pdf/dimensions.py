"""
Page dimension tokens: parsing, unit conversion and CSS formatting.

A dimension token is what the user passes to --width / --height, e.g.
"900", "900px", "8.5in", "210mm" or "a4".

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

# CSS reference pixel density used by Chromium when printing
PX_PER_INCH = 96
MM_PER_INCH = 25.4

# A4 portrait in inches
A4_WIDTH_IN = 8.27
A4_HEIGHT_IN = 11.69

UNITS = ("px", "in", "mm")

_TOKEN_RE = re.compile(r'^([0-9]*\.?[0-9]+)\s*(px|in|mm)?$')


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (0.5 -> 1, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def _format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    # Plain decimal notation; str() switches to exponents below 1e-4
    return format(Decimal(repr(value)), "f")


@dataclass(frozen=True)
class SizeSpec:
    """A requested page dimension: a unit plus a magnitude.

    For ``px`` the magnitude is always a whole number of pixels; ``in`` and
    ``mm`` keep the value exactly as the user wrote it.
    """

    unit: str
    magnitude: Union[int, float]

    def __post_init__(self):
        if self.unit not in UNITS:
            raise ValueError(f"Unsupported unit '{self.unit}'. Use one of: {', '.join(UNITS)}")
        if self.magnitude < 0:
            raise ValueError(f"Dimension cannot be negative: {self.magnitude}{self.unit}")

    @classmethod
    def from_pixels(cls, pixels: int) -> "SizeSpec":
        return cls("px", max(0, int(pixels)))

    def to_css(self) -> str:
        """Format as a CSS length Playwright's page.pdf() accepts, e.g. '8.5in'."""
        return f"{_format_number(self.magnitude)}{self.unit}"

    def to_pixels(self) -> int:
        """Convert to CSS pixels at 96 DPI."""
        if self.unit == "px":
            return int(self.magnitude)
        if self.unit == "in":
            return round_half_up(self.magnitude * PX_PER_INCH)
        # mm -> in -> px
        return round_half_up(self.magnitude / MM_PER_INCH * PX_PER_INCH)


def parse_dimension(token, is_width: bool) -> Optional[SizeSpec]:
    """Parse a user-supplied dimension token.

    This is a best-effort parse: anything that is not "a4" or
    ``<number>[px|in|mm]`` yields None, and the caller treats the axis as
    unspecified.

    Args:
        token: Raw token from the command line (None when the flag is absent)
        is_width: True for the width axis, False for the height axis

    Returns:
        SizeSpec, or None if the token is not recognised
    """
    if token is None:
        return None
    value = str(token).lower().strip()

    if value == "a4":
        return SizeSpec("in", A4_WIDTH_IN if is_width else A4_HEIGHT_IN)

    match = _TOKEN_RE.match(value)
    if not match:
        return None

    number = float(match.group(1))
    unit = match.group(2) or "px"
    if unit == "px":
        return SizeSpec("px", round_half_up(number))
    return SizeSpec(unit, number)
