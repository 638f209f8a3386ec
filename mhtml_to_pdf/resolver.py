"""
Page size resolution.

Combines the user's --width/--height overrides with the measured content
extent into two sizes:

* the export size handed to page.pdf(), in the user's own units, and
* the viewport size in pixels the page is laid out at before printing.

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple

from .console import ConsoleLogger
from .dimensions import SizeSpec
from .measure import MeasuredExtent

DEFAULT_MAX_HEIGHT_PX = 20000
DEFAULT_MIN_WIDTH_PX = 200


@dataclass(frozen=True)
class SizeLimits:
    """Safety bounds for the rendering viewport."""

    max_height_px: int = DEFAULT_MAX_HEIGHT_PX
    min_width_px: int = DEFAULT_MIN_WIDTH_PX


@dataclass(frozen=True)
class ResolvedOutput:
    export_width: str
    export_height: str
    viewport_width_px: int
    viewport_height_px: int
    max_height_px: int = DEFAULT_MAX_HEIGHT_PX
    # Height before clamping, set only when the clamp fired
    clamped_from_px: Optional[int] = None

    def viewport_size(self) -> Dict[str, int]:
        """Viewport for page.set_viewport_size(), height bounded by the cap."""
        return {
            "width": self.viewport_width_px,
            "height": min(self.viewport_height_px, self.max_height_px),
        }


def needs_measurement(user_width: Optional[SizeSpec], user_height: Optional[SizeSpec]) -> bool:
    """True unless both axes have a user override."""
    return user_width is None or user_height is None


def _resolve_axis(user: Optional[SizeSpec], measured_px: Optional[int], axis: str) -> Tuple[str, int]:
    """Return (export size string, viewport pixels) for one axis."""
    if user is not None:
        return user.to_css(), user.to_pixels()
    if measured_px is None:
        raise ValueError(f"No {axis} override given and no measurement available")
    spec = SizeSpec.from_pixels(measured_px)
    return spec.to_css(), spec.to_pixels()


def resolve_output(user_width: Optional[SizeSpec],
                   user_height: Optional[SizeSpec],
                   extent: Optional[MeasuredExtent],
                   limits: SizeLimits = SizeLimits(),
                   logger: Optional[ConsoleLogger] = None) -> ResolvedOutput:
    """Resolve export and viewport sizes from overrides and a measurement.

    Args:
        user_width: Parsed --width override, or None
        user_height: Parsed --height override, or None
        extent: Measured content extent; may be None only when both overrides are given
        limits: Height cap and width floor applied to the viewport
        logger: Receives the clamp warning

    Returns:
        ResolvedOutput for this conversion
    """
    logger = logger or ConsoleLogger()

    export_width, viewport_width = _resolve_axis(
        user_width, extent.width_px if extent else None, "width")
    export_height, viewport_height = _resolve_axis(
        user_height, extent.height_px if extent else None, "height")

    # The exported page must never be taller than the viewport that was rendered
    clamped_from = None
    if viewport_height > limits.max_height_px:
        logger.warning(
            f"Measured/calculated height {viewport_height}px exceeds cap "
            f"{limits.max_height_px}px. Capping."
        )
        clamped_from = viewport_height
        viewport_height = limits.max_height_px
        export_height = SizeSpec.from_pixels(limits.max_height_px).to_css()

    # Floor applies to the viewport only; the export width stays as requested
    viewport_width = max(limits.min_width_px, viewport_width)

    return ResolvedOutput(
        export_width=export_width,
        export_height=export_height,
        viewport_width_px=viewport_width,
        viewport_height_px=viewport_height,
        max_height_px=limits.max_height_px,
        clamped_from_px=clamped_from,
    )


async def measure_if_needed(user_width: Optional[SizeSpec],
                            user_height: Optional[SizeSpec],
                            measure: Callable[[], Awaitable[MeasuredExtent]]) -> Optional[MeasuredExtent]:
    """Run ``measure`` once if an axis lacks an override, otherwise skip it."""
    if not needs_measurement(user_width, user_height):
        return None
    return await measure()
