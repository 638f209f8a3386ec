"""
Content extent measurement inside the rendered page.

The measurement script runs in the page's JavaScript context through
page.evaluate(); only its JSON result crosses back into Python.

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Largest extent seen across the document root/body, every element and every
# same-origin frame. Scrollable elements only contribute their scroll extent
# because their own box is clipped. Errors while walking elements or frames
# are swallowed so a partial measurement is still returned.
MEASURE_CONTENT_SCRIPT = """() => {
    const safeNum = v => (Number.isFinite(v) ? Math.round(v) : 0);
    const root = document.documentElement;
    const body = document.body || {};

    const docW = Math.max(
        root.scrollWidth || 0,
        body.scrollWidth || 0,
        root.offsetWidth || 0,
        body.offsetWidth || 0,
        root.clientWidth || 0
    );
    const docH = Math.max(
        root.scrollHeight || 0,
        body.scrollHeight || 0,
        root.offsetHeight || 0,
        body.offsetHeight || 0,
        window.innerHeight || 0
    );

    const scrollable = v => v === "auto" || v === "scroll";
    let maxChildW = 0;
    let maxChildH = 0;
    try {
        const elems = Array.from(document.querySelectorAll("*"));
        elems.forEach(el => {
            const cs = getComputedStyle(el);
            if (scrollable(cs.overflow) || scrollable(cs.overflowX) || scrollable(cs.overflowY)) {
                maxChildW = Math.max(maxChildW, el.scrollWidth || 0);
                maxChildH = Math.max(maxChildH, el.scrollHeight || 0);
            } else {
                maxChildW = Math.max(maxChildW, el.offsetWidth || 0, el.scrollWidth || 0);
                maxChildH = Math.max(maxChildH, el.offsetHeight || 0, el.scrollHeight || 0);
            }
        });
    } catch (e) {}

    let maxIframeW = 0;
    let maxIframeH = 0;
    try {
        for (let i = 0; i < window.frames.length; i++) {
            try {
                const fdoc = window.frames[i].document;
                maxIframeW = Math.max(maxIframeW, fdoc.documentElement.scrollWidth || 0, fdoc.body.scrollWidth || 0);
                maxIframeH = Math.max(maxIframeH, fdoc.documentElement.scrollHeight || 0, fdoc.body.scrollHeight || 0);
            } catch (e) {}
        }
    } catch (e) {}

    return {
        width: safeNum(Math.max(docW, maxChildW, maxIframeW)),
        height: safeNum(Math.max(docH, maxChildH, maxIframeH))
    };
}"""


def _coerce_px(value: Any) -> int:
    """Turn a value returned from the page into a non-negative whole pixel count."""
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(math.floor(number + 0.5))


@dataclass(frozen=True)
class MeasuredExtent:
    """Rendered content size in CSS pixels."""

    width_px: int
    height_px: int

    @classmethod
    def from_evaluation(cls, result: Optional[Mapping[str, Any]]) -> "MeasuredExtent":
        """Build from the ``{width, height}`` object returned by the measurement script."""
        if not isinstance(result, Mapping):
            return cls(0, 0)
        return cls(_coerce_px(result.get("width")), _coerce_px(result.get("height")))


async def measure_content(page) -> MeasuredExtent:
    """Measure the full content extent of the page currently loaded in ``page``."""
    result = await page.evaluate(MEASURE_CONTENT_SCRIPT)
    return MeasuredExtent.from_evaluation(result)
