"""
Saved web page (MHTML) to single-page PDF converter.

MIT License - Copyright (c) 2025 MHTML to PDF Converter
"""

from .converter import MhtmlToPDFConverter, main
from .dimensions import SizeSpec, parse_dimension
from .measure import MeasuredExtent, measure_content
from .resolver import ResolvedOutput, SizeLimits, resolve_output

__all__ = [
    "MhtmlToPDFConverter",
    "MeasuredExtent",
    "ResolvedOutput",
    "SizeLimits",
    "SizeSpec",
    "main",
    "measure_content",
    "parse_dimension",
    "resolve_output",
]
