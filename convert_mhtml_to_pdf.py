#!/usr/bin/env python3
"""
Convert a saved web page (MHTML) to a single-page PDF.

Usage: python convert_mhtml_to_pdf.py page.mhtml [out.pdf] [--width <val>] [--height <val>]
"""

from mhtml_to_pdf.converter import main


if __name__ == "__main__":
    main()
