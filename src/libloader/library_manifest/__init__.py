"""
Manifest parsing for libloader.

This package handles:
1. Reading META-INF/MANIFEST.MF out of candidate archives
2. Parsing the manifest main section into attributes
3. Turning indexed LibLoader-* attributes into library declarations
"""

from .manifest_parser import DeclarationParser, parse_main_attributes

__all__ = ["DeclarationParser", "parse_main_attributes"]
