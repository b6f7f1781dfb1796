"""
Parsers package for OCR text processing.

This package contains the code that takes raw OCR text from a route
edit book page and converts it into structured stop records.

As a Python beginner, think of parsers as "translators" that:
- Take messy OCR text as input
- Use patterns and rules to find specific information
- Return structured data that matches our schemas
"""

from .route_book_parser import RouteBookParser, parse_route_text

# This allows easy importing like: from parsers import RouteBookParser
__all__ = ["RouteBookParser", "parse_route_text"]
