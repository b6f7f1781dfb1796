"""
Configuration file for the Route Book OCR Pipeline

This file contains all the parsing rules and export settings used to turn
route edit book photos into stop records. You can modify these settings
without changing the core pipeline code.

For Python beginners:
- This centralizes all configuration in one place
- The parser only reads these constants, it never changes them
- Runtime settings (folders, credentials) come from the .env file instead
"""

from typing import List, Dict, Any

# =============================================================================
# ROUTE BOOK LAYOUT
# =============================================================================

# Lines containing any of these markers are table headers, not stops.
# Matching is case-sensitive and looks for the marker anywhere in the line.
HEADER_MARKERS = [
    "SEQ",
    "BUNDLE TYPE",
]

# Street suffixes that appear in the route book (Drive, Road, Street)
STREET_SUFFIXES = [
    "DR",
    "RD",
    "ST",
]

# The route book does not print a delivery type we can read reliably,
# so every parsed stop starts out as a curbside route stop.
DEFAULT_DELIVERY_TYPE = "CURB R"

# =============================================================================
# PARSING PATTERNS
# =============================================================================

ROUTE_PATTERNS = {
    # Stop number at the very start of the line
    "sequence": r'^(\d+)',

    # Letters and spaces ending in a street suffix, e.g. "OAK RD" (case-insensitive)
    "street": r'([A-Za-z\s]+(?:' + '|'.join(STREET_SUFFIXES) + r'))',

    # Apartment designator, e.g. "APT 4" or "APT12" (case-insensitive)
    "unit": r'APT\s*\d+',

    # House number right after the stop number
    "address": r'^\d+',

    # Four digit marker followed by a name or note from the right column
    "additional_info": r'\d{4}\s+(.+)$',
}

# =============================================================================
# INPUT SETTINGS
# =============================================================================

# Image formats accepted for upload
SUPPORTED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png'}

# =============================================================================
# EXPORT SETTINGS
# =============================================================================

# CSV column titles, in export order
CSV_COLUMNS = [
    "Seq",
    "Address",
    "Street Name",
    "Unit",
    "Type",
    "Notes",
    "Additional Info",
]

# Maps each CSV column to the StopRecord field it holds
CSV_FIELD_MAP = {
    "Seq": "sequence",
    "Address": "address",
    "Street Name": "street_name",
    "Unit": "unit",
    "Type": "delivery_type",
    "Notes": "notes",
    "Additional Info": "additional_info",
}

# Fields that can be changed while editing a route book
EDITABLE_FIELDS = ["address", "street_name", "unit", "delivery_type", "notes"]

# Default export settings
EXPORT_SETTINGS = {
    "csv_line_terminator": "\n",
    "csv_encoding": "utf-8",
    "default_format": "csv",
}

# Excel formatting options
EXCEL_FORMATTING = {
    "stops_sheet_name": "Route Stops",
    "summary_sheet_name": "Summary",
    "max_column_width": 50,
    "freeze_header_row": True,
}

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_field_for_column(column: str) -> str:
    """
    Get the StopRecord field name for a CSV column title.

    Args:
        column: Column title as written in the CSV header

    Returns:
        The matching StopRecord field name
    """
    if column not in CSV_FIELD_MAP:
        raise ValueError(f"Unknown route book column: {column}")
    return CSV_FIELD_MAP[column]


def is_editable_field(field_name: str) -> bool:
    """Check if a StopRecord field may be changed by manual editing."""
    return field_name in EDITABLE_FIELDS


def get_export_columns() -> List[str]:
    """Return a copy of the CSV column order."""
    return list(CSV_COLUMNS)


def describe_settings() -> Dict[str, Any]:
    """Summarize the parsing rules, handy when printing pipeline startup info."""
    return {
        "header_markers": list(HEADER_MARKERS),
        "street_suffixes": list(STREET_SUFFIXES),
        "delivery_type": DEFAULT_DELIVERY_TYPE,
        "image_extensions": sorted(SUPPORTED_IMAGE_EXTENSIONS),
    }
