"""
Route Book Parser - Turns OCR text from a route edit book page into stops.

The OCR engine gives us one column of text per image. Column boundaries
and headers are gone, so each line is classified on its own:
- blank lines are dropped
- header lines ("SEQ ...", "BUNDLE TYPE ...") are skipped
- lines starting with a number are stops; everything else is ignored

Street names are often printed only on the first stop of a street, so
the most recent street name is carried to the following stops.

For Python beginners:
- Each field has its own small function so it can be tested by itself
- The carried street name is passed in and returned, never stored globally
- The same text always gives the same stops
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from schemas.route_stop_schema import StopRecord, RouteBatch
from config import HEADER_MARKERS, STREET_SUFFIXES, DEFAULT_DELIVERY_TYPE, ROUTE_PATTERNS


# Compiled once at import, never modified. ASCII only, so "\d" skips full-width digits.
SEQUENCE_RE = re.compile(ROUTE_PATTERNS["sequence"], re.ASCII)
STREET_RE = re.compile(ROUTE_PATTERNS["street"], re.ASCII | re.IGNORECASE)
UNIT_RE = re.compile(ROUTE_PATTERNS["unit"], re.ASCII | re.IGNORECASE)
ADDRESS_RE = re.compile(ROUTE_PATTERNS["address"], re.ASCII)
ADDITIONAL_INFO_RE = re.compile(ROUTE_PATTERNS["additional_info"], re.ASCII)


# =============================================================================
# LINE PREPROCESSING
# =============================================================================

def preprocess_lines(text: str) -> List[str]:
    """
    Split raw OCR text into trimmed, non-empty lines.

    Args:
        text: Raw multi-line OCR text

    Returns:
        Lines in their original order
    """
    lines = []
    for line in text.split("\n"):
        line = line.strip()
        if line:
            lines.append(line)
    return lines


def is_header_line(line: str) -> bool:
    """Check if a line is a table header (case-sensitive substring match)."""
    return any(marker in line for marker in HEADER_MARKERS)


# =============================================================================
# FIELD DETECTION
# =============================================================================

def detect_sequence(line: str) -> Optional[Tuple[str, str]]:
    """
    Find the stop number at the start of a line.

    Args:
        line: Trimmed, non-header line

    Returns:
        (sequence, payload) where payload is the rest of the line, trimmed,
        or None when the line does not start with a digit
    """
    match = SEQUENCE_RE.match(line)
    if not match:
        return None
    sequence = match.group(1)
    return sequence, line[len(sequence):].strip()


def detect_street_name(payload: str) -> str:
    """
    Find a street name like "OAK RD" in the payload.

    Only tried when a suffix appears in upper case somewhere in the
    payload. The suffix is a plain substring, so a name such as
    "JOHNSTON" can also look like a street.

    Returns:
        The street name, or "" when none is found
    """
    if not any(suffix in payload for suffix in STREET_SUFFIXES):
        return ""
    match = STREET_RE.search(payload)
    if not match:
        return ""
    return match.group(1).strip()


def detect_unit(payload: str) -> str:
    """Find an apartment designator such as "APT 4"."""
    match = UNIT_RE.search(payload)
    return match.group(0) if match else ""


def detect_address(payload: str) -> str:
    """The house number is the digit run at the start of the payload."""
    match = ADDRESS_RE.match(payload)
    return match.group(0) if match else ""


def detect_additional_info(payload: str) -> Optional[str]:
    """
    Find the text printed after a four digit marker, usually a name.

    Returns:
        The trailing text, or None when there is no marker
    """
    match = ADDITIONAL_INFO_RE.search(payload)
    if not match:
        return None
    return match.group(1).strip()


# =============================================================================
# RECORD EXTRACTION
# =============================================================================

def extract_record(line: str, current_street: str) -> Tuple[Optional[StopRecord], str]:
    """
    Build a stop from one line.

    Args:
        line: Trimmed, non-header line
        current_street: Street name carried from earlier lines

    Returns:
        (stop, street) where stop is None for non-stop lines and street is
        the street name to carry into the next line
    """
    detected = detect_sequence(line)
    if detected is None:
        return None, current_street

    sequence, payload = detected

    street_name = detect_street_name(payload)
    if street_name:
        current_street = street_name

    stop = StopRecord(
        sequence=sequence,
        address=detect_address(payload),
        street_name=street_name or current_street,
        unit=detect_unit(payload),
        delivery_type=DEFAULT_DELIVERY_TYPE,
        additional_info=detect_additional_info(payload),
        notes="",
    )
    return stop, current_street


def parse_route_text(text: str, current_street: str = "") -> List[StopRecord]:
    """
    Parse the OCR text of one route book image.

    An empty result is normal: it means the photo should be retaken.

    Args:
        text: Raw OCR text
        current_street: Street name to start with (empty for a new image)

    Returns:
        Stops in the order they appear in the text
    """
    stops = []
    for line in preprocess_lines(text):
        if is_header_line(line):
            continue
        stop, current_street = extract_record(line, current_street)
        if stop is not None:
            stops.append(stop)
    return stops


class RouteBookParser:
    """
    Parses OCR text from route edit book pages into RouteBatch objects.

    The parser keeps no state between calls, so one instance can be
    shared by any number of images.
    """

    def parse_document(self, ocr_text: str, source_file: str, ocr_confidence: Optional[float] = None) -> RouteBatch:
        """
        Main method to parse one image's text.

        Args:
            ocr_text: Raw text from OCR
            source_file: Name of the original image file
            ocr_confidence: OCR confidence score (0-1)

        Returns:
            RouteBatch with all stops found in the text
        """

        stops = parse_route_text(ocr_text)

        if stops:
            processing_notes = f"Parsed {len(stops)} stops"
        else:
            processing_notes = "No route data could be found in the image. Please try another image."

        return RouteBatch(
            source_file=source_file,
            extraction_date=date.today(),
            stops=stops,
            ocr_confidence=ocr_confidence,
            processing_notes=processing_notes,
        )
