"""
Route Stop Schema - Defines the structure for route edit book data.

This file uses Pydantic to create "data models" for the stops we read
from a photographed route edit book page.

For Python beginners:
- A StopRecord is one row of the route table
- A RouteBatch is everything parsed from one image
- A RouteBook is the growing list of stops while you edit a route
"""

from collections import Counter
from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from config import DEFAULT_DELIVERY_TYPE, is_editable_field


class StopRecord(BaseModel):
    """
    Represents a single delivery stop.

    This is like a "row" in the route book - one stop on the route.
    Fields that could not be read from the image are left empty so
    they can be corrected by hand.
    """

    # The stop's position in delivery order
    sequence: str = Field(..., description="Sequence number (digits only)")

    # Location fields
    address: str = Field("", description="House/building number")
    street_name: str = Field("", description="Street name, carried over from earlier stops when missing")
    unit: str = Field("", description="Apartment designator, e.g. 'APT 4'")

    # Delivery fields
    delivery_type: str = Field(DEFAULT_DELIVERY_TYPE, description="Delivery type code")
    additional_info: Optional[str] = Field(None, description="Name or note from the right column")
    notes: str = Field("", description="Carrier notes, filled in by hand")

    @field_validator('sequence')
    @classmethod
    def check_sequence(cls, v):
        """Sequence numbers are digit strings like '12'"""
        if not (v.isascii() and v.isdigit()):
            raise ValueError('sequence must contain digits only')
        return v

    def field_values(self) -> List[str]:
        """All field values as text, skipping the ones that are unset"""
        return [value for value in self.model_dump().values() if value is not None]


class RouteBatch(BaseModel):
    """
    Represents all stops parsed from a single route book image.
    """

    # Metadata about the image
    source_file: str = Field(..., description="Original image filename")
    extraction_date: date = Field(..., description="When the OCR was performed")

    # The stops found in the image, in the order they were printed
    stops: List[StopRecord] = Field(default_factory=list, description="Stops parsed from the image")

    # OCR confidence and processing info
    ocr_confidence: Optional[float] = Field(None, description="Overall OCR confidence score (0-1)")
    processing_notes: Optional[str] = Field(None, description="Notes about the extraction process")

    @field_validator('ocr_confidence')
    @classmethod
    def validate_confidence(cls, v):
        """Ensure confidence score is between 0 and 1"""
        if v is not None and (v < 0 or v > 1):
            raise ValueError('OCR confidence must be between 0 and 1')
        return v

    @property
    def is_empty(self) -> bool:
        return not self.stops


class RouteBook(BaseModel):
    """
    The route being edited: stops from every uploaded image, in upload order.

    Batches are appended as they are; sequence numbers are not renumbered
    or de-duplicated across images. Use duplicate_sequences() to find
    collisions.
    """

    stops: List[StopRecord] = Field(default_factory=list, description="All stops in the route")

    def append_batch(self, stops: List[StopRecord]) -> None:
        """Add the stops parsed from one image to the end of the route"""
        self.stops.extend(stops)

    def add_stop(self) -> StopRecord:
        """Add a blank stop numbered after the current last row"""
        stop = StopRecord(sequence=str(len(self.stops) + 1))
        self.stops.append(stop)
        return stop

    def delete_stop(self, sequence: str) -> int:
        """
        Remove every stop with the given sequence number.

        Returns:
            How many stops were removed
        """
        remaining = [stop for stop in self.stops if stop.sequence != sequence]
        removed = len(self.stops) - len(remaining)
        self.stops = remaining
        return removed

    def update_stop(self, sequence: str, field_name: str, value: str) -> int:
        """
        Change one field on every stop with the given sequence number.

        Args:
            sequence: Sequence number of the stop(s) to change
            field_name: One of the editable StopRecord fields
            value: New value

        Returns:
            How many stops were changed
        """
        if not is_editable_field(field_name):
            raise ValueError(f"Field '{field_name}' cannot be edited")

        updated = 0
        for stop in self.stops:
            if stop.sequence == sequence:
                setattr(stop, field_name, value)
                updated += 1
        return updated

    def search(self, term: str) -> List[StopRecord]:
        """Stops where any field contains the search term (case-insensitive)"""
        needle = term.lower()
        return [
            stop for stop in self.stops
            if any(needle in value.lower() for value in stop.field_values())
        ]

    def duplicate_sequences(self) -> List[str]:
        """Sequence numbers used by more than one stop, in first-seen order"""
        counts = Counter(stop.sequence for stop in self.stops)
        return [seq for seq, count in counts.items() if count > 1]

    def get_unique_streets(self) -> List[str]:
        """Get list of unique street names, in route order"""
        streets = []
        for stop in self.stops:
            if stop.street_name and stop.street_name not in streets:
                streets.append(stop.street_name)
        return streets
