"""
Schemas package for route book data validation.

This package contains Pydantic models that define the structure
of the stops we extract from route edit book images.

As a Python beginner, think of schemas as "templates" that define:
- What fields (data pieces) each stop has
- What type each field should be
- Which fields are required vs optional
"""

from .route_stop_schema import StopRecord, RouteBatch, RouteBook

# This makes it easy to import from other files like:
# from schemas import StopRecord
__all__ = ["StopRecord", "RouteBatch", "RouteBook"]
