"""
Base Models for Scheduling Inputs and Outputs

This module provides base classes with consistent validation settings for
the data that crosses the engine boundary.

MOTIVATION:
    Tasks and classes come from an external store that may carry more
    columns than the engine needs, while scheduling requests are built by
    the host service and should never silently drop a misspelled field.

Usage:
    # For request bodies (strictest validation)
    class ScheduleRequest(StrictRequest):
        start_date: date
        end_date: date

    # For records read from the task store (extra columns ignored)
    class Task(StrictResponse):
        id: str
        title: str

    # For engine outputs that must never change in place
    class StudySession(ValueModel):
        id: str
        duration_minutes: int

Architecture:
    Host Request → StrictRequest (extra="forbid") → Service
    Store Record → StrictResponse (extra="ignore") → Engine
    Engine → ValueModel (frozen=True) → Host
"""

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """
    Base model for request bodies with strict validation.

    Rejects any fields not explicitly declared in the model, catching
    caller typos and mismatches at request time rather than runtime.

    Features:
        - extra="forbid": Unknown fields raise ValidationError
        - validate_default=True: Validates default values
        - str_strip_whitespace=True: Trims whitespace from strings
    """

    model_config = ConfigDict(
        extra="forbid",  # Reject unknown fields
        validate_default=True,  # Validate defaults
        str_strip_whitespace=True,  # Clean string inputs
    )


class StrictResponse(BaseModel):
    """
    Base model for records exchanged with collaborators.

    More lenient than StrictRequest to allow flexibility in stored data.
    Still enforces type validation but allows extra fields.

    Features:
        - extra="ignore": Silently ignores extra fields (store may have more columns)
        - validate_default=True: Validates default values
        - from_attributes=True: Allows ORM model conversion
        - populate_by_name=True: Accepts field names alongside aliases
    """

    model_config = ConfigDict(
        extra="ignore",  # Allow extra fields from the store
        validate_default=True,  # Validate defaults
        from_attributes=True,  # Enable ORM conversion
        populate_by_name=True,
    )


class ValueModel(BaseModel):
    """
    Base model for immutable engine outputs.

    Instances are never mutated; passes produce new values with
    ``model_copy(update=...)``.

    Features:
        - frozen=True: Assignment raises ValidationError
        - extra="forbid": Strict for construction
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        from_attributes=True,
    )
