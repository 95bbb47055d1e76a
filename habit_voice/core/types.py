"""
Type definitions for the habit tracker.

This module defines the data structures that flow through the extraction engine
(candidates and results) and the ones owned by the registry and day-store
collaborators (tracked activities, logged events, days).
"""

from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TrackedActivity(BaseModel):
    """
    A canonical activity the user has chosen to track.

    Attributes:
        id: Stable identifier of the registry entry
        name: Canonical spelling used when logging the activity
        active: Whether voice detection should currently listen for it
        keywords: Spoken variants that map onto the canonical name
    """

    id: str = Field(..., description="Registry entry identifier")
    name: str = Field(..., min_length=1, description="Canonical activity name")
    active: bool = Field(default=True, description="Whether detection is enabled")
    keywords: List[str] = Field(default_factory=list, description="Synonyms and spoken variants")


class NumberToken(BaseModel):
    """A decoded number together with the text it was read from."""

    digits: str = Field(..., pattern=r"^(0|[1-9][0-9]*)$", description="Decoded non-negative integer as a digit string")
    matched_span: str = Field(..., description="Substring of the input that produced the value")

    @property
    def value(self) -> int:
        return int(self.digits)


class ActivityCandidate(BaseModel):
    """
    Provisional activity produced by one cascade tier, before admission.
    """

    name: str = Field(..., description="Detected activity name")
    quantity: Optional[str] = Field(default=None, pattern=r"^(0|[1-9][0-9]*)$", description="Base-10 digit string")
    unit: Optional[str] = Field(default=None, description="Free-text unit such as reps, mins or miles")
    source_tier: int = Field(..., ge=1, description="Rank of the tier that produced the candidate")


class ExtractionResult(BaseModel):
    """
    Sole output of the extraction engine: one accepted activity per finalized segment.
    """

    name: str = Field(..., description="Activity name as detected")
    quantity: Optional[str] = Field(default=None, description="Base-10 digit string")
    unit: Optional[str] = Field(default=None, description="Free-text unit")
    transcribed_phrase: str = Field(..., description="Verbatim transcript segment")


class TraceStep(BaseModel):
    """One admission attempt recorded while running the cascade."""

    tier: int
    tier_name: str
    candidate: ActivityCandidate
    accepted: bool


class ExtractionTrace(BaseModel):
    """Ordered record of every candidate tried for a segment."""

    text: str
    steps: List[TraceStep] = Field(default_factory=list)
    result: Optional[ExtractionResult] = None


class ActivityEvent(BaseModel):
    """
    A logged occurrence of an activity, as persisted in a day document.
    """

    id: str = Field(..., description="Event identifier")
    name: str = Field(..., description="Canonical (normalized) activity name")
    quantity: Optional[str] = Field(default=None, description="Base-10 digit string")
    unit: Optional[str] = Field(default=None, description="Free-text unit")
    timestamp: datetime = Field(..., description="When the activity was logged")
    transcribed_phrase: Optional[str] = Field(default=None, description="Transcript the event came from")


class Day(BaseModel):
    """
    All events recorded for a single calendar day, newest first.
    """

    id: str = Field(..., description="Date string such as 2024-01-15")
    date: date_type = Field(..., description="The calendar day")
    events: List[ActivityEvent] = Field(default_factory=list, description="Events for the day, newest first")
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)
