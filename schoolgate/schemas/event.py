"""Pydantic schemas for school events."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, model_validator

from schoolgate.schemas.base import CamelModel


class EventCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_date: datetime
    end_date: datetime | None = None
    location: str | None = None

    @model_validator(mode="after")
    def _dates(self) -> EventCreate:
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class EventUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    location: str | None = None


class EventRead(CamelModel):
    id: str
    school_id: str
    title: str
    description: str | None
    start_date: datetime
    end_date: datetime | None
    location: str | None
    created_by: str
    status: str
