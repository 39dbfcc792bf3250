from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PersonSummaryResponse(_CamelModel):
    name: str
    relationship: str
    photo_url: str | None = None
    summary: str


class PersonCreate(_CamelModel):
    name: str = Field(min_length=1, max_length=120)
    relationship: str = Field(min_length=1, max_length=64)
    photo_url: str | None = Field(default=None, max_length=512)


class PersonResponse(_CamelModel):
    id: str
    name: str
    relationship: str
    photo_url: str | None = None
    created_at: datetime


class MemoryNoteCreate(_CamelModel):
    text: str = Field(min_length=1, max_length=2000)


class ConversationCreate(_CamelModel):
    transcript: str = Field(min_length=1, max_length=20000)


class NoteResponse(_CamelModel):
    id: str
    person_id: str
    created_at: datetime
