from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from memory_backend.api.deps import db_session, existing_person
from memory_backend.db.models import ConversationHistory, MemoryUpdate, Person
from memory_backend.schemas.person import (
    ConversationCreate,
    MemoryNoteCreate,
    NoteResponse,
    PersonCreate,
    PersonResponse,
)

router = APIRouter(prefix="/people", tags=["people"])


@router.get("", response_model=list[PersonResponse])
def list_people(db: Session = db_session()):
    return db.scalars(select(Person).order_by(Person.name)).all()


@router.post("", response_model=PersonResponse, status_code=status.HTTP_201_CREATED)
def create_person(payload: PersonCreate, db: Session = db_session()):
    row = Person(name=payload.name.strip(), relationship=payload.relationship.strip(), photo_url=payload.photo_url)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.post("/{person_id}/memories", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def add_memory_note(
    payload: MemoryNoteCreate,
    person: Person = Depends(existing_person),
    db: Session = db_session(),
):
    row = MemoryUpdate(person_id=person.id, text=payload.text.strip())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.post("/{person_id}/conversations", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def add_conversation(
    payload: ConversationCreate,
    person: Person = Depends(existing_person),
    db: Session = db_session(),
):
    row = ConversationHistory(person_id=person.id, transcript=payload.transcript.strip())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
