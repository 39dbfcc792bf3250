from __future__ import annotations

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from memory_backend.db.models import Person
from memory_backend.db.session import get_db


def db_session() -> Session:
    return Depends(get_db)  # type: ignore[return-value]


def existing_person(person_id: str, db: Session = db_session()) -> Person:
    person = db.get(Person, person_id)
    if person is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
    return person
