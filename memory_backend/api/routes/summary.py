from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from memory_backend.api.deps import db_session
from memory_backend.api.errors import error_response
from memory_backend.db.models import Person
from memory_backend.schemas.person import PersonSummaryResponse
from memory_backend.services.summarizer import SummaryGenerator, get_summary_generator

router = APIRouter(tags=["summary"])
logger = logging.getLogger("memory_backend.summary")


def _summarize(person_id: str, db: Session, generator: SummaryGenerator):
    try:
        person = db.get(Person, person_id)
        if person is None:
            return error_response(404, "Person not found")

        logger.info("Generating summary for person: %s", person_id)
        memories, conversations = generator.recent_context(db, person_id)
        summary = generator.generate(person, memories, conversations)
    except Exception as exc:
        logger.exception("Error in summary endpoint")
        return error_response(500, "Failed to generate summary", str(exc) or exc.__class__.__name__)

    return PersonSummaryResponse(
        name=person.name,
        relationship=person.relationship,
        photo_url=person.photo_url,
        summary=summary,
    )


@router.get("/summary", response_model=PersonSummaryResponse)
def summary_by_query(
    person_id: str | None = Query(default=None, alias="personId"),
    db: Session = db_session(),
    generator: SummaryGenerator = Depends(get_summary_generator),
):
    if not person_id:
        return error_response(400, "Person ID is required")
    return _summarize(person_id, db, generator)


@router.get("/summary/{person_id}", response_model=PersonSummaryResponse)
def summary_by_path(
    person_id: str,
    db: Session = db_session(),
    generator: SummaryGenerator = Depends(get_summary_generator),
):
    return _summarize(person_id, db, generator)
