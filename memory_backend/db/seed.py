from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import MemoryUpdate, Person

logger = logging.getLogger("memory_backend.seed")

DEMO_PEOPLE = [
    {
        "id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        "name": "Sarah",
        "relationship": "Daughter",
        "memories": [
            "Visits every Sunday afternoon and brings fresh flowers.",
            "Lives nearby with her husband Tom and their dog Biscuit.",
        ],
    },
    {
        "id": "b2c3d4e5-f6a7-8901-bcde-f12345678901",
        "name": "Michael",
        "relationship": "Son",
        "memories": [
            "Loves fishing at the lake, just like you taught him.",
            "Calls every Wednesday evening after work.",
        ],
    },
    {
        "id": "c3d4e5f6-a7b8-9012-cdef-123456789012",
        "name": "Dr. Emily Chen",
        "relationship": "Doctor",
        "memories": [
            "Has been your family doctor for six years.",
            "Always asks about your garden.",
        ],
    },
]

DEMO_PERSON_IDS = [entry["id"] for entry in DEMO_PEOPLE]


def seed_demo_people(db: Session) -> int:
    """Insert the demo people that are missing. Returns how many were added."""
    existing = set(db.scalars(select(Person.id).where(Person.id.in_(DEMO_PERSON_IDS))).all())
    added = 0
    for entry in DEMO_PEOPLE:
        if entry["id"] in existing:
            continue
        person = Person(id=entry["id"], name=entry["name"], relationship=entry["relationship"])
        person.memory_updates = [MemoryUpdate(text=text) for text in entry["memories"]]
        db.add(person)
        added += 1
    if added:
        db.commit()
        logger.info("Seeded %s demo people.", added)
    return added
