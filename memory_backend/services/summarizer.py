from __future__ import annotations

import logging
from typing import Sequence

import requests
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from memory_backend.core.config import Settings, get_settings
from memory_backend.db.models import ConversationHistory, MemoryUpdate, Person

logger = logging.getLogger("memory_backend.summarizer")

SYSTEM_PROMPT = (
    "You are a gentle, caring assistant helping dementia patients remember their loved ones. "
    "Keep responses simple, warm, and reassuring. Never use complex words or long sentences."
)


def fallback_summary(person: Person) -> str:
    return f"{person.name} is your {person.relationship.lower()}. They care about you very much."


def build_prompt(person: Person, memories: Sequence[str], conversations: Sequence[str]) -> str:
    memory_context = "\n- ".join(memories) or "No specific memories recorded yet."
    conversation_context = "\n- ".join(conversations) or "No recent conversations recorded."
    return (
        "You are helping a dementia patient remember someone they know. "
        "Generate a short, warm, and reassuring summary about this person.\n\n"
        f"Person's name: {person.name}\n"
        f"Relationship: {person.relationship}\n\n"
        f"Memory notes about this person:\n- {memory_context}\n\n"
        f"Recent conversations:\n- {conversation_context}\n\n"
        "Generate a friendly, simple summary (2-3 sentences max) that helps the patient remember who "
        "this person is and feel comfortable. Use simple words and a warm tone. Focus on the relationship "
        "and key positive memories. Start directly with the information, don't say things like "
        '"This is..." or "Here\'s...".'
    )


class SummaryGenerator:
    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def recent_context(self, db: Session, person_id: str) -> tuple[list[str], list[str]]:
        memories = db.scalars(
            select(MemoryUpdate.text)
            .where(MemoryUpdate.person_id == person_id)
            .order_by(desc(MemoryUpdate.created_at))
            .limit(self.settings.memory_note_limit)
        ).all()
        conversations = db.scalars(
            select(ConversationHistory.transcript)
            .where(ConversationHistory.person_id == person_id)
            .order_by(desc(ConversationHistory.created_at))
            .limit(self.settings.conversation_limit)
        ).all()
        return list(memories), list(conversations)

    def generate(self, person: Person, memories: Sequence[str], conversations: Sequence[str]) -> str:
        if not self.settings.llm_api_key:
            logger.warning("llm_api_key is not configured; using fallback summary for %s.", person.id)
            return fallback_summary(person)

        resp = self.session.post(
            self.settings.llm_api_url,
            headers={
                "Authorization": f"Bearer {self.settings.llm_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.settings.llm_model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(person, memories, conversations)},
                ],
            },
            timeout=self.settings.llm_timeout_seconds,
        )
        if not resp.ok:
            logger.error("Language model gateway error %s: %s", resp.status_code, resp.text[:500])
            return fallback_summary(person)

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None
        if not isinstance(content, str) or not content.strip():
            return fallback_summary(person)

        logger.info("Generated summary for %s", person.name)
        return content.strip()


_generator: SummaryGenerator | None = None


def get_summary_generator() -> SummaryGenerator:
    global _generator
    if _generator is None:
        _generator = SummaryGenerator(get_settings())
    return _generator
