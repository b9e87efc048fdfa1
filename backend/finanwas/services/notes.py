"""Note Service — user notes with tag, ticker and text filters.

Invariants:
    - Listing is most recently updated first
    - Tag filter keeps notes containing ALL requested tags
    - Search is case-insensitive over title and content

Design Decisions:
    - Tag filter applied in Python: tags live in a JSON column and the
      containment operator differs between PostgreSQL and SQLite
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.core.errors import ResourceNotFoundError
from finanwas.models.note import Note

NOTE_FIELDS = ("title", "content", "tags", "linked_ticker")


class NoteService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notes(
        self,
        user_id: uuid.UUID,
        tags: list[str] | None = None,
        linked_ticker: str | None = None,
        search: str | None = None,
    ) -> list[Note]:
        query = select(Note).where(Note.user_id == user_id)
        if linked_ticker:
            query = query.where(Note.linked_ticker == linked_ticker.upper())
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(Note.title).like(pattern),
                func.lower(Note.content).like(pattern),
            ))
        result = await self.db.execute(query.order_by(Note.updated_at.desc()))
        notes = list(result.scalars().all())
        if tags:
            wanted = set(tags)
            notes = [n for n in notes if wanted.issubset(n.tags or [])]
        return notes

    async def get_note(self, user_id: uuid.UUID, note_id: uuid.UUID) -> Note:
        result = await self.db.execute(
            select(Note).where(Note.id == note_id).where(Note.user_id == user_id),
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise ResourceNotFoundError("note", str(note_id), "Nota no encontrada")
        return note

    async def create_note(self, user_id: uuid.UUID, data: dict) -> Note:
        note = Note(user_id=user_id, content="", tags=[])
        for key in NOTE_FIELDS:
            if data.get(key) is not None:
                setattr(note, key, data[key])
        if note.linked_ticker:
            note.linked_ticker = note.linked_ticker.upper()
        self.db.add(note)
        await self.db.commit()
        return note

    async def update_note(
        self, user_id: uuid.UUID, note_id: uuid.UUID, changes: dict,
    ) -> Note:
        note = await self.get_note(user_id, note_id)
        for key, value in changes.items():
            if key in NOTE_FIELDS:
                setattr(note, key, value)
        if note.linked_ticker:
            note.linked_ticker = note.linked_ticker.upper()
        note.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        return note

    async def delete_note(self, user_id: uuid.UUID, note_id: uuid.UUID) -> None:
        note = await self.get_note(user_id, note_id)
        await self.db.delete(note)
        await self.db.commit()
