"""Note Routes — CRUD with tag / ticker / text filters."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from finanwas.api.deps import current_user
from finanwas.infrastructure.database import get_db
from finanwas.models.user import User
from finanwas.schemas.notes import NoteCreate, NoteUpdate
from finanwas.services.notes import NoteService

router = APIRouter(prefix="/api/v1/notes", tags=["notes"])


@router.get("")
async def list_notes(
    tags: str | None = Query(None, description="Comma-separated; notes must carry all"),
    ticker: str | None = Query(None),
    search: str | None = Query(None),
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else None
    notes = await NoteService(db).list_notes(user.id, tag_list, ticker, search)
    return {"notes": [n.to_dict() for n in notes]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteCreate, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    note = await NoteService(db).create_note(user.id, body.model_dump())
    return {"note": note.to_dict()}


@router.get("/{note_id}")
async def get_note(
    note_id: UUID, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"note": (await NoteService(db).get_note(user.id, note_id)).to_dict()}


@router.put("/{note_id}")
async def update_note(
    note_id: UUID, body: NoteUpdate, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    note = await NoteService(db).update_note(
        user.id, note_id, body.model_dump(exclude_unset=True),
    )
    return {"note": note.to_dict()}


@router.delete("/{note_id}")
async def delete_note(
    note_id: UUID, user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    await NoteService(db).delete_note(user.id, note_id)
    return {"success": True, "message": "Nota eliminada"}
