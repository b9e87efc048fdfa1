"""Note Schemas."""

from pydantic import BaseModel, Field, field_validator


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    return list(dict.fromkeys(t.strip() for t in tags if t and t.strip()))


class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field("", max_length=50_000)
    tags: list[str] = Field(default_factory=list, max_length=20)
    linked_ticker: str | None = Field(None, max_length=20)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("El título es requerido")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class NoteUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, max_length=50_000)
    tags: list[str] | None = Field(None, max_length=20)
    linked_ticker: str | None = Field(None, max_length=20)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)
