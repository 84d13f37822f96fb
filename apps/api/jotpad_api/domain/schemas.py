from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from jotpad_api.domain.entities import Note


class NoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    def to_entity(self) -> Note:
        return Note(
            id=self.id,
            title=self.title,
            content=self.content,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class NoteCreateIn(BaseModel):
    title: str = Field(min_length=1)
    content: str = ""


class NoteUpdateIn(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None


class NoteDeleteOut(BaseModel):
    success: bool


class HealthOut(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: str
