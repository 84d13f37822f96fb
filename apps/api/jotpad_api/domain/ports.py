from __future__ import annotations

from typing import Protocol, runtime_checkable

from jotpad_api.domain.entities import Note, SortOrder


@runtime_checkable
class NoteRepository(Protocol):
    def list_notes(self, sort_by: SortOrder = "updated_desc") -> list[Note]:
        ...

    def create_note(self, title: str, content: str = "") -> Note:
        ...

    def get_note(self, note_id: int) -> Note | None:
        ...

    def update_note(self, note_id: int, title: str | None = None, content: str | None = None) -> Note:
        ...

    def delete_note(self, note_id: int) -> bool:
        ...
