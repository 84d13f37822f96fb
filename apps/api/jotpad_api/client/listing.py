from __future__ import annotations

from collections.abc import Sequence

from jotpad_api.domain.entities import Note


def filter_notes(notes: Sequence[Note], query: str) -> list[Note]:
    """Case-insensitive substring match on title or content; empty query keeps everything."""
    if not query:
        return list(notes)
    needle = query.lower()
    return [n for n in notes if needle in n.title.lower() or needle in n.content.lower()]


def replace_by_id(notes: Sequence[Note], note: Note) -> list[Note]:
    return [note if n.id == note.id else n for n in notes]


def remove_by_id(notes: Sequence[Note], note_id: int) -> list[Note]:
    return [n for n in notes if n.id != note_id]
