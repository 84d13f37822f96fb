from __future__ import annotations


class NoteError(Exception):
    code = "note_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class ValidationError(NoteError, ValueError):
    code = "validation_error"


class NotFound(NoteError, LookupError):
    code = "note_not_found"

    def __init__(self, note_id: int | None = None, message: str | None = None) -> None:
        self.note_id = note_id
        super().__init__(message or (f"Note with id {note_id} not found" if note_id is not None else None))


class StoreUnavailable(NoteError, RuntimeError):
    code = "store_unavailable"


def require_title(title: str | None) -> None:
    if title is not None and len(title) < 1:
        raise ValidationError("title_required")
