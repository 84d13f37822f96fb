import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from jotpad_api.dependencies import get_repository
from jotpad_api.domain.entities import SortOrder
from jotpad_api.domain.exceptions import NotFound, StoreUnavailable, ValidationError
from jotpad_api.domain.ports import NoteRepository
from jotpad_api.domain.schemas import HealthOut, NoteCreateIn, NoteDeleteOut, NoteOut, NoteUpdateIn
from jotpad_api.util import rfc3339_now

router = APIRouter()
logger = logging.getLogger("jotpad.api")


def _rid(request: Request) -> str:
    return getattr(request.state, "request_id", "")


@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut(timestamp=rfc3339_now())


@router.get("/notes", response_model=list[NoteOut])
def list_notes(
    sort_by: SortOrder = Query("updated_desc"),
    repo: NoteRepository = Depends(get_repository),
):
    try:
        return [NoteOut.model_validate(n) for n in repo.list_notes(sort_by)]
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.code) from e


@router.post("/notes", response_model=NoteOut)
def create_note(
    payload: NoteCreateIn,
    request: Request,
    repo: NoteRepository = Depends(get_repository),
):
    try:
        note = repo.create_note(payload.title, payload.content)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.code) from e
    logger.info("note_create", extra={"rid": _rid(request), "id": note.id})
    return NoteOut.model_validate(note)


@router.get("/notes/{note_id}", response_model=NoteOut)
def get_note(note_id: int, repo: NoteRepository = Depends(get_repository)):
    try:
        note = repo.get_note(note_id)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.code) from e
    if note is None:
        raise HTTPException(status_code=404, detail="note_not_found")
    return NoteOut.model_validate(note)


@router.put("/notes/{note_id}", response_model=NoteOut)
def update_note(
    note_id: int,
    payload: NoteUpdateIn,
    request: Request,
    repo: NoteRepository = Depends(get_repository),
):
    try:
        note = repo.update_note(note_id, title=payload.title, content=payload.content)
    except NotFound as e:
        raise HTTPException(status_code=404, detail="note_not_found") from e
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.code) from e
    logger.info(
        "note_update",
        extra={
            "rid": _rid(request),
            "id": note.id,
            "fields": [k for k in ("title", "content") if getattr(payload, k) is not None],
        },
    )
    return NoteOut.model_validate(note)


@router.delete("/notes/{note_id}", response_model=NoteDeleteOut)
def delete_note(note_id: int, request: Request, repo: NoteRepository = Depends(get_repository)):
    try:
        removed = repo.delete_note(note_id)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.code) from e
    logger.info("note_delete", extra={"rid": _rid(request), "id": note_id, "removed": removed})
    return NoteDeleteOut(success=removed)
