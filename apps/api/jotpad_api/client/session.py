from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from jotpad_api.client.listing import filter_notes, remove_by_id, replace_by_id
from jotpad_api.client.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from jotpad_api.config import Settings
from jotpad_api.domain.entities import DEFAULT_SORT_ORDER, Note, SortOrder
from jotpad_api.domain.exceptions import NoteError

logger = logging.getLogger("jotpad.client")

DEFAULT_TITLE = "New Note"


class NoteStoreLike(Protocol):
    async def list(self, sort_order: SortOrder = DEFAULT_SORT_ORDER) -> list[Note]:
        ...

    async def create(self, title: str, content: str = "") -> Note:
        ...

    async def update(self, note_id: int, title: str | None = None, content: str | None = None) -> Note:
        ...

    async def delete(self, note_id: int) -> bool:
        ...


class SessionState(str, Enum):
    NO_SELECTION = "no_selection"
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


@dataclass
class EditBuffer:
    title: str = ""
    content: str = ""


@dataclass(frozen=True)
class SaveRequest:
    note_id: int
    title: str
    content: str


class EditorSession:
    """
    Editor state for one user: the note list, the selected note, its edit
    buffer and a trailing-debounce auto-save.

    Must be driven from a single event loop. At most one update call is in
    flight at any time; saves requested meanwhile are queued per note and
    edits made meanwhile only re-arm the timer once the call settles. Results
    are applied to the editor only while the note they were issued for is
    still selected.
    """

    def __init__(
        self,
        store: NoteStoreLike,
        *,
        scheduler: Scheduler | None = None,
        debounce_s: float = 2.0,
        sort_order: SortOrder = DEFAULT_SORT_ORDER,
    ) -> None:
        self.store = store
        self.scheduler = scheduler or AsyncioScheduler()
        self.debounce_s = debounce_s
        self.sort_order: SortOrder = sort_order
        self.notes: list[Note] = []
        self.query = ""
        self.selected_note: Note | None = None
        self.buffer = EditBuffer()
        self._timer: TimerHandle | None = None
        self._inflight: asyncio.Task | None = None
        self._inflight_req: SaveRequest | None = None
        self._queued: dict[int, SaveRequest] = {}
        self._edited_while_saving = False

    @classmethod
    def from_settings(cls, store: NoteStoreLike, settings: Settings, **kwargs) -> "EditorSession":
        return cls(store, debounce_s=settings.autosave_debounce_ms / 1000.0, **kwargs)

    # -- derived state

    @property
    def dirty(self) -> bool:
        note = self.selected_note
        if note is None:
            return False
        return (self.buffer.title, self.buffer.content) != (note.title, note.content)

    has_unsaved_changes = dirty

    @property
    def state(self) -> SessionState:
        if self.selected_note is None:
            return SessionState.NO_SELECTION
        if self._inflight is not None:
            return SessionState.SAVING
        return SessionState.DIRTY if self.dirty else SessionState.CLEAN

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    @property
    def visible_notes(self) -> list[Note]:
        return filter_notes(self.notes, self.query)

    def set_query(self, text: str) -> None:
        self.query = text

    # -- list

    async def load(self, sort_order: SortOrder | None = None) -> bool:
        order = sort_order or self.sort_order
        try:
            notes = await self.store.list(order)
        except NoteError:
            logger.warning("notes_load_failed", extra={"sort_by": order}, exc_info=True)
            return False
        self.sort_order = order
        self.notes = notes
        return True

    async def set_sort_order(self, sort_order: SortOrder) -> bool:
        return await self.load(sort_order)

    # -- selection and editing

    def select(self, note: Note) -> None:
        # Kick off the save for the outgoing note before the buffer is replaced.
        self._save_pending()
        self._cancel_timer()
        self.selected_note = note
        self.buffer = EditBuffer(title=note.title, content=note.content)
        self._edited_while_saving = False

    async def create_new(self) -> Note | None:
        try:
            note = await self.store.create(DEFAULT_TITLE, "")
        except NoteError:
            logger.warning("note_create_failed", exc_info=True)
            return None
        self.notes = [note, *remove_by_id(self.notes, note.id)]
        self.select(note)
        logger.info("note_created", extra={"id": note.id})
        return note

    def edit_title(self, text: str) -> None:
        if self.selected_note is None:
            return
        self.buffer.title = text
        self._after_edit()

    def edit_content(self, text: str) -> None:
        if self.selected_note is None:
            return
        self.buffer.content = text
        self._after_edit()

    async def delete(self, note_id: int) -> bool:
        try:
            removed = await self.store.delete(note_id)
        except NoteError:
            logger.warning("note_delete_failed", extra={"id": note_id}, exc_info=True)
            return False
        self.notes = remove_by_id(self.notes, note_id)
        self._queued.pop(note_id, None)
        if self.selected_note is not None and self.selected_note.id == note_id:
            self._cancel_timer()
            self.selected_note = None
            self.buffer = EditBuffer()
            self._edited_while_saving = False
        logger.info("note_deleted", extra={"id": note_id, "removed": removed})
        return removed

    # -- saving

    async def save_now(self) -> bool:
        """Save the selected note immediately; True when nothing is left unsaved."""
        self._cancel_timer()
        self._save_pending()
        await self.wait_idle()
        return not self.dirty

    async def wait_idle(self) -> None:
        while self._inflight is not None:
            await self._inflight

    async def close(self, *, flush: bool = True) -> None:
        self._cancel_timer()
        if flush:
            self._save_pending()
        await self.wait_idle()

    def _after_edit(self) -> None:
        if self._inflight is not None:
            self._edited_while_saving = True
            return
        if self.dirty:
            self._arm_timer()
        else:
            self._cancel_timer()

    def _arm_timer(self) -> None:
        self._cancel_timer()
        self._timer = self.scheduler.call_later(self.debounce_s, self._on_debounce)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_debounce(self) -> None:
        self._timer = None
        if self._inflight is not None:
            self._edited_while_saving = True
            return
        self._save_pending()

    def _save_pending(self) -> None:
        note = self.selected_note
        if note is None or not self.dirty:
            return
        self._request_save(SaveRequest(note_id=note.id, title=self.buffer.title, content=self.buffer.content))

    def _request_save(self, req: SaveRequest) -> None:
        if self._inflight is not None:
            if req == self._inflight_req:
                self._queued.pop(req.note_id, None)
            else:
                self._queued[req.note_id] = req
            return
        self._inflight_req = req
        self._inflight = asyncio.get_running_loop().create_task(self._reconcile(req))

    async def _reconcile(self, req: SaveRequest) -> None:
        try:
            note = await self.store.update(req.note_id, title=req.title, content=req.content)
        except NoteError:
            logger.warning("autosave_failed", extra={"id": req.note_id}, exc_info=True)
        else:
            self._apply_saved(req, note)
        finally:
            self._settle()

    def _apply_saved(self, req: SaveRequest, note: Note) -> None:
        self.notes = replace_by_id(self.notes, note)
        if self.selected_note is None or self.selected_note.id != req.note_id:
            logger.debug("autosave_result_not_applied", extra={"id": req.note_id})
            return
        was_dirty = self.dirty
        self.selected_note = note
        if not was_dirty:
            # The note was reselected from an older copy mid-save.
            self.buffer = EditBuffer(title=note.title, content=note.content)
        logger.debug("autosave_applied", extra={"id": note.id})

    def _settle(self) -> None:
        self._inflight = None
        self._inflight_req = None
        if self._queued:
            next_id = next(iter(self._queued))
            self._request_save(self._queued.pop(next_id))
            return
        if self._edited_while_saving:
            self._edited_while_saving = False
            if self.dirty:
                self._arm_timer()
