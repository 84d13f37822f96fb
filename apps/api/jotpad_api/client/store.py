from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from jotpad_api.config import Settings
from jotpad_api.domain.entities import DEFAULT_SORT_ORDER, SORT_ORDERS, Note, SortOrder
from jotpad_api.domain.exceptions import NotFound, StoreUnavailable, ValidationError, require_title
from jotpad_api.domain.schemas import NoteDeleteOut, NoteOut

logger = logging.getLogger("jotpad.client")

_NOTE_LIST = TypeAdapter(list[NoteOut])


class NoteStore:
    """
    Async facade over the notes HTTP API.

    Transport failures and 5xx answers surface as StoreUnavailable, 404 on an
    update as NotFound, 422 as ValidationError. Titles are checked locally
    before any request is sent.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        api_token: str | None = None,
        timeout_s: float = 10.0,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout_s)
        if not self._owns_client and headers:
            self._client.headers.update(headers)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "NoteStore":
        return cls(settings.api_url, api_token=settings.api_auth_token, **kwargs)

    async def __aenter__(self) -> "NoteStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("store_request_failed", extra={"method": method, "url": url, "error": str(e)})
            raise StoreUnavailable("store_request_failed") from e

        if resp.status_code == 422:
            raise ValidationError(_detail(resp))
        if resp.status_code >= 400 and resp.status_code != 404:
            raise StoreUnavailable(f"store_http_{resp.status_code}")
        return resp

    async def list(self, sort_order: SortOrder = DEFAULT_SORT_ORDER) -> list[Note]:
        if sort_order not in SORT_ORDERS:
            raise ValidationError(f"invalid_sort_order:{sort_order}")
        resp = await self._request("GET", "/notes", params={"sort_by": sort_order})
        if resp.status_code == 404:
            raise StoreUnavailable("store_http_404")
        try:
            return [n.to_entity() for n in _NOTE_LIST.validate_python(resp.json())]
        except (ValueError, SchemaError) as e:
            raise StoreUnavailable("store_bad_response") from e

    async def create(self, title: str, content: str = "") -> Note:
        if not title:
            raise ValidationError("title_required")
        resp = await self._request("POST", "/notes", json={"title": title, "content": content})
        if resp.status_code == 404:
            raise StoreUnavailable("store_http_404")
        return _parse_note(resp)

    async def get(self, note_id: int) -> Note | None:
        resp = await self._request("GET", f"/notes/{note_id}")
        if resp.status_code == 404:
            return None
        return _parse_note(resp)

    async def update(self, note_id: int, title: str | None = None, content: str | None = None) -> Note:
        require_title(title)
        payload: dict[str, str] = {}
        if title is not None:
            payload["title"] = title
        if content is not None:
            payload["content"] = content
        resp = await self._request("PUT", f"/notes/{note_id}", json=payload)
        if resp.status_code == 404:
            raise NotFound(note_id)
        return _parse_note(resp)

    async def delete(self, note_id: int) -> bool:
        resp = await self._request("DELETE", f"/notes/{note_id}")
        if resp.status_code == 404:
            return False
        try:
            return NoteDeleteOut.model_validate(resp.json()).success
        except (ValueError, SchemaError) as e:
            raise StoreUnavailable("store_bad_response") from e


def _detail(resp: httpx.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return "validation_error"
    if isinstance(detail, str):
        return detail
    return "validation_error"


def _parse_note(resp: httpx.Response) -> Note:
    try:
        return NoteOut.model_validate(resp.json()).to_entity()
    except (ValueError, SchemaError) as e:
        raise StoreUnavailable("store_bad_response") from e
