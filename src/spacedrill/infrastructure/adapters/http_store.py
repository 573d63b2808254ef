"""
HTTP ItemStore: talks to a remote item service.

Endpoints (JSON, wire shapes from spacedrill.infrastructure.serialization):

    GET    /items/due?asOf=YYYY-MM-DD     -> {"items": [...]}
    GET    /items[?ids=a,b]               -> {"items": [...]}
    GET    /reviews[?itemId=x]            -> {"reviews": [...]}
    POST   /items                         -> item
    POST   /items/{id}/ratings            -> item   body {"rating", "newState"}
    PUT    /items/{id}/state              -> item   body newState
    PUT    /items/{id}/suspended          -> item   body {"suspended"}
    DELETE /items/{id}/reviews
    DELETE /items/{id}
"""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any

import httpx

from spacedrill.domain.constants import REQUEST_TIMEOUT
from spacedrill.domain.errors import ItemNotFound, StoreError
from spacedrill.domain.models import Item, ItemState, Rating, RatingEvent
from spacedrill.domain.ports import ItemStore
from spacedrill.infrastructure.serialization import (
    event_from_wire,
    item_from_wire,
    item_to_wire,
    state_to_wire,
)


class HttpItemStore(ItemStore):
    """Adapter for a remote item service reachable over HTTP."""

    def __init__(
        self,
        url: str = "http://localhost:8790",
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.url = url.rstrip("/")
        self.timeout = timeout
        # A fresh client per call keeps the adapter usable from any event loop.
        self._transport = transport

    async def fetch_due(self, as_of: date) -> list[Item]:
        data = await self._request("GET", "/items/due", params={"asOf": as_of.isoformat()})
        return [item_from_wire(raw) for raw in data.get("items", [])]

    async def fetch_by_ids(self, ids: Iterable[str]) -> list[Item]:
        ids = list(dict.fromkeys(ids))
        if not ids:
            return []
        data = await self._request("GET", "/items", params={"ids": ",".join(ids)})
        return [item_from_wire(raw) for raw in data.get("items", [])]

    async def fetch_all(self) -> list[Item]:
        data = await self._request("GET", "/items")
        return [item_from_wire(raw) for raw in data.get("items", [])]

    async def fetch_events(self, item_id: str | None = None) -> list[RatingEvent]:
        params = {"itemId": item_id} if item_id else None
        data = await self._request("GET", "/reviews", params=params)
        events = [event_from_wire(raw) for raw in data.get("reviews", [])]
        return sorted(events, key=lambda e: e.timestamp)

    async def add_item(self, item: Item) -> Item:
        data = await self._request("POST", "/items", json=item_to_wire(item))
        return item_from_wire(data)

    async def persist_rating(self, item_id: str, rating: Rating, new_state: ItemState) -> Item:
        payload = {"rating": int(rating), "newState": state_to_wire(new_state)}
        data = await self._request(
            "POST", f"/items/{item_id}/ratings", json=payload, item_id=item_id
        )
        return item_from_wire(data)

    async def restore_state(self, item_id: str, prior_state: ItemState) -> Item:
        data = await self._request(
            "PUT", f"/items/{item_id}/state", json=state_to_wire(prior_state), item_id=item_id
        )
        return item_from_wire(data)

    async def set_suspended(self, item_id: str, suspended: bool) -> Item:
        data = await self._request(
            "PUT", f"/items/{item_id}/suspended", json={"suspended": suspended}, item_id=item_id
        )
        return item_from_wire(data)

    async def clear_events(self, item_id: str) -> None:
        await self._request("DELETE", f"/items/{item_id}/reviews", item_id=item_id)

    async def delete_item(self, item_id: str) -> None:
        await self._request("DELETE", f"/items/{item_id}", item_id=item_id)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        item_id: str | None = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.url, timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.request(method, path, params=params, json=json)
            if resp.status_code == 404 and item_id is not None:
                raise ItemNotFound(item_id)
            resp.raise_for_status()
            if resp.status_code == 204 or not resp.content:
                return {}
            return resp.json()
        except ItemNotFound:
            raise
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Item service call {method} {path} failed: {e}")
            raise StoreError(f"{method} {path} failed: {e}") from e
