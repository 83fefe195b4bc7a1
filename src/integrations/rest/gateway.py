"""
PostgREST-style table gateway and session lookup for the hosted backend.
"""

import logging
from typing import Any, Optional, Sequence

from src.integrations.base import Ordering, Row, SessionUser
from src.integrations.rest.client import RestClient

logger = logging.getLogger(__name__)

RETURN_REPRESENTATION = "return=representation"


def format_filter_value(value: Any) -> str:
    """Render an equality filter (column=eq.value / column=is.null)."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def build_params(filters: Row, order_by: Ordering = ()) -> list[tuple[str, str]]:
    params = [(column, format_filter_value(value)) for column, value in filters.items()]
    if order_by:
        order = ",".join(
            f"{column}.desc.nullslast" if descending else f"{column}.asc"
            for column, descending in order_by
        )
        params.append(("order", order))
    return params


class RestTableGateway:
    """TableGateway over /rest/v1/<table>."""

    def __init__(self, client: RestClient, table: str):
        self._client = client
        self.table = table

    async def select(self, filters: Row, order_by: Ordering = ()) -> list[Row]:
        params = [("select", "*")] + build_params(filters, order_by)
        rows = await self._client.table_request("GET", self.table, params=params)
        logger.debug(f"Selected {len(rows or [])} rows from {self.table}")
        return list(rows or [])

    async def insert(self, rows: Sequence[Row]) -> list[Row]:
        stored = await self._client.table_request(
            "POST",
            self.table,
            json=list(rows),
            prefer=RETURN_REPRESENTATION,
        )
        return list(stored or [])

    async def update(self, filters: Row, values: Row) -> list[Row]:
        stored = await self._client.table_request(
            "PATCH",
            self.table,
            params=build_params(filters),
            json=values,
            prefer=RETURN_REPRESENTATION,
        )
        return list(stored or [])

    async def delete(self, filters: Row) -> int:
        removed = await self._client.table_request(
            "DELETE",
            self.table,
            params=build_params(filters),
            prefer=RETURN_REPRESENTATION,
        )
        return len(removed or [])


class RestAuthProvider:
    """Reads the session user from /auth/v1/user."""

    def __init__(self, client: RestClient):
        self._client = client

    async def get_user(self) -> Optional[SessionUser]:
        record = await self._client.get_user()
        if not record or not record.get("id"):
            return None
        return SessionUser(id=str(record["id"]), email=record.get("email"))
