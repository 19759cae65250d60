"""REST gateway speaking PostgREST conventions over httpx."""

import json
import logging
import time
from decimal import Decimal
from typing import Any, Optional

import httpx

from smartspend.domain.errors import GatewayError, gateway_failure
from smartspend.gateway.base import Gateway, Row

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)
REST_PREFIX = "/rest/v1"


def _encode_json(payload: Any) -> bytes:
    """Serialize a payload, sending Decimals as strings so no precision is lost."""

    def default(value: Any) -> Any:
        if isinstance(value, Decimal):
            return str(value)
        raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

    return json.dumps(payload, default=default).encode("utf-8")


class RestGateway(Gateway):
    """Gateway for a hosted relational backend exposed as a REST API.

    Rows are addressed with PostgREST filters (`?user_id=eq.X`,
    `?order=date.desc`). The store sets no timeout of its own; the httpx
    timeout here is the only one.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: Optional[str] = None,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._timeout = timeout
        self._transport = transport

    def set_access_token(self, access_token: Optional[str]) -> None:
        """Swap the bearer token after a sign-in or sign-out."""
        self._access_token = access_token

    def _headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def _url(self, table: str) -> str:
        return f"{self.base_url}{REST_PREFIX}/{table}"

    async def _request(
        self,
        method: str,
        table: str,
        operation: str,
        *,
        params: Optional[dict[str, str]] = None,
        payload: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        start_time = time.perf_counter()
        content = _encode_json(payload) if payload is not None else None
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    self._url(table),
                    params=params,
                    content=content,
                    headers=self._headers(headers),
                )
            response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as exc:
            logger.warning(
                "gateway_request_failed",
                extra={"method": method, "table": table, "error": str(exc)},
            )
            raise GatewayError(gateway_failure(operation, table, exc), table=table, operation=operation) from exc

        logger.debug(
            "gateway_request_succeeded",
            extra={
                "method": method,
                "table": table,
                "status_code": response.status_code,
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )
        return response

    async def select(
        self, table: str, owner_id: str, order_by: str, descending: bool = True
    ) -> list[Row]:
        """Return all rows of table owned by owner_id, ordered by a column."""
        direction = "desc" if descending else "asc"
        response = await self._request(
            "GET",
            table,
            "select",
            params={"select": "*", "user_id": f"eq.{owner_id}", "order": f"{order_by}.{direction}"},
        )
        return list(response.json())

    async def insert(self, table: str, row: Row) -> Row:
        """Insert a row and return the stored representation."""
        response = await self._request(
            "POST",
            table,
            "insert",
            payload=row,
            headers={"Prefer": "return=representation"},
        )
        body = response.json()
        if isinstance(body, list):
            if not body:
                raise GatewayError(gateway_failure("insert", table, "empty response"), table=table, operation="insert")
            return body[0]
        return body

    async def update(self, table: str, owner_id: str, row_id: str, values: Row) -> None:
        """Apply a partial update to owner_id's row with the given id."""
        await self._request(
            "PATCH", table, "update", params=self._row_filter(owner_id, row_id), payload=values
        )

    async def delete(self, table: str, owner_id: str, row_id: str) -> None:
        """Delete owner_id's row with the given id."""
        await self._request("DELETE", table, "delete", params=self._row_filter(owner_id, row_id))

    @staticmethod
    def _row_filter(owner_id: str, row_id: str) -> dict[str, str]:
        return {"id": f"eq.{row_id}", "user_id": f"eq.{owner_id}"}
