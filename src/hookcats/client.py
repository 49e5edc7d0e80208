"""Async HTTP client for the HookCats REST API."""

from __future__ import annotations

from typing import Any

import httpx

from .config import ClientSettings
from .errors import ApiError
from .logging_config import StructuredLogger
from .scopes import ResourceKind, Scope, ScopedResource, TeamMembership

logger = StructuredLogger(__name__)

# Largest page the server accepts for events and deliveries
HISTORY_PAGE_LIMIT = 1000


def _trim_text(text: str, limit: int = 220) -> str:
    clean = " ".join((text or "").split())
    if len(clean) <= limit:
        return clean
    return clean[: limit - 3] + "..."


def _materialize(kind: ResourceKind, scope: Scope, payload: Any, *, method: str, path: str) -> ScopedResource:
    try:
        return ScopedResource.from_payload(kind, scope, payload)
    except ValueError as exc:
        raise ApiError(f"Malformed {kind.label} in response: {exc}", method=method, path=path) from exc


def collection_path(kind: ResourceKind, scope: Scope) -> str:
    return f"{scope.path_prefix()}/{kind.value}"


def item_path(kind: ResourceKind, scope: Scope, resource_id: int) -> str:
    return f"{collection_path(kind, scope)}/{int(resource_id)}"


class HookCatsClient:
    """Resource collection API plus the membership lookup, over one pooled connection."""

    def __init__(self, settings: ClientSettings, *, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            follow_redirects=False,
            transport=transport,
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )

    async def __aenter__(self) -> "HookCatsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.settings.api_key:
            headers["X-API-Key"] = self.settings.api_key
        elif self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and unwrap the ``{"success": ..., "data": ...}`` envelope."""
        method = method.upper()
        query = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            response = await self._client.request(
                method, path, headers=self._headers(), json=json_body, params=query or None
            )
        except httpx.HTTPError as exc:
            raise ApiError(f"Request error: {exc}", method=method, path=path) from exc

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = None

        if response.status_code >= 400 or not isinstance(body, dict):
            detail = None
            if isinstance(body, dict):
                detail = body.get("error") or body.get("message") or body.get("detail")
            if isinstance(detail, dict):
                detail = detail.get("message") or str(detail)
            if not detail:
                detail = _trim_text(response.text) or f"HTTP {response.status_code}"
            logger.debug("API request failed", method=method, path=path, status_code=response.status_code)
            raise ApiError(str(detail), status_code=response.status_code, method=method, path=path)

        if body.get("success") is False:
            detail = body.get("error") or body.get("message") or "request was not successful"
            raise ApiError(str(detail), status_code=response.status_code, method=method, path=path)

        return body.get("data", body)

    # --- Membership ---

    async def list_user_teams(self) -> list[TeamMembership]:
        data = await self.request("GET", "/user/teams")
        if not isinstance(data, list):
            raise ApiError("Expected a list of teams", method="GET", path="/user/teams")
        try:
            return [TeamMembership.from_dict(item) for item in data]
        except (AttributeError, ValueError) as exc:
            raise ApiError(f"Malformed team in response: {exc}", method="GET", path="/user/teams") from exc

    # --- Resource collection API ---

    async def list_scoped_resources(
        self, kind: ResourceKind, scope: Scope, params: dict[str, Any] | None = None
    ) -> list[ScopedResource]:
        path = collection_path(kind, scope)
        if params is None and kind.is_history:
            # unfiltered history listings back lookups by id
            params = {"limit": HISTORY_PAGE_LIMIT}
        data = await self.request("GET", path, params=params)
        if not isinstance(data, list):
            raise ApiError(f"Expected a list of {kind.value}", method="GET", path=path)
        return [_materialize(kind, scope, item, method="GET", path=path) for item in data]

    async def get_scoped_resource(self, kind: ResourceKind, scope: Scope, resource_id: int) -> ScopedResource:
        path = item_path(kind, scope, resource_id)
        data = await self.request("GET", path)
        return _materialize(kind, scope, data, method="GET", path=path)

    async def create_scoped_resource(
        self, kind: ResourceKind, scope: Scope, payload: dict[str, Any]
    ) -> ScopedResource:
        path = collection_path(kind, scope)
        data = await self.request("POST", path, json_body=dict(payload))
        return _materialize(kind, scope, data, method="POST", path=path)

    async def update_scoped_resource(
        self, kind: ResourceKind, scope: Scope, resource_id: int, payload: dict[str, Any]
    ) -> ScopedResource:
        path = item_path(kind, scope, resource_id)
        data = await self.request("PUT", path, json_body=dict(payload))
        if isinstance(data, dict) and "id" not in data:
            data = {**data, "id": int(resource_id)}
        return _materialize(kind, scope, data, method="PUT", path=path)

    async def delete_scoped_resource(self, kind: ResourceKind, scope: Scope, resource_id: int) -> None:
        await self.request("DELETE", item_path(kind, scope, resource_id))

    async def check_source_deletion(self, scope: Scope, source_id: int) -> dict[str, Any]:
        path = f"{item_path(ResourceKind.SOURCE, scope, source_id)}/delete-check"
        data = await self.request("GET", path)
        if not isinstance(data, dict):
            raise ApiError("Expected a delete-check object", method="GET", path=path)
        return data

    async def perform_scoped_action(
        self, kind: ResourceKind, scope: Scope, resource_id: int, action: str
    ) -> dict[str, Any]:
        """``POST {scope}/{kind}/{id}/{action}``, e.g. a delivery retry."""
        path = f"{item_path(kind, scope, resource_id)}/{action}"
        data = await self.request("POST", path, json_body={})
        return data if isinstance(data, dict) else {"result": data}

    async def send_test_delivery(self, target_id: int) -> dict[str, Any]:
        path = f"/test-delivery/{int(target_id)}"
        data = await self.request("POST", path, json_body={})
        return data if isinstance(data, dict) else {"result": data}
