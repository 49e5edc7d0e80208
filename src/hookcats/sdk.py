"""Developer-facing entry points: one object wiring client, team context and services."""

from __future__ import annotations

from typing import Any

import httpx

from .client import HookCatsClient
from .config import ClientSettings, load_settings, normalize_base_url, save_profile
from .context import ApiTeamContext, ScopeSelection, TeamContext
from .core import HistoryService, ResourceService, RouteService, ScopeProber, validate_route_endpoints
from .scopes import Delivery, ResourceKind, Route, Scope, ScopedResource


class HookCats:
    """High-level async interface.

    usage:

    async with HookCats.connect() as hc:
        scope = await hc.resolve_scope("sources", 42)
        route = await hc.create_route(source_id=42, target_id=42)
    """

    def __init__(
        self,
        client: HookCatsClient,
        context: TeamContext | None = None,
        *,
        parallel_endpoint_resolution: bool | None = None,
    ):
        self.client = client
        self.context = context if context is not None else ApiTeamContext(client)
        if parallel_endpoint_resolution is None:
            parallel_endpoint_resolution = client.settings.parallel_endpoint_resolution
        self.prober = ScopeProber(client, self.context)
        self.routes = RouteService(
            client, self.context, parallel_endpoint_resolution=parallel_endpoint_resolution
        )
        self.resources = ResourceService(client, self.context)
        self.history = HistoryService(client, self.context)

    @classmethod
    def connect(
        cls,
        settings: ClientSettings | None = None,
        *,
        selection: ScopeSelection | None = None,
        persist_selection: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        **overrides: Any,
    ) -> "HookCats":
        settings = settings or load_settings(**overrides)
        client = HookCatsClient(settings, transport=transport)
        context = ApiTeamContext(client, selection, persist=persist_selection)
        return cls(client, context)

    @staticmethod
    def login(*, api_key: str, base_url: str) -> dict[str, str]:
        token = (api_key or "").strip()
        if not token:
            raise ValueError("api_key is required")
        resolved = normalize_base_url(base_url)
        save_profile({"api_key": token, "base_url": resolved})
        return {"base_url": resolved}

    async def __aenter__(self) -> "HookCats":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def resolve_scope(self, kind: ResourceKind | str, resource_id: int) -> Scope:
        return await self.prober.resolve_scope(kind, resource_id)

    async def locate(self, kind: ResourceKind | str, resource_id: int) -> ScopedResource:
        return await self.prober.locate(kind, resource_id)

    @staticmethod
    def validate_route_endpoints(source_scope: Scope, target_scope: Scope) -> Scope:
        return validate_route_endpoints(source_scope, target_scope)

    async def create_route(self, source_id: int, target_id: int, template: str | None = None) -> Route:
        return await self.routes.create_route(source_id, target_id, template)

    async def retry_delivery(self, delivery_id: int) -> Delivery:
        return await self.history.retry_delivery(delivery_id)
