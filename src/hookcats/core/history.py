"""Events and deliveries: read by scope, retried by id after resolving where they live."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ..context import TeamContext
from ..errors import DeliveryRetryError
from ..logging_config import StructuredLogger
from ..scopes import DELIVERY_STATUSES, Delivery, ResourceKind, Scope, ScopedResource, require_id
from .dispatcher import MutationDispatcher
from .prober import ScopeProber

logger = StructuredLogger(__name__)

MAX_PAGE = 1000


def _page(limit: int | None, offset: int | None) -> dict[str, Any]:
    if limit is not None and not 1 <= int(limit) <= MAX_PAGE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE}")
    if offset is not None and int(offset) < 0:
        raise ValueError("offset cannot be negative")
    return {"limit": limit, "offset": offset}


class HistoryService:
    def __init__(self, api, context: TeamContext):
        self.api = api
        self.context = context
        self.prober = ScopeProber(api, context)
        self.dispatcher = MutationDispatcher(api)

    async def list_events(
        self,
        scope: Scope | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
        source_id: int | None = None,
        event_type: str | None = None,
    ) -> list[ScopedResource]:
        params = _page(limit, offset)
        if source_id is not None:
            params["source_id"] = require_id(source_id, "source_id")
        params["event_type"] = event_type or None
        scope = scope or self.context.get_current_scope()
        return await self.api.list_scoped_resources(ResourceKind.EVENT, scope, params)

    async def list_deliveries(
        self,
        scope: Scope | None = None,
        *,
        limit: int | None = None,
        offset: int | None = None,
        status: str | None = None,
        target_id: int | None = None,
    ) -> list[Delivery]:
        params = _page(limit, offset)
        if status is not None:
            if status not in DELIVERY_STATUSES:
                raise ValueError(f"status must be one of: {', '.join(DELIVERY_STATUSES)}")
            params["status"] = status
        if target_id is not None:
            params["target_id"] = require_id(target_id, "target_id")
        scope = scope or self.context.get_current_scope()
        resources = await self.api.list_scoped_resources(ResourceKind.DELIVERY, scope, params)
        return [Delivery.from_resource(resource) for resource in resources]

    async def get_delivery(self, delivery_id: int) -> Delivery:
        return Delivery.from_resource(await self.prober.locate(ResourceKind.DELIVERY, delivery_id))

    async def retry_delivery(self, delivery_id: int) -> Delivery:
        """Resend a pending or failed delivery from the scope it was recorded in.

        Deliveries already sent, or out of attempts, are refused before any
        request is made; the server enforces the same rules.
        """
        delivery = await self.get_delivery(delivery_id)
        blocker = delivery.retry_blocker
        if blocker:
            raise DeliveryRetryError(delivery.id, blocker)
        result = await self.dispatcher.act_in_scope(ResourceKind.DELIVERY, delivery.scope, delivery.id, "retry")
        retried = replace(
            delivery,
            status=str(result.get("status") or "sent"),
            attempts=int(result.get("attempts") or delivery.attempts + 1),
            last_error=None,
        )
        logger.info("Delivery retried", id=retried.id, scope=str(retried.scope), status=retried.status)
        return retried
