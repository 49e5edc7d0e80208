"""Ownership scopes and the resource shapes that live inside them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Union


class ResourceKind(StrEnum):
    """Resource kinds reachable under a scope. The value is the collection path segment."""

    SOURCE = "sources"
    TARGET = "targets"
    ROUTE = "routes"
    EVENT = "events"
    DELIVERY = "deliveries"

    @classmethod
    def parse(cls, value: "ResourceKind | str") -> "ResourceKind":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        for kind in cls:
            if raw in (kind.value, kind.label, kind.name.lower()):
                return kind
        raise ValueError(f"Unknown resource kind: {value!r}")

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_endpoint(self) -> bool:
        return self in (ResourceKind.SOURCE, ResourceKind.TARGET)

    @property
    def is_history(self) -> bool:
        """Events and deliveries are written by the server, never by this client."""
        return self in (ResourceKind.EVENT, ResourceKind.DELIVERY)


_LABELS = {
    ResourceKind.SOURCE: "source",
    ResourceKind.TARGET: "target",
    ResourceKind.ROUTE: "route",
    ResourceKind.EVENT: "event",
    ResourceKind.DELIVERY: "delivery",
}


@dataclass(frozen=True)
class PersonalScope:
    kind: str = field(default="personal", init=False)

    def path_prefix(self) -> str:
        return "/personal"

    def to_dict(self) -> dict[str, Any]:
        return {"scope": "personal", "team_id": None}

    def __str__(self) -> str:
        return "personal"


@dataclass(frozen=True)
class TeamScope:
    team_id: int
    kind: str = field(default="team", init=False)

    def path_prefix(self) -> str:
        return f"/team/{self.team_id}"

    def to_dict(self) -> dict[str, Any]:
        return {"scope": "team", "team_id": self.team_id}

    def __str__(self) -> str:
        return f"team:{self.team_id}"


Scope = Union[PersonalScope, TeamScope]

PERSONAL = PersonalScope()


def team_scope(team_id: int | str) -> TeamScope:
    return TeamScope(team_id=require_id(team_id, "team_id"))


def parse_scope(value: "Scope | str | None", team_id: int | str | None = None) -> Scope:
    """Build a scope from loose input such as ``"personal"``, ``"team"`` + id or ``"team:7"``."""
    if isinstance(value, (PersonalScope, TeamScope)):
        return value
    raw = str(value or "").strip().lower()
    if raw.startswith("team:"):
        raw, team_id = "team", raw.split(":", 1)[1]
    if raw in ("", "personal"):
        if raw == "personal" and team_id not in (None, ""):
            raise ValueError("team_id must not be provided for the personal scope")
        return PERSONAL
    if raw == "team":
        if team_id in (None, ""):
            raise ValueError("team_id is required for the team scope")
        return team_scope(team_id)
    raise ValueError(f"Unknown scope: {value!r}")


def scope_from_dict(data: dict[str, Any]) -> Scope:
    return parse_scope(data.get("scope"), data.get("team_id"))


def require_id(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if parsed <= 0:
        raise ValueError(f"{name} must be >= 1")
    return parsed


@dataclass(frozen=True)
class ResourceRef:
    kind: ResourceKind
    id: int

    @classmethod
    def of(cls, kind: ResourceKind | str, resource_id: int | str) -> "ResourceRef":
        return cls(kind=ResourceKind.parse(kind), id=require_id(resource_id, "id"))

    def __str__(self) -> str:
        return f"{self.kind.label} {self.id}"


@dataclass(frozen=True)
class TeamMembership:
    id: int
    name: str = ""
    role: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeamMembership":
        team_id = data.get("id", data.get("team_id"))
        return cls(
            id=require_id(team_id, "team id"),
            name=str(data.get("name") or ""),
            role=data.get("role"),
        )

    @property
    def scope(self) -> TeamScope:
        return TeamScope(team_id=self.id)


@dataclass(frozen=True)
class ScopedResource:
    """A resource as listed by the API, with the scope that listed it made explicit."""

    kind: ResourceKind
    id: int
    scope: Scope
    data: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, kind: ResourceKind, scope: Scope, payload: dict[str, Any]) -> "ScopedResource":
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a {kind.label} object, got {type(payload).__name__}")
        return cls(kind=kind, id=require_id(payload.get("id"), "id"), scope=scope, data=dict(payload))

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(kind=self.kind, id=self.id)

    @property
    def name(self) -> str:
        return str(self.data.get("name") or "")

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class Route:
    id: int
    source_id: int
    target_id: int
    scope: Scope
    template: str | None = None

    @classmethod
    def from_resource(cls, resource: ScopedResource) -> "Route":
        if resource.kind is not ResourceKind.ROUTE:
            raise ValueError(f"Expected a route, got a {resource.kind.label}")
        return cls(
            id=resource.id,
            source_id=require_id(resource.get("source_id"), "source_id"),
            target_id=require_id(resource.get("target_id"), "target_id"),
            scope=resource.scope,
            template=resource.get("message_template"),
        )


def route_payload(source_id: int, target_id: int, template: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "source_id": require_id(source_id, "source_id"),
        "target_id": require_id(target_id, "target_id"),
    }
    if template:
        payload["message_template"] = template
    return payload


DELIVERY_STATUSES = ("pending", "sent", "failed")
MAX_DELIVERY_ATTEMPTS = 3


@dataclass(frozen=True)
class Delivery:
    """One attempt record for pushing an event to a target."""

    id: int
    scope: Scope
    status: str
    attempts: int = 0
    target_id: int | None = None
    event_id: int | None = None
    last_error: str | None = None

    @classmethod
    def from_resource(cls, resource: ScopedResource) -> "Delivery":
        if resource.kind is not ResourceKind.DELIVERY:
            raise ValueError(f"Expected a delivery, got a {resource.kind.label}")
        return cls(
            id=resource.id,
            scope=resource.scope,
            status=str(resource.get("status") or "pending"),
            attempts=int(resource.get("attempts") or 0),
            target_id=resource.get("target_id"),
            event_id=resource.get("event_id"),
            last_error=resource.get("last_error"),
        )

    @property
    def retry_blocker(self) -> str | None:
        if self.status == "sent":
            return "it was already sent"
        if self.attempts >= MAX_DELIVERY_ATTEMPTS:
            return f"it reached the maximum of {MAX_DELIVERY_ATTEMPTS} attempts"
        return None
