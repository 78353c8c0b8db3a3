"""Per-operation route configuration for a collection's generated API."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RouteOperation(str, Enum):
    """The five logical operations every collection exposes."""

    GET_ALL = "GET_ALL"
    GET_ONE = "GET_ONE"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def http_method(self) -> str:
        return "GET" if self in (RouteOperation.GET_ALL, RouteOperation.GET_ONE) else self.value

    @property
    def targets_item(self) -> bool:
        """Whether the route path ends in ``/{id}``."""
        return self in (RouteOperation.GET_ONE, RouteOperation.PUT, RouteOperation.DELETE)

    @property
    def supports_populate(self) -> bool:
        return self in (RouteOperation.GET_ALL, RouteOperation.GET_ONE)


@dataclass
class RouteConfig:
    """Configuration of one operation.

    Attributes:
        enabled: Disabled routes answer 404 as if they did not exist.
        is_private: Private routes require ``api_key`` in the API key header.
        api_key: Key checked for private routes.
        custom_path: Path segment replacing the collection slug.
        populate_fields: Relation fields expanded when the request does not
            pass ``?populate=``.
    """

    enabled: bool = True
    is_private: bool = False
    api_key: str | None = None
    custom_path: str | None = None
    populate_fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"enabled": self.enabled, "isPrivate": self.is_private}
        if self.api_key:
            data["apiKey"] = self.api_key
        if self.custom_path:
            data["customPath"] = self.custom_path
        if self.populate_fields:
            data["populateFields"] = list(self.populate_fields)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RouteConfig":
        return cls(
            enabled=bool(data.get("enabled", True)),
            is_private=bool(data.get("isPrivate", False)),
            api_key=data.get("apiKey") or None,
            custom_path=data.get("customPath") or None,
            populate_fields=list(data.get("populateFields") or []),
        )


@dataclass
class RouteSettings:
    """Route configuration for all five operations.

    Operations without an explicit entry use the defaults: enabled, public,
    served at the collection slug.
    """

    routes: dict[RouteOperation, RouteConfig] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> "RouteSettings":
        return cls(routes={operation: RouteConfig() for operation in RouteOperation})

    def get(self, operation: RouteOperation) -> RouteConfig:
        return self.routes.get(operation) or RouteConfig()

    def with_route(self, operation: RouteOperation, config: RouteConfig) -> "RouteSettings":
        routes = {op: self.get(op) for op in RouteOperation}
        routes[operation] = config
        return RouteSettings(routes=routes)

    def to_dict(self) -> dict[str, Any]:
        return {operation.value: self.get(operation).to_dict() for operation in RouteOperation}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RouteSettings":
        if not data:
            return cls.defaults()
        routes = {}
        for operation in RouteOperation:
            config = data.get(operation.value)
            routes[operation] = RouteConfig.from_dict(config) if config else RouteConfig()
        return cls(routes=routes)
