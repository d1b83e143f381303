from dataclasses import dataclass, field
from typing import Any, Dict


def _render_value(value: Any) -> str:
    if value is None or value == "":
        return "all"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class CacheKey:
    """
    Structured cache key: ``namespace:entity[:k=v...]``.

    Filters are rendered in sorted order so the same query always maps to the
    same key, and every key of an entity starts with the prefix returned by
    :meth:`family`, which is what write paths invalidate.
    """

    namespace: str
    entity: str
    filters: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [self.namespace, self.entity]
        parts.extend(f"{k}={_render_value(v)}" for k, v in sorted(self.filters.items()))
        return ":".join(parts)

    @property
    def key(self) -> str:
        return str(self)

    @staticmethod
    def family(namespace: str, entity: str) -> str:
        return f"{namespace}:{entity}*"


# Admin-facing views
DASHBOARD_SHARED = "dashboard:shared"
DASHBOARD_SUPER = "dashboard:super"

# Public views
SERVICES_PUBLIC = "services"
SERVICE_PUBLIC = "service"
BANNER_PUBLIC = "banner"
