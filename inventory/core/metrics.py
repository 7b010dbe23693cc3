from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram

# Registry dedicat: nu amestecăm cu colectorii default de proces/platformă
REGISTRY = CollectorRegistry(auto_describe=True)

PRODUCTS_CREATED = Counter(
    "products_created",
    "Total number of products created",
    registry=REGISTRY,
)
PRODUCTS_UPDATED = Counter(
    "products_updated",
    "Total number of products updated",
    registry=REGISTRY,
)
PRODUCTS_DELETED = Counter(
    "products_deleted",
    "Total number of products deleted",
    registry=REGISTRY,
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Request latency",
    ["method", "route"],
    registry=REGISTRY,
)


def counter_value(name: str) -> float:
    """Valoarea curentă pentru `<name>_total` (0.0 dacă lipsește)."""
    return REGISTRY.get_sample_value(f"{name}_total") or 0.0


def mutation_counts() -> dict[str, int]:
    return {
        "created": int(counter_value("products_created")),
        "updated": int(counter_value("products_updated")),
        "deleted": int(counter_value("products_deleted")),
    }
