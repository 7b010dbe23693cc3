# tests/test_health.py
from __future__ import annotations

import time
from typing import Any, Dict

import httpx
import pytest

# Latență maximă acceptată pentru /health (secunde)
MAX_HEALTH_LATENCY = 1.5


# --- Utilitare ----------------------------------------------------------------
def _dump_response(r: httpx.Response) -> str:
    """Diagnostic scurt pentru mesaje de aserție."""
    try:
        j = r.json()
    except Exception:
        j = None
    snippet = (r.text or "")[:400].replace("\n", "\\n")
    return f"status={r.status_code} {r.request.method} {r.request.url} json={j!r} text='{snippet}...'"


def _is_json(r: httpx.Response) -> bool:
    return r.headers.get("content-type", "").lower().startswith("application/json")


def _get_json(r: httpx.Response) -> Dict[str, Any]:
    assert _is_json(r), f"unexpected content-type: {r.headers.get('content-type')} | {_dump_response(r)}"
    return r.json()


# --- Teste --------------------------------------------------------------------
@pytest.mark.timeout(5)
def test_health_ok(client: httpx.Client):
    t0 = time.perf_counter()
    r = client.get("/health")
    dt = time.perf_counter() - t0

    assert r.status_code == 200, _dump_response(r)
    assert dt <= MAX_HEALTH_LATENCY, f"/health too slow: {dt:.3f}s > {MAX_HEALTH_LATENCY:.3f}s"
    assert _get_json(r).get("status") == "ok"


@pytest.mark.timeout(5)
def test_health_db_and_uptime(client: httpx.Client):
    r = client.get("/health/db")
    assert r.status_code == 200, _dump_response(r)
    assert _get_json(r) == {"status": "ok", "db": "up"}

    r = client.get("/health/uptime")
    assert r.status_code == 200, _dump_response(r)
    body = _get_json(r)
    assert body["uptime_seconds"] >= 0
    assert isinstance(body["started_at"], int)


@pytest.mark.timeout(5)
def test_root_and_version(client: httpx.Client):
    body = _get_json(client.get("/"))
    assert body["name"] and body["version"]
    body = _get_json(client.get("/__version__"))
    assert body["app_version"] == client.get("/").json()["version"]


@pytest.mark.timeout(5)
def test_unknown_route_is_json_404(client: httpx.Client):
    r = client.get("/does-not-exist")
    assert r.status_code == 404, _dump_response(r)
    assert _get_json(r)["detail"]["message"] == "Not Found"


@pytest.mark.timeout(5)
def test_metrics_expose_mutation_counters(client: httpx.Client):
    r = client.post("/api/products", json={"name": "Metered", "price": "1.00", "quantity": 1})
    assert r.status_code == 201, _dump_response(r)

    r = client.get("/metrics")
    assert r.status_code == 200, _dump_response(r)
    text = r.text
    for name in ("products_created_total", "products_updated_total", "products_deleted_total"):
        assert name in text, text[:500]
    assert "http_request_duration_seconds" in text


@pytest.mark.timeout(5)
def test_observability_summary_counts(client: httpx.Client):
    before = _get_json(client.get("/observability/summary"))["products"]
    r = client.post("/api/products", json={"name": "Summed", "price": "2.00", "quantity": 2})
    assert r.status_code == 201, _dump_response(r)
    pid = r.json()["id"]
    assert client.delete(f"/api/products/{pid}").status_code == 204

    after = _get_json(client.get("/observability/summary"))["products"]
    assert after["created"] == before["created"] + 1
    assert after["deleted"] == before["deleted"] + 1
    assert after["updated"] == before["updated"]
