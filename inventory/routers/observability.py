from __future__ import annotations

import os
import sys
import time
import platform
from typing import Any, Dict

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from inventory.core import metrics
from inventory.core.settings import settings

router = APIRouter(tags=["observability"])

APP_STARTED_TS = int(time.time())


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics() -> Response:
    """Expoziție Prometheus (text format) pentru registry-ul aplicației."""
    return Response(content=generate_latest(metrics.REGISTRY), media_type=CONTENT_TYPE_LATEST)


@router.get("/observability/summary")
def obs_summary() -> Dict[str, Any]:
    return {
        "app_version": settings.APP_VERSION,
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "pid": os.getpid(),
        "started_at": APP_STARTED_TS,
        "uptime_s": round(time.time() - APP_STARTED_TS, 3),
        "products": metrics.mutation_counts(),
        "env": {
            "root_path": settings.ROOT_PATH or "",
            "log_level": settings.LOG_LEVEL,
        },
    }
