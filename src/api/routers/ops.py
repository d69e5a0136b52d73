import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api import state
from api.dependencies import get_connectivity, get_task_store
from api.metrics import PENDING_CONFIRMATIONS
from integration.connectivity import ConnectivityChecker
from storage.task_store import TaskStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    store: TaskStore = Depends(get_task_store),
    checker: ConnectivityChecker = Depends(get_connectivity),
) -> dict:
    """Health check endpoint for container orchestration."""
    return {
        "status": "healthy",
        "tasks": len(store.list_tasks()),
        "conversations": len(state.conversations),
        "connectivity_check": "configured" if checker.check_url else "assumed",
    }


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    PENDING_CONFIRMATIONS.set(state.pending_confirmations())
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
