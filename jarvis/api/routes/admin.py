"""Admin dashboard endpoint.

Protected by HTTP basic auth; credentials come from the ``admin``
configuration section. With no credentials configured every request
is rejected.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from jarvis.api.dependencies import AdminDep, StoreDep
from jarvis.delivery.lifecycle import get_delivery_pool

router = APIRouter()


# ---- Response Models ----


class DispatcherStatus(BaseModel):
    """Delivery pool state."""

    running: bool
    pending_tasks: int
    delivered: int
    failed: int


class DashboardResponse(BaseModel):
    """Key and link counters."""

    keys_by_status: dict[str, int]
    keys_by_source: dict[str, int]
    pending_links: int
    delivery_log_entries: int
    dispatcher: DispatcherStatus


# ---- Endpoints ----


@router.get("/jarvis", response_model=DashboardResponse)
async def dashboard(admin: AdminDep, store: StoreDep) -> DashboardResponse:
    """Operational overview.

    **Status Codes**:
    - 200: Stats returned
    - 401: Missing or wrong credentials
    """
    by_status = await store.count_keys_by_status()
    by_source = await store.count_keys_by_source()
    pool = get_delivery_pool()

    return DashboardResponse(
        keys_by_status={status.value: count for status, count in by_status.items()},
        keys_by_source={source.value: count for source, count in by_source.items()},
        pending_links=await store.count_pending(),
        delivery_log_entries=await store.count_delivery_log(),
        dispatcher=DispatcherStatus(
            running=pool.is_running if pool else False,
            pending_tasks=pool.pending_count if pool else 0,
            delivered=pool.delivered_count if pool else 0,
            failed=pool.failed_count if pool else 0,
        ),
    )
