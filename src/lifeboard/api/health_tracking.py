"""Daily health tracking API routes (mounted at /health under the API prefix).

Learn: One record per user per day. POST is an upsert on (user_id, date),
so logging water twice on the same day updates that day's row instead of
failing on the unique constraint.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from lifeboard.api.deps import service_for
from lifeboard.schemas.envelope import success_response
from lifeboard.services.resource_service import ResourceService
from lifeboard.services.resources import HEALTH_RECORDS

router = APIRouter(prefix="/health")

_health_svc = service_for(HEALTH_RECORDS)


@router.get("")
async def list_health_records(
    request: Request,
    date: Optional[str] = Query(None, description="Exact date, e.g. 2024-05-01"),
    svc: ResourceService = Depends(_health_svc),
):
    filters = {"date": date} if date else {}
    return success_response(request, {"items": await svc.list_items(filters=filters)})


@router.post("", status_code=201)
async def upsert_health_record(
    request: Request,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_health_svc),
):
    item = await svc.create_item(body)
    return success_response(request, {"item": item}, status_code=201)


@router.put("/{record_id}")
async def update_health_record(
    request: Request,
    record_id: str,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_health_svc),
):
    item = await svc.update_item(record_id, body)
    return success_response(request, {"item": item})


@router.delete("/{record_id}")
async def delete_health_record(
    request: Request,
    record_id: str,
    svc: ResourceService = Depends(_health_svc),
):
    return success_response(request, {"message": await svc.delete_item(record_id)})
