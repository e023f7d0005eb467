"""Journal entry API routes."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from lifeboard.api.deps import service_for
from lifeboard.schemas.envelope import success_response
from lifeboard.services.resource_service import ResourceService
from lifeboard.services.resources import JOURNAL_ENTRIES

router = APIRouter(prefix="/journal")

_entry_svc = service_for(JOURNAL_ENTRIES)


@router.get("")
async def list_entries(request: Request, svc: ResourceService = Depends(_entry_svc)):
    return success_response(request, {"items": await svc.list_items()})


@router.post("", status_code=201)
async def create_entry(
    request: Request,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_entry_svc),
):
    item = await svc.create_item(body)
    return success_response(request, {"item": item}, status_code=201)


@router.put("/{entry_id}")
async def update_entry(
    request: Request,
    entry_id: str,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_entry_svc),
):
    item = await svc.update_item(entry_id, body)
    return success_response(request, {"item": item})


@router.delete("/{entry_id}")
async def delete_entry(
    request: Request,
    entry_id: str,
    svc: ResourceService = Depends(_entry_svc),
):
    return success_response(request, {"message": await svc.delete_item(entry_id)})
