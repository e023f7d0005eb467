"""Habit and Habit Log API routes.

Learn: habits.active and habit_logs.completed are booleans in the table
but the mobile client reads them as the strings "true"/"false". Writes
accept either form; reads always return the string. ResourceService
handles both directions from the HABITS / HABIT_LOGS descriptions.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from lifeboard.api.deps import service_for
from lifeboard.schemas.envelope import success_response
from lifeboard.services.resource_service import ResourceService
from lifeboard.services.resources import HABIT_LOGS, HABITS

router = APIRouter(prefix="/habits")

_habit_svc = service_for(HABITS)
_log_svc = service_for(HABIT_LOGS)


# ═══════════════════════════════════════════════════════════
# Habit logs
# ═══════════════════════════════════════════════════════════


@router.get("/logs")
async def list_habit_logs(request: Request, svc: ResourceService = Depends(_log_svc)):
    """List the caller's habit check-ins, most recent date first."""
    return success_response(request, {"items": await svc.list_items()})


@router.post("/logs", status_code=201)
async def create_habit_log(
    request: Request,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_log_svc),
):
    item = await svc.create_item(body)
    return success_response(request, {"item": item}, status_code=201)


@router.put("/logs/{log_id}")
async def update_habit_log(
    request: Request,
    log_id: str,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_log_svc),
):
    item = await svc.update_item(log_id, body)
    return success_response(request, {"item": item})


@router.delete("/logs/{log_id}")
async def delete_habit_log(
    request: Request,
    log_id: str,
    svc: ResourceService = Depends(_log_svc),
):
    return success_response(request, {"message": await svc.delete_item(log_id)})


# ═══════════════════════════════════════════════════════════
# Habits
# ═══════════════════════════════════════════════════════════


@router.get("")
async def list_habits(request: Request, svc: ResourceService = Depends(_habit_svc)):
    return success_response(request, {"items": await svc.list_items()})


@router.post("", status_code=201)
async def create_habit(
    request: Request,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_habit_svc),
):
    item = await svc.create_item(body)
    return success_response(request, {"item": item}, status_code=201)


@router.put("/{habit_id}")
async def update_habit(
    request: Request,
    habit_id: str,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_habit_svc),
):
    item = await svc.update_item(habit_id, body)
    return success_response(request, {"item": item})


@router.delete("/{habit_id}")
async def delete_habit(
    request: Request,
    habit_id: str,
    svc: ResourceService = Depends(_habit_svc),
):
    return success_response(request, {"message": await svc.delete_item(habit_id)})
