"""Goal and Milestone API routes.

Milestones live under /goals/milestones and are registered before the
/goals/{goal_id} routes so "milestones" is never read as a goal id.
Clients send and receive a milestone's position as "order"; the table
column is order_index.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from lifeboard.api.deps import service_for
from lifeboard.schemas.envelope import success_response
from lifeboard.services.resource_service import ResourceService
from lifeboard.services.resources import GOALS, MILESTONES

router = APIRouter(prefix="/goals")

_goal_svc = service_for(GOALS)
_milestone_svc = service_for(MILESTONES)


# ═══════════════════════════════════════════════════════════
# Milestones
# ═══════════════════════════════════════════════════════════


@router.get("/milestones")
async def list_milestones(request: Request, svc: ResourceService = Depends(_milestone_svc)):
    """List the caller's milestones in display order."""
    return success_response(request, {"items": await svc.list_items()})


@router.post("/milestones", status_code=201)
async def create_milestone(
    request: Request,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_milestone_svc),
):
    item = await svc.create_item(body)
    return success_response(request, {"item": item}, status_code=201)


@router.put("/milestones/{milestone_id}")
async def update_milestone(
    request: Request,
    milestone_id: str,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_milestone_svc),
):
    item = await svc.update_item(milestone_id, body)
    return success_response(request, {"item": item})


@router.delete("/milestones/{milestone_id}")
async def delete_milestone(
    request: Request,
    milestone_id: str,
    svc: ResourceService = Depends(_milestone_svc),
):
    return success_response(request, {"message": await svc.delete_item(milestone_id)})


# ═══════════════════════════════════════════════════════════
# Goals
# ═══════════════════════════════════════════════════════════


@router.get("")
async def list_goals(request: Request, svc: ResourceService = Depends(_goal_svc)):
    """List the caller's goals, newest first."""
    return success_response(request, {"items": await svc.list_items()})


@router.post("", status_code=201)
async def create_goal(
    request: Request,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_goal_svc),
):
    item = await svc.create_item(body)
    return success_response(request, {"item": item}, status_code=201)


@router.put("/{goal_id}")
async def update_goal(
    request: Request,
    goal_id: str,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_goal_svc),
):
    item = await svc.update_item(goal_id, body)
    return success_response(request, {"item": item})


@router.delete("/{goal_id}")
async def delete_goal(
    request: Request,
    goal_id: str,
    svc: ResourceService = Depends(_goal_svc),
):
    return success_response(request, {"message": await svc.delete_item(goal_id)})
