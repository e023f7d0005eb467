"""Task API routes.

Learn: Routes translate HTTP into ResourceService calls and wrap the
result in the response envelope. All the interesting rules (owner
scoping, stripping _id/_uid, 404 on someone else's row) live in the
service layer.

Key patterns:
- Query params for list options (sort column, direction, completed filter)
- PUT replaces only the fields sent (the provider PATCHes)
- DELETE is idempotent
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from lifeboard.api.deps import service_for
from lifeboard.schemas.envelope import success_response
from lifeboard.services.resource_service import ResourceService
from lifeboard.services.resources import TASKS

router = APIRouter(prefix="/tasks")

_task_svc = service_for(TASKS)


@router.get("")
async def list_tasks(
    request: Request,
    sort: str = Query(
        "created_at",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Column to sort by",
    ),
    order: str = Query("desc", pattern=r"^(asc|desc)$"),
    completed: Optional[bool] = Query(None, description="Filter by completion"),
    svc: ResourceService = Depends(_task_svc),
):
    """List the caller's tasks."""
    filters = {} if completed is None else {"completed": completed}
    items = await svc.list_items(
        filters=filters,
        order_by=sort,
        ascending=order == "asc",
    )
    return success_response(request, {"items": items})


@router.post("", status_code=201)
async def create_task(
    request: Request,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_task_svc),
):
    item = await svc.create_item(body)
    return success_response(request, {"item": item}, status_code=201)


@router.put("/{task_id}")
async def update_task(
    request: Request,
    task_id: str,
    body: dict[str, Any] = Body(...),
    svc: ResourceService = Depends(_task_svc),
):
    item = await svc.update_item(task_id, body)
    return success_response(request, {"item": item})


@router.delete("/{task_id}")
async def delete_task(
    request: Request,
    task_id: str,
    svc: ResourceService = Depends(_task_svc),
):
    message = await svc.delete_item(task_id)
    return success_response(request, {"message": message})
