"""Resource service — owner-scoped CRUD against one Supabase table.

Learn: Every resource (tasks, goals, milestones, habits, habit logs,
health records, journal entries) is the same four operations. What
differs is captured in a Resource description:

- which table, and how lists are ordered
- an optional boolean flag that clients may send as true or "true"
- whether that flag goes back out as the string "true"/"false"
  (habits.active and habit_logs.completed only)
- client-side aliases for columns (milestone "order" ↔ "order_index")
- whether create is an upsert (one health record per user per day)

Ownership is enforced twice: the request runs with the caller's own
token (row-level security at the provider) *and* every query carries an
explicit user_id filter, with user_id force-set on insert.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from lifeboard.errors import ApiError
from lifeboard.store.client import StoreError, SupabaseClient

logger = structlog.get_logger()

OWNER_COLUMN = "user_id"

# Pseudo-fields added on the way out; never written back.
MIRROR_FIELDS = ("_id", "_uid")


@dataclass(frozen=True)
class Resource:
    table: str
    label: str
    plural: str
    order_by: Optional[str] = "created_at"
    ascending: bool = False
    flag: Optional[str] = None
    flag_as_string: bool = False
    aliases: dict[str, str] = field(default_factory=dict)
    create_defaults: dict[str, Any] = field(default_factory=dict)
    upsert_on: Optional[str] = None

    @property
    def title(self) -> str:
        return self.label[:1].upper() + self.label[1:]


def coerce_flag(value: Any) -> bool:
    """Only a real True or the exact string "true" count as true."""
    return value is True or value == "true"


def to_item(resource: Resource, row: dict[str, Any]) -> dict[str, Any]:
    """Reshape a provider row into the client item."""
    item: dict[str, Any] = {
        "_id": row.get("id"),
        "_uid": row.get(OWNER_COLUMN),
    }
    for alias, column in resource.aliases.items():
        item[alias] = row.get(column)
    item.update(row)
    if resource.flag and resource.flag_as_string:
        item[resource.flag] = "true" if row.get(resource.flag) else "false"
    return item


def prepare_insert(resource: Resource, body: dict[str, Any], user_id: str) -> dict[str, Any]:
    data = {k: v for k, v in body.items() if k not in MIRROR_FIELDS}

    for alias, column in resource.aliases.items():
        value = data.pop(alias, None) or data.get(column) or resource.create_defaults.get(column)
        if value is not None:
            data[column] = value

    if resource.flag:
        data[resource.flag] = coerce_flag(data.get(resource.flag))

    data[OWNER_COLUMN] = user_id
    return data


def prepare_update(resource: Resource, body: dict[str, Any]) -> dict[str, Any]:
    data = {
        k: v
        for k, v in body.items()
        if k not in MIRROR_FIELDS and k not in ("id", OWNER_COLUMN)
    }

    for alias, column in resource.aliases.items():
        if alias in data:
            data[column] = data.pop(alias)

    if resource.flag and resource.flag in data:
        data[resource.flag] = coerce_flag(data[resource.flag])

    return data


class ResourceService:
    """CRUD for one resource, acting as one user."""

    def __init__(self, store: SupabaseClient, resource: Resource, user_id: str):
        self.store = store
        self.resource = resource
        self.user_id = user_id

    def _owned(self, **filters: Any) -> dict[str, Any]:
        # Owner filter goes last so callers can never override it.
        return {**filters, OWNER_COLUMN: self.user_id}

    def _fail(self, action: str, code: str, message: str, error: StoreError, **context: Any) -> ApiError:
        logger.error(
            f"{self.resource.table}.{action}_failed",
            user_id=self.user_id,
            error=error.message,
            status=error.status_code,
            provider_code=error.code,
            **context,
        )
        return ApiError(code, message, status_code=500)

    # ─── List ────────────────────────────────────────────

    async def list_items(
        self,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        ascending: Optional[bool] = None,
    ) -> list[dict[str, Any]]:
        """All of the caller's rows, ordered per resource unless overridden."""
        r = self.resource
        try:
            rows = await self.store.select(
                r.table,
                filters=self._owned(**(filters or {})),
                order=order_by or r.order_by,
                ascending=r.ascending if ascending is None else ascending,
            )
        except StoreError as e:
            raise self._fail("fetch", "FETCH_FAILED", f"Failed to fetch {r.plural}", e)
        return [to_item(r, row) for row in rows]

    # ─── Create ──────────────────────────────────────────

    async def create_item(self, body: dict[str, Any]) -> dict[str, Any]:
        r = self.resource
        data = prepare_insert(r, body, self.user_id)
        try:
            row = await self.store.insert(r.table, data, on_conflict=r.upsert_on)
        except StoreError as e:
            raise self._fail("create", "CREATE_FAILED", f"Failed to create {r.label}", e)
        logger.info(f"{r.table}.created", user_id=self.user_id, row_id=row.get("id"))
        return to_item(r, row)

    # ─── Update ──────────────────────────────────────────

    async def update_item(self, row_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """Update one owned row. 404 when the id is unknown or not the caller's.

        Learn: The provider can't tell "no such row" from "someone else's
        row" — both are an empty result under the owner filter — and
        neither can we. Both are reported as NOT_FOUND so the response
        never confirms that another user's id exists.
        """
        r = self.resource
        data = prepare_update(r, body)
        try:
            rows = await self.store.update(r.table, data, filters=self._owned(id=row_id))
        except StoreError as e:
            raise self._fail("update", "UPDATE_FAILED", f"Failed to update {r.label}", e, row_id=row_id)

        if not rows:
            raise ApiError("NOT_FOUND", f"{r.title} not found", status_code=404)
        return to_item(r, rows[0])

    # ─── Delete ──────────────────────────────────────────

    async def delete_item(self, row_id: str) -> str:
        """Delete one owned row. Idempotent: deleting nothing still succeeds."""
        r = self.resource
        try:
            await self.store.delete(r.table, filters=self._owned(id=row_id))
        except StoreError as e:
            raise self._fail("delete", "DELETE_FAILED", f"Failed to delete {r.label}", e, row_id=row_id)
        return f"{r.title} deleted successfully"
