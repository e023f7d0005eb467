"""Liveness probe.

Learn: Served at the root (/health), outside the API prefix, because
/api/v1/health is the authenticated health-tracking resource. It checks
nothing downstream: Supabase being slow must not get the pod restarted.
"""

from fastapi import APIRouter

from lifeboard.schemas.envelope import utc_timestamp

router = APIRouter()


@router.get("/health")
async def liveness():
    return {"status": "ok", "timestamp": utc_timestamp()}
