"""Shared route dependencies."""

from fastapi import Depends

from lifeboard.auth.dependencies import CurrentIdentity, get_current_user, get_user_store
from lifeboard.services.resource_service import Resource, ResourceService
from lifeboard.store.client import SupabaseClient


def service_for(resource: Resource):
    """Dependency factory: a ResourceService bound to the caller and their store."""

    def _svc(
        identity: CurrentIdentity = Depends(get_current_user),
        store: SupabaseClient = Depends(get_user_store),
    ) -> ResourceService:
        return ResourceService(store, resource, identity.id)

    return _svc
