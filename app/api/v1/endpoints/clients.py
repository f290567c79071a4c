"""
Client Endpoints Module

CRUD endpoints for clients. Listings carry contract/project counts and planned
values, all computed on read.
"""
from typing import Any
from fastapi import APIRouter, Depends

from app.api import deps
from app.api.responses import ok
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.client import ClientCreate, ClientUpdate
from app.services.clients import ClientService
from app.services.reports import Reports

router = APIRouter()


@router.get("")
def list_clients(
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_CLIENTS)),
) -> Any:
    """
    Retrieve every client with its contract and project statistics.
    """
    return ok(clients=reports.clients())


@router.get("/{client_id}")
def read_client(
    client_id: int,
    summary: bool = False,
    contracts: bool = False,
    projects: bool = False,
    reports: Reports = Depends(deps.get_reports),
    current_user: User = Depends(deps.PermissionChecker(Permission.VIEW_CLIENTS)),
) -> Any:
    """
    Get one client.

    Args:
        client_id: ID of the client
        summary: Return the aggregate summary with billed totals
        contracts: Return the client's contracts instead of the client
        projects: Return the client's projects instead of the client

    Raises:
        NotFound: If the client doesn't exist
    """
    if summary:
        return ok(client=reports.client_summary(client_id))
    client = reports.client(client_id)
    if contracts:
        return ok(contracts=reports.contracts(client_id=client_id))
    if projects:
        return ok(projects=reports.projects(client_id=client_id))
    return ok(client=client)


@router.post("", status_code=201)
def create_client(
    client_in: ClientCreate,
    clients: ClientService = Depends(deps.get_client_service),
    current_user: User = Depends(deps.PermissionChecker(Permission.CREATE_CLIENTS)),
) -> Any:
    return ok(client=clients.create(client_in), message="Client created")


@router.put("/{client_id}")
def update_client(
    client_id: int,
    client_in: ClientUpdate,
    clients: ClientService = Depends(deps.get_client_service),
    current_user: User = Depends(deps.PermissionChecker(Permission.EDIT_CLIENTS)),
) -> Any:
    """
    Update a client. Only provided fields change; name and email can't be cleared.
    """
    return ok(client=clients.update(client_id, client_in), message="Client updated")


@router.delete("/{client_id}")
def delete_client(
    client_id: int,
    clients: ClientService = Depends(deps.get_client_service),
    current_user: User = Depends(deps.PermissionChecker(Permission.DELETE_CLIENTS)),
) -> Any:
    """
    Delete a client.

    Raises:
        HasDependents: If contracts or contract-linked projects still reference it
    """
    clients.delete(client_id)
    return ok(message="Client deleted")
