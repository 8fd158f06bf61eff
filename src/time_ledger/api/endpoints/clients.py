"""Client endpoints.

This module provides owner-scoped CRUD operations for clients.
"""

from fastapi import APIRouter, Depends, Query, status  # type: ignore[import-untyped]

from time_ledger.api.auth import get_current_user_id
from time_ledger.api.dependencies import get_clients
from time_ledger.api.models import (
    ClientResponse,
    CreateClientRequest,
    Envelope,
    MessageResponse,
    Page,
    UpdateClientRequest,
)
from time_ledger.core.clients import ClientManager

router = APIRouter()


@router.get("", response_model=Envelope[Page[ClientResponse]])
async def list_clients(
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    clients: ClientManager = Depends(get_clients),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[Page[ClientResponse]]:
    """List the current user's clients.

    Example:
        >>> GET /api/v1/clients?page=1
    """
    items = [ClientResponse.from_client(c) for c in clients.list_clients(user_id)]
    return Envelope[Page[ClientResponse]](
        message="Clients retrieved successfully",
        data=Page[ClientResponse].build(items, page, per_page),
        status=status.HTTP_200_OK,
    )


@router.post("", response_model=Envelope[ClientResponse], status_code=status.HTTP_201_CREATED)
async def create_client(
    request: CreateClientRequest,
    clients: ClientManager = Depends(get_clients),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[ClientResponse]:
    """Create a client.

    Example:
        >>> POST /api/v1/clients
        {
            "name": "Acme",
            "email": "billing@acme.test",
            "contact_person": "Wile E."
        }
    """
    client = clients.create(user_id, request.name, request.email, request.contact_person)
    return Envelope[ClientResponse](
        message="Client created successfully",
        data=ClientResponse.from_client(client),
        status=status.HTTP_201_CREATED,
    )


@router.get("/{client_id}", response_model=Envelope[ClientResponse])
async def get_client(
    client_id: int,
    clients: ClientManager = Depends(get_clients),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[ClientResponse]:
    """Get one of the current user's clients."""
    client = clients.get(user_id, client_id)
    return Envelope[ClientResponse](
        message="Client retrieved successfully",
        data=ClientResponse.from_client(client),
        status=status.HTTP_200_OK,
    )


@router.put("/{client_id}", response_model=Envelope[ClientResponse])
@router.patch("/{client_id}", response_model=Envelope[ClientResponse], include_in_schema=False)
async def update_client(
    client_id: int,
    request: UpdateClientRequest,
    clients: ClientManager = Depends(get_clients),
    user_id: int = Depends(get_current_user_id),
) -> Envelope[ClientResponse]:
    """Update the non-blank fields of a client."""
    client = clients.update(
        user_id,
        client_id,
        name=request.name,
        email=request.email,
        contact_person=request.contact_person,
    )
    return Envelope[ClientResponse](
        message="Client updated successfully",
        data=ClientResponse.from_client(client),
        status=status.HTTP_200_OK,
    )


@router.delete("/{client_id}", response_model=MessageResponse)
async def delete_client(
    client_id: int,
    clients: ClientManager = Depends(get_clients),
    user_id: int = Depends(get_current_user_id),
) -> MessageResponse:
    """Delete a client that has no projects."""
    clients.delete(user_id, client_id)
    return MessageResponse(message="Client deleted successfully", status=status.HTTP_200_OK)
