from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, Response, status

from app.core.rate_limit import enforce_rate_limit
from app.schemas.users import UserResponse
from app.services.user_service import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(enforce_rate_limit)],
)

UserFields = Annotated[
    dict[str, Any],
    Body(
        description="Arbitrary user attributes. email, username and password are shape-checked.",
        examples=[{"username": "ada", "email": "ada@example.com", "name": "Ada"}],
    ),
]


def get_user_service(request: Request) -> UserService:
    """Return the user service attached to the running application."""
    return request.app.state.user_service


@router.get("", response_model=list[UserResponse])
async def list_users(
    service: Annotated[UserService, Depends(get_user_service)],
) -> list[UserResponse]:
    """List every stored user in creation order."""
    return [UserResponse.from_record(record) for record in service.list_users()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    fields: UserFields,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Create a user.

    The store assigns ``id``, ``createdAt`` and ``updatedAt``; the same keys
    in the request body are ignored.

    Raises:
        ValidationAppError: 400 when email, username or password is malformed.
    """
    return UserResponse.from_record(service.create_user(fields))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Fetch one user.

    Raises:
        NotFoundAppError: 404 when no user has this id.
    """
    return UserResponse.from_record(service.get_user(user_id))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    fields: UserFields,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Merge the body over an existing user.

    Supplied keys overwrite existing ones; keys not supplied are kept.

    Raises:
        ValidationAppError: 400 when email, username or password is malformed.
        NotFoundAppError: 404 when no user has this id.
    """
    return UserResponse.from_record(service.update_user(user_id, fields))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    service: Annotated[UserService, Depends(get_user_service)],
) -> Response:
    """Delete a user.

    Raises:
        NotFoundAppError: 404 when no user has this id.
    """
    service.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
