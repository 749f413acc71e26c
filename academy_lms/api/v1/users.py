# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management API endpoints.

This module provides endpoints for users of the caller's academy:
- GET / - List users (admin only)
- POST / - Create a user (admin only)
- GET /{user_id} - Get a user (admins: anyone, others: self)
- PUT /{user_id} - Update a user (admins: anyone, others: self without role change)
- DELETE /{user_id} - Delete a user (admin only)
"""

import logging

from fastapi import APIRouter, Depends, status

from academy_lms.api.dependencies import AuthUser, get_user_service
from academy_lms.domains.user.service import UserService
from academy_lms.models.common import MessageResponse, SuccessResponse
from academy_lms.models.user import UserCreateRequest, UserPatch, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=SuccessResponse[list[UserResponse]],
    summary="List users",
)
async def list_users(
    current_user: AuthUser,
    service: UserService = Depends(get_user_service),
) -> SuccessResponse[list[UserResponse]]:
    users = await service.list_users(current_user)
    return SuccessResponse(data=users)


@router.post(
    "",
    response_model=SuccessResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Add a user to the caller's academy. Requires admin role.",
)
async def create_user(
    data: UserCreateRequest,
    current_user: AuthUser,
    service: UserService = Depends(get_user_service),
) -> SuccessResponse[UserResponse]:
    user = await service.create_user(current_user, data)
    return SuccessResponse(data=user)


@router.get(
    "/{user_id}",
    response_model=SuccessResponse[UserResponse],
    summary="Get user",
)
async def get_user(
    user_id: str,
    current_user: AuthUser,
    service: UserService = Depends(get_user_service),
) -> SuccessResponse[UserResponse]:
    user = await service.get_user(current_user, user_id)
    return SuccessResponse(data=user)


@router.put(
    "/{user_id}",
    response_model=SuccessResponse[UserResponse],
    summary="Update user",
)
async def update_user(
    user_id: str,
    data: UserPatch,
    current_user: AuthUser,
    service: UserService = Depends(get_user_service),
) -> SuccessResponse[UserResponse]:
    """Update email, password or role.

    Only admins may change a role. Sending the current role is accepted
    and ignored.
    """
    user = await service.update_user(current_user, user_id, data)
    return SuccessResponse(data=user)


@router.delete(
    "/{user_id}",
    response_model=SuccessResponse[MessageResponse],
    summary="Delete user",
    description="Delete a user who instructs no course. Requires admin role.",
)
async def delete_user(
    user_id: str,
    current_user: AuthUser,
    service: UserService = Depends(get_user_service),
) -> SuccessResponse[MessageResponse]:
    await service.delete_user(current_user, user_id)
    return SuccessResponse(data=MessageResponse(message="User deleted successfully"))
