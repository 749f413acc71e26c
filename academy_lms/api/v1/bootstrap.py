# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bootstrap endpoint for seeding an academy's first users.

- POST /bootstrap/users - Create a user without an access token

The endpoint exists only when BOOTSTRAP_TOKEN is configured. Callers must
send the same value in the X-Bootstrap-Token header.
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from academy_lms.api.dependencies import get_app_settings, get_user_service
from academy_lms.domains.user.service import UserService
from academy_lms.models.common import SuccessResponse
from academy_lms.models.user import BootstrapUserRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def require_bootstrap_token(
    request: Request,
    x_bootstrap_token: str | None = Header(None),
) -> None:
    """Check the X-Bootstrap-Token header against the configured token.

    Raises:
        HTTPException: 404 when bootstrapping is disabled, 401 when the
            header is missing or wrong.
    """
    configured = get_app_settings(request).security.bootstrap_token
    if configured is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    expected = configured.get_secret_value().encode("utf-8")
    if not x_bootstrap_token or not hmac.compare_digest(
        x_bootstrap_token.encode("utf-8"), expected
    ):
        logger.warning("Bootstrap attempt with invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bootstrap token",
        )


@router.post(
    "/users",
    response_model=SuccessResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Bootstrap user",
    description="Create a user, and its academy if needed, using the bootstrap token.",
    dependencies=[Depends(require_bootstrap_token)],
)
async def bootstrap_user(
    data: BootstrapUserRequest,
    service: UserService = Depends(get_user_service),
) -> SuccessResponse[UserResponse]:
    user = await service.bootstrap_user(data)
    return SuccessResponse(data=user)
