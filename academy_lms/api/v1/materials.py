# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Material API endpoints.

- GET / - List materials, optionally of one lesson (?lesson_id=)
- POST / - Attach a material to a lesson
- GET /{material_id} - Get a material
- PUT /{material_id} - Update a material
- DELETE /{material_id} - Delete a material

Students may read materials but never change them. Teachers may change
materials only on lessons they authored.
"""

from fastapi import APIRouter, Depends, Query, status

from academy_lms.api.dependencies import AuthUser, get_material_service
from academy_lms.domains.material.service import MaterialService
from academy_lms.models.common import MessageResponse, SuccessResponse
from academy_lms.models.material import (
    MaterialCreateRequest,
    MaterialPatch,
    MaterialResponse,
)

router = APIRouter()


@router.get(
    "",
    response_model=SuccessResponse[list[MaterialResponse]],
    summary="List materials",
)
async def list_materials(
    current_user: AuthUser,
    lesson_id: str | None = Query(None, description="Only materials of this lesson"),
    service: MaterialService = Depends(get_material_service),
) -> SuccessResponse[list[MaterialResponse]]:
    materials = await service.list_materials(current_user, lesson_id)
    return SuccessResponse(data=materials)


@router.post(
    "",
    response_model=SuccessResponse[MaterialResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create material",
)
async def create_material(
    data: MaterialCreateRequest,
    current_user: AuthUser,
    service: MaterialService = Depends(get_material_service),
) -> SuccessResponse[MaterialResponse]:
    material = await service.create_material(current_user, data)
    return SuccessResponse(data=material)


@router.get(
    "/{material_id}",
    response_model=SuccessResponse[MaterialResponse],
    summary="Get material",
)
async def get_material(
    material_id: str,
    current_user: AuthUser,
    service: MaterialService = Depends(get_material_service),
) -> SuccessResponse[MaterialResponse]:
    material = await service.get_material(current_user, material_id)
    return SuccessResponse(data=material)


@router.put(
    "/{material_id}",
    response_model=SuccessResponse[MaterialResponse],
    summary="Update material",
)
async def update_material(
    material_id: str,
    data: MaterialPatch,
    current_user: AuthUser,
    service: MaterialService = Depends(get_material_service),
) -> SuccessResponse[MaterialResponse]:
    material = await service.update_material(current_user, material_id, data)
    return SuccessResponse(data=material)


@router.delete(
    "/{material_id}",
    response_model=SuccessResponse[MessageResponse],
    summary="Delete material",
)
async def delete_material(
    material_id: str,
    current_user: AuthUser,
    service: MaterialService = Depends(get_material_service),
) -> SuccessResponse[MessageResponse]:
    await service.delete_material(current_user, material_id)
    return SuccessResponse(data=MessageResponse(message="Material deleted successfully"))
