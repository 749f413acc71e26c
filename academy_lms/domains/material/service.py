# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Material service.

A material's tenant and owner both come from its lesson: the academy
through lesson -> course, the owner as the lesson's author.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from academy_lms.core.errors import NotFoundError
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.authorization.engine import (
    Action,
    AuthorizationEngine,
    Resource,
    ResourceKind,
)
from academy_lms.infrastructure.database.models import Lesson, Material
from academy_lms.infrastructure.database.repository import TenantRepository
from academy_lms.models.material import MaterialCreateRequest, MaterialPatch, MaterialResponse

logger = logging.getLogger(__name__)


class MaterialService:
    """Service for lesson materials within the caller's academy.

    Attributes:
        _db: Async database session.
        _repo: Tenant-scoped repository.
        _engine: Authorization engine.
    """

    def __init__(self, db: AsyncSession, engine: AuthorizationEngine | None = None) -> None:
        self._db = db
        self._repo = TenantRepository(db)
        self._engine = engine or AuthorizationEngine()

    async def _load_lesson(self, identity: CurrentUser, lesson_id: str) -> Lesson:
        lesson = await self._repo.get_lesson(identity.academy_id, lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")
        return lesson

    async def _load(self, identity: CurrentUser, material_id: str) -> tuple[Material, Lesson]:
        found = await self._repo.get_material_with_lesson(identity.academy_id, material_id)
        if found is None:
            raise NotFoundError("Material not found")
        return found

    async def list_materials(
        self,
        identity: CurrentUser,
        lesson_id: str | None = None,
    ) -> list[MaterialResponse]:
        """List materials of one lesson, or of the whole academy.

        Raises:
            NotFoundError: If lesson_id is given and not in the academy.
        """
        if lesson_id is not None:
            await self._load_lesson(identity, lesson_id)
        self._engine.authorize(identity, Action.LIST, ResourceKind.MATERIAL).enforce()
        materials = await self._repo.list_materials(identity.academy_id, lesson_id)
        return [MaterialResponse.model_validate(m) for m in materials]

    async def get_material(self, identity: CurrentUser, material_id: str) -> MaterialResponse:
        material, lesson = await self._load(identity, material_id)
        self._engine.authorize(
            identity,
            Action.READ,
            ResourceKind.MATERIAL,
            resource=Resource.from_material(material, lesson, identity.academy_id),
        ).enforce()
        return MaterialResponse.model_validate(material)

    async def create_material(
        self,
        identity: CurrentUser,
        request: MaterialCreateRequest,
    ) -> MaterialResponse:
        """Attach a material to a lesson.

        Raises:
            NotFoundError: If the lesson is not in the academy.
            AuthorizationError: If the caller is a student, or a teacher who
                did not author the lesson.
        """
        lesson = await self._load_lesson(identity, request.lesson_id)
        self._engine.authorize(
            identity,
            Action.CREATE,
            ResourceKind.MATERIAL,
            patch=request,
            related=Resource.from_lesson(lesson, identity.academy_id),
        ).enforce()

        material = await self._repo.create_material(
            academy_id=identity.academy_id,
            lesson_id=lesson.id,
            filename=request.filename,
            url=request.url,
        )
        await self._db.commit()

        logger.info(
            "Material created: id=%s, lesson=%s, by=%s",
            material.id,
            lesson.id,
            identity.id,
        )
        return MaterialResponse.model_validate(material)

    async def update_material(
        self,
        identity: CurrentUser,
        material_id: str,
        patch: MaterialPatch,
    ) -> MaterialResponse:
        material, lesson = await self._load(identity, material_id)
        allowed = self._engine.authorize(
            identity,
            Action.UPDATE,
            ResourceKind.MATERIAL,
            resource=Resource.from_material(material, lesson, identity.academy_id),
            patch=patch,
        ).enforce()

        updated = await self._repo.update_material(identity.academy_id, material_id, allowed)
        if updated is None:
            raise NotFoundError("Material not found")
        await self._db.commit()

        logger.info("Material updated: id=%s, by=%s", material_id, identity.id)
        return MaterialResponse.model_validate(updated)

    async def delete_material(self, identity: CurrentUser, material_id: str) -> None:
        material, lesson = await self._load(identity, material_id)
        self._engine.authorize(
            identity,
            Action.DELETE,
            ResourceKind.MATERIAL,
            resource=Resource.from_material(material, lesson, identity.academy_id),
        ).enforce()

        if not await self._repo.delete_material(identity.academy_id, material_id):
            raise NotFoundError("Material not found")
        await self._db.commit()

        logger.info("Material deleted: id=%s, by=%s", material_id, identity.id)
