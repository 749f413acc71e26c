# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role and ownership decisions for every scoped operation.

The engine answers one question: may this identity perform this action on
this kind of resource, given the resource's current state and the proposed
change? It never touches storage. Callers load the target through the
tenant-scoped repository first (absence is NotFound before the engine is
consulted) and pass a Resource snapshot in.

Rules, per role:

    Course    list/read      everyone in the academy
              create         admin: any instructor / teacher: only self
              update         admin: any / teacher: only as instructor,
                             and may not hand the course to someone else
              delete         admin only
    Lesson    list/read      everyone in the academy
              create         admin: any course / teacher: own courses
              update         admin: any / teacher: lessons they authored
              delete         admin only
    Material  read           everyone in the academy
              create/update/delete
                             admin: any / teacher: lessons they authored
    User      list/create/delete
                             admin only
              read           admin: anyone / others: self
              update         admin: anything / others: self, role unchanged

Any resource from another academy is refused as not found, never as
forbidden, so callers cannot discover ids in other tenants.

Example:
    >>> engine = AuthorizationEngine()
    >>> decision = engine.authorize(
    ...     identity, Action.UPDATE, ResourceKind.COURSE,
    ...     resource=Resource.from_course(course), patch=patch,
    ... )
    >>> narrowed = decision.enforce()
"""

import logging
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel

from academy_lms.core.errors import AuthorizationError, NotFoundError
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.infrastructure.database.models import Course, Lesson, Material, User
from academy_lms.models.common import UserRole

logger = logging.getLogger(__name__)


class Action(str, Enum):
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ResourceKind(str, Enum):
    COURSE = "course"
    LESSON = "lesson"
    MATERIAL = "material"
    USER = "user"


@dataclass(frozen=True)
class Resource:
    """Snapshot of the facts the engine needs about a stored record.

    Attributes:
        kind: Resource kind.
        id: Resource ID.
        academy_id: Academy the resource belongs to.
        owner_id: Course instructor, lesson author (also for materials)
            or the user themself.
        role: Current role, for users only.
    """

    kind: ResourceKind
    id: str
    academy_id: str
    owner_id: str | None = None
    role: UserRole | None = None

    @classmethod
    def from_course(cls, course: Course) -> "Resource":
        return cls(
            kind=ResourceKind.COURSE,
            id=course.id,
            academy_id=course.academy_id,
            owner_id=course.instructor_user_id,
        )

    @classmethod
    def from_lesson(cls, lesson: Lesson, academy_id: str) -> "Resource":
        return cls(
            kind=ResourceKind.LESSON,
            id=lesson.id,
            academy_id=academy_id,
            owner_id=lesson.author_user_id,
        )

    @classmethod
    def from_material(cls, material: Material, lesson: Lesson, academy_id: str) -> "Resource":
        return cls(
            kind=ResourceKind.MATERIAL,
            id=material.id,
            academy_id=academy_id,
            owner_id=lesson.author_user_id,
        )

    @classmethod
    def from_user(cls, user: User) -> "Resource":
        return cls(
            kind=ResourceKind.USER,
            id=user.id,
            academy_id=user.academy_id,
            owner_id=user.id,
            role=UserRole(user.role),
        )


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check.

    Attributes:
        allowed: Whether the action may proceed.
        reason: Why it was refused (empty when allowed).
        patch: The patch to apply, possibly narrowed. None when there is none.
        not_found: The refusal must be reported as NotFound.
    """

    allowed: bool
    reason: str = ""
    patch: BaseModel | None = None
    not_found: bool = False

    @classmethod
    def allow(cls, patch: BaseModel | None = None) -> "Decision":
        return cls(allowed=True, patch=patch)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)

    @classmethod
    def hidden(cls, kind: ResourceKind) -> "Decision":
        return cls(allowed=False, reason=f"{kind.value.capitalize()} not found", not_found=True)

    def enforce(self) -> BaseModel | None:
        """Raise on refusal, otherwise return the patch to apply.

        Raises:
            NotFoundError: If the resource lies outside the caller's academy.
            AuthorizationError: If the role or ownership rules refuse.
        """
        if self.not_found:
            raise NotFoundError(self.reason)
        if not self.allowed:
            raise AuthorizationError(self.reason)
        return self.patch


_CONTENT_KINDS = frozenset({ResourceKind.COURSE, ResourceKind.LESSON, ResourceKind.MATERIAL})
_TARGETED_ACTIONS = frozenset({Action.READ, Action.UPDATE, Action.DELETE})


class AuthorizationEngine:
    """Stateless policy evaluator.

    All decisions are a pure function of the arguments to authorize().
    """

    def authorize(
        self,
        identity: CurrentUser,
        action: Action,
        kind: ResourceKind,
        resource: Resource | None = None,
        patch: BaseModel | None = None,
        related: Resource | None = None,
    ) -> Decision:
        """Decide whether identity may perform action.

        Args:
            identity: The authenticated caller.
            action: What the caller wants to do.
            kind: Kind of resource acted on.
            resource: Current state of the target for read/update/delete.
            patch: Proposed values for create/update. For course creation
                this carries the requested instructor.
            related: Parent resource for creation: the course a lesson is
                added to, or the lesson a material is added to.

        Returns:
            The decision. Call enforce() to turn refusals into errors.

        Raises:
            ValueError: If a targeted action is requested without a resource.
        """
        if action in _TARGETED_ACTIONS and resource is None:
            raise ValueError(f"{action.value} on {kind.value} requires the current resource")

        for subject in (resource, related):
            if subject is not None and subject.academy_id != identity.academy_id:
                logger.warning(
                    "Cross-academy access refused: user=%s academy=%s %s=%s",
                    identity.id,
                    identity.academy_id,
                    subject.kind.value,
                    subject.id,
                )
                return Decision.hidden(subject.kind)

        if kind in _CONTENT_KINDS and action in (Action.LIST, Action.READ):
            return Decision.allow()

        match kind:
            case ResourceKind.COURSE:
                decision = self._course(identity, action, resource, patch)
            case ResourceKind.LESSON:
                decision = self._lesson(identity, action, resource, patch, related)
            case ResourceKind.MATERIAL:
                decision = self._material(identity, action, resource, patch, related)
            case ResourceKind.USER:
                decision = self._user(identity, action, resource, patch)
            case _:
                decision = Decision.deny(f"Unknown resource kind: {kind}")

        if not decision.allowed:
            logger.info(
                "Denied %s %s for user=%s role=%s: %s",
                action.value,
                kind.value,
                identity.id,
                identity.role.value,
                decision.reason,
            )
        return decision

    def _course(
        self,
        identity: CurrentUser,
        action: Action,
        resource: Resource | None,
        patch: BaseModel | None,
    ) -> Decision:
        match identity.role:
            case UserRole.ADMIN:
                return Decision.allow(patch)
            case UserRole.TEACHER:
                proposed = getattr(patch, "instructor_user_id", None)
                match action:
                    case Action.CREATE:
                        if proposed != identity.id:
                            return Decision.deny("Teachers can only create courses for themselves")
                        return Decision.allow(patch)
                    case Action.UPDATE:
                        if resource.owner_id != identity.id:
                            return Decision.deny("Teachers can only update their own courses")
                        if proposed is not None and proposed != identity.id:
                            return Decision.deny(
                                "Teachers cannot reassign courses to other instructors"
                            )
                        return Decision.allow(patch)
                    case _:
                        return Decision.deny("Only admins can delete courses")
            case UserRole.STUDENT:
                match action:
                    case Action.CREATE:
                        return Decision.deny("Students cannot create courses")
                    case Action.UPDATE:
                        return Decision.deny("Students cannot update courses")
                    case _:
                        return Decision.deny("Only admins can delete courses")
            case _:
                return Decision.deny("Unknown role")

    def _lesson(
        self,
        identity: CurrentUser,
        action: Action,
        resource: Resource | None,
        patch: BaseModel | None,
        related: Resource | None,
    ) -> Decision:
        match identity.role:
            case UserRole.ADMIN:
                return Decision.allow(patch)
            case UserRole.TEACHER:
                match action:
                    case Action.CREATE:
                        if related is None or related.owner_id != identity.id:
                            return Decision.deny(
                                "Teachers can only create lessons for their own courses"
                            )
                        return Decision.allow(patch)
                    case Action.UPDATE:
                        if resource.owner_id != identity.id:
                            return Decision.deny("Teachers can only update their own lessons")
                        return Decision.allow(patch)
                    case _:
                        return Decision.deny("Only admins can delete lessons")
            case UserRole.STUDENT:
                match action:
                    case Action.CREATE:
                        return Decision.deny("Students cannot create lessons")
                    case Action.UPDATE:
                        return Decision.deny("Students cannot update lessons")
                    case _:
                        return Decision.deny("Only admins can delete lessons")
            case _:
                return Decision.deny("Unknown role")

    def _material(
        self,
        identity: CurrentUser,
        action: Action,
        resource: Resource | None,
        patch: BaseModel | None,
        related: Resource | None,
    ) -> Decision:
        match identity.role:
            case UserRole.ADMIN:
                return Decision.allow(patch)
            case UserRole.TEACHER:
                if action == Action.CREATE:
                    if related is None or related.owner_id != identity.id:
                        return Decision.deny(
                            "Teachers can only add materials to their own lessons"
                        )
                    return Decision.allow(patch)
                if resource.owner_id != identity.id:
                    verb = "update" if action == Action.UPDATE else "delete"
                    return Decision.deny(
                        f"Teachers can only {verb} materials from their own lessons"
                    )
                return Decision.allow(patch)
            case UserRole.STUDENT:
                return Decision.deny(f"Students cannot {action.value} materials")
            case _:
                return Decision.deny("Unknown role")

    def _user(
        self,
        identity: CurrentUser,
        action: Action,
        resource: Resource | None,
        patch: BaseModel | None,
    ) -> Decision:
        match identity.role:
            case UserRole.ADMIN:
                return Decision.allow(patch)
            case UserRole.TEACHER | UserRole.STUDENT:
                match action:
                    case Action.LIST:
                        return Decision.deny("Only admins can view all users")
                    case Action.CREATE:
                        return Decision.deny("Only admins can create users")
                    case Action.DELETE:
                        return Decision.deny("Only admins can delete users")
                    case Action.READ:
                        if resource.id != identity.id:
                            return Decision.deny("You can only view your own profile")
                        return Decision.allow()
                    case Action.UPDATE:
                        if resource.id != identity.id:
                            return Decision.deny("You can only update your own profile")
                        return self._narrow_role_change(resource, patch)
                    case _:
                        return Decision.deny(f"Unknown action: {action}")
            case _:
                return Decision.deny("Unknown role")

    @staticmethod
    def _narrow_role_change(resource: Resource, patch: BaseModel | None) -> Decision:
        """Refuse a non-admin role change; drop a role equal to the current one."""
        proposed = getattr(patch, "role", None)
        if proposed is None:
            return Decision.allow(patch)
        if UserRole(proposed) != resource.role:
            return Decision.deny("Only admins can change user roles")
        return Decision.allow(patch.model_copy(update={"role": None}))
