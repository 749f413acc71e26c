# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the authentication middleware.

Tests the middleware in isolation from the database.
"""

from datetime import datetime, timedelta, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from academy_lms.api.dependencies import require_auth
from academy_lms.api.error_handling import register_exception_handlers
from academy_lms.api.middleware.auth import AuthMiddleware, get_current_user
from academy_lms.core.config import Settings
from academy_lms.domains.auth.identity import CurrentUser
from academy_lms.domains.auth.jwt import JWTManager
from academy_lms.models.common import UserRole


def _build_app(settings: Settings, jwt_manager: JWTManager) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.add_middleware(AuthMiddleware, settings=settings, jwt_manager=jwt_manager)

    @app.get("/health")
    async def health(request: Request) -> dict:
        return {"user": get_current_user(request) is not None}

    @app.get("/api/v1/whoami")
    async def whoami(request: Request) -> dict:
        user = get_current_user(request)
        if user is None:
            return {"user": None}
        return {"user": user.id, "role": user.role.value, "academy_id": user.academy_id}

    @app.get("/api/v1/protected")
    async def protected(user: CurrentUser = Depends(require_auth)) -> dict:
        return {"user": user.id}

    return app


class TestAuthMiddleware:
    """Tests for AuthMiddleware."""

    def test_valid_token_sets_user(self, settings: Settings, jwt_manager: JWTManager) -> None:
        """Test that a valid access token populates request.state.user."""
        token = jwt_manager.create_access_token("u1", "t@academy-a.io", UserRole.TEACHER, "ac1")

        with TestClient(_build_app(settings, jwt_manager)) as client:
            response = client.get(
                "/api/v1/whoami", headers={"Authorization": f"Bearer {token}"}
            )

        assert response.status_code == 200
        assert response.json() == {"user": "u1", "role": "teacher", "academy_id": "ac1"}

    def test_missing_token_leaves_request_anonymous(
        self,
        settings: Settings,
        jwt_manager: JWTManager,
    ) -> None:
        """Test that the middleware never rejects on its own."""
        with TestClient(_build_app(settings, jwt_manager)) as client:
            response = client.get("/api/v1/whoami")

        assert response.status_code == 200
        assert response.json() == {"user": None}

    def test_refresh_token_is_not_an_identity(
        self,
        settings: Settings,
        jwt_manager: JWTManager,
    ) -> None:
        token = jwt_manager.create_refresh_token("u1")

        with TestClient(_build_app(settings, jwt_manager)) as client:
            response = client.get(
                "/api/v1/whoami", headers={"Authorization": f"Bearer {token}"}
            )

        assert response.json() == {"user": None}

    def test_malformed_header_ignored(self, settings: Settings, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token("u1", "t@academy-a.io", UserRole.TEACHER, "ac1")

        with TestClient(_build_app(settings, jwt_manager)) as client:
            response = client.get("/api/v1/whoami", headers={"Authorization": f"Token {token}"})

        assert response.json() == {"user": None}

    def test_public_path_skips_token(self, settings: Settings, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token("u1", "t@academy-a.io", UserRole.TEACHER, "ac1")

        with TestClient(_build_app(settings, jwt_manager)) as client:
            response = client.get("/health", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {"user": False}

    def test_require_auth_answers_401_envelope(
        self,
        settings: Settings,
        jwt_manager: JWTManager,
    ) -> None:
        with TestClient(_build_app(settings, jwt_manager)) as client:
            response = client.get("/api/v1/protected")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json() == {
            "success": False,
            "error": "Not authenticated",
            "code": "unauthorized",
        }

    def test_expired_token_answers_401(self, settings: Settings) -> None:
        """Test that an expired access token is treated as no token."""
        issued = datetime.now(timezone.utc) - timedelta(hours=1)
        stale = JWTManager(settings.jwt, clock=lambda: issued)
        token = stale.create_access_token("u1", "t@academy-a.io", UserRole.TEACHER, "ac1")

        with TestClient(_build_app(settings, JWTManager(settings.jwt))) as client:
            response = client.get(
                "/api/v1/protected", headers={"Authorization": f"Bearer {token}"}
            )

        assert response.status_code == 401
