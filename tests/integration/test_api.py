# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP layer tests with mocked storage.

These tests exercise routing, dependency ordering and the error envelope.
The database session is an AsyncMock and the caller is injected directly
where a test is not about authentication.
"""

from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import full_sheet, make_result
from src.api.app import create_app
from src.api.dependencies import get_caller, get_db, get_identity, get_notifications
from src.domains.auth.identity import VerifiedIdentity
from src.domains.auth.policy import Caller
from src.infrastructure.database.models.principal import Principal
from src.infrastructure.database.models.student import Student
from src.models.common import Role

pytestmark = pytest.mark.integration


@pytest.fixture
def app(mock_db: AsyncMock, mock_notifications: MagicMock) -> Iterator[FastAPI]:
    """Create the application with storage and email replaced."""
    application = create_app()

    async def override_db():
        yield mock_db

    application.dependency_overrides[get_db] = override_db
    application.dependency_overrides[get_notifications] = lambda: mock_notifications
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def as_caller(app: FastAPI, caller: Caller) -> None:
    app.dependency_overrides[get_caller] = lambda: caller


def error_of(response: Any) -> dict[str, str]:
    body = response.json()
    assert set(body) == {"error"}
    return body["error"]


def make_student(school_id: str, level: int = 1, days: int = 0) -> Student:
    return Student(
        id=str(uuid4()),
        school_id=school_id,
        name="Sam Ortiz",
        current_level=level,
        days_in_current_level=days,
        total_discipline_days_lost=0,
    )


class TestErrorEnvelope:
    """Tests for framework-level errors."""

    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert error_of(response)["kind"] == "not_found"

    def test_wrong_method(self, client: TestClient) -> None:
        response = client.delete("/api/v1/auth/login")

        assert response.status_code == 405
        assert error_of(response)["kind"] == "invalid_argument"

    def test_body_validation(
        self, app: FastAPI, client: TestClient, super_admin: Caller
    ) -> None:
        """Test that schema failures are reported as invalid_argument."""
        as_caller(app, super_admin)

        response = client.post("/api/v1/schools", json={"address": "1 Main St"})

        assert response.status_code == 400
        error = error_of(response)
        assert error["kind"] == "invalid_argument"
        assert "name" in error["message"]


class TestAuthentication:
    """Tests for unauthenticated and badly authenticated requests."""

    def test_no_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/students")

        assert response.status_code == 401
        assert error_of(response) == {
            "kind": "unauthenticated",
            "message": "The function must be called while authenticated.",
        }

    def test_forged_token(self, client: TestClient, mock_db: AsyncMock) -> None:
        response = client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == 401
        assert error_of(response)["message"] == "Invalid authentication token"
        mock_db.execute.assert_not_awaited()

    def test_provision_checks_caller_before_arguments(self, client: TestClient) -> None:
        """Test that a missing caller is reported before a malformed request."""
        response = client.post(
            "/api/v1/users/provision", json={"email": "bad", "role": "principal"}
        )

        assert response.status_code == 401
        assert error_of(response)["kind"] == "unauthenticated"

    def test_public_path_needs_no_token(self, client: TestClient, mock_db: AsyncMock) -> None:
        mock_db.execute.return_value = make_result(scalar_one_or_none=None)

        response = client.post(
            "/api/v1/auth/password/reset", json={"email": "ghost@school.test"}
        )

        assert response.status_code == 202


class TestPointSheetEndpoint:
    """Tests for POST /students/{id}/point-sheets."""

    def test_submit(
        self,
        app: FastAPI,
        client: TestClient,
        mock_db: AsyncMock,
        teacher: Caller,
        school_id: str,
    ) -> None:
        student = make_student(school_id, level=1, days=9)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)
        as_caller(app, teacher)

        response = client.post(
            f"/api/v1/students/{student.id}/point-sheets",
            json={"periods": full_sheet(), "is_absent": False},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["daily_percentage"] == 100.0
        assert body["is_successful_day"] is True
        assert body["new_level"] == 2
        assert body["new_days_in_current_level"] == 0
        assert body["level_advanced"] is True
        assert body["message"] == "Point sheet processed. Student advanced to Level 2!"
        assert body["report_id"]

    def test_absent_without_periods(
        self,
        app: FastAPI,
        client: TestClient,
        mock_db: AsyncMock,
        teacher: Caller,
        school_id: str,
    ) -> None:
        student = make_student(school_id, level=2, days=4)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)
        as_caller(app, teacher)

        response = client.post(
            f"/api/v1/students/{student.id}/point-sheets", json={"is_absent": True}
        )

        assert response.status_code == 201
        assert response.json()["is_successful_day"] is False
        assert response.json()["new_days_in_current_level"] == 4

    def test_invalid_score(
        self,
        app: FastAPI,
        client: TestClient,
        mock_db: AsyncMock,
        teacher: Caller,
        school_id: str,
    ) -> None:
        student = make_student(school_id)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)
        as_caller(app, teacher)

        response = client.post(
            f"/api/v1/students/{student.id}/point-sheets",
            json={"periods": full_sheet(p2_respect=3)},
        )

        assert response.status_code == 400
        assert error_of(response)["kind"] == "invalid_argument"
        mock_db.commit.assert_not_awaited()

    def test_cross_school(
        self,
        app: FastAPI,
        client: TestClient,
        mock_db: AsyncMock,
        teacher: Caller,
        other_school_id: str,
    ) -> None:
        student = make_student(other_school_id)
        mock_db.execute.return_value = make_result(scalar_one_or_none=student)
        as_caller(app, teacher)

        response = client.post(
            f"/api/v1/students/{student.id}/point-sheets",
            json={"periods": full_sheet()},
        )

        assert response.status_code == 403
        assert error_of(response) == {
            "kind": "permission_denied",
            "message": "Student does not belong to your school.",
        }

    def test_unknown_student(
        self, app: FastAPI, client: TestClient, mock_db: AsyncMock, teacher: Caller
    ) -> None:
        mock_db.execute.return_value = make_result(scalar_one_or_none=None)
        as_caller(app, teacher)

        response = client.post(
            f"/api/v1/students/{uuid4()}/point-sheets", json={"periods": full_sheet()}
        )

        assert response.status_code == 404
        assert error_of(response)["kind"] == "not_found"


class TestHealth:
    """Tests for the health endpoints."""

    def test_health_reports_uninitialized_database(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["components"]["database"]["status"] == "unhealthy"
        assert body["components"]["email"]["status"] == "disabled"


class TestRoutes:
    """Tests for route registration."""

    def test_v1_routes(self, app: FastAPI) -> None:
        paths = {route.path for route in app.routes}

        for path in (
            "/api/v1/auth/signup",
            "/api/v1/auth/verify-email/resend",
            "/api/v1/users/provision",
            "/api/v1/schools/{school_id}/teachers",
            "/api/v1/students/{student_id}/point-sheets",
            "/api/v1/classes/{class_id}/students/{student_id}",
            "/health/ready",
        ):
            assert path in paths


class TestMalformedIds:
    """Tests for ids that are not UUIDs."""

    @pytest.mark.parametrize(
        "method,path,field",
        [
            ("get", "/api/v1/students/abc", "student_id"),
            ("post", "/api/v1/students/abc/point-sheets", "student_id"),
            ("get", "/api/v1/students/abc/point-sheets", "student_id"),
            ("get", "/api/v1/schools/abc", "school_id"),
            ("get", "/api/v1/schools/abc/teachers", "school_id"),
            ("get", "/api/v1/classes/abc", "class_id"),
            ("delete", "/api/v1/classes/abc", "class_id"),
        ],
    )
    def test_path_id(
        self,
        app: FastAPI,
        client: TestClient,
        mock_db: AsyncMock,
        teacher: Caller,
        method: str,
        path: str,
        field: str,
    ) -> None:
        as_caller(app, teacher)

        if method == "post":
            response = client.post(path, json={"periods": full_sheet()})
        else:
            response = client.request(method.upper(), path)

        assert response.status_code == 400
        assert error_of(response) == {
            "kind": "invalid_argument",
            "message": f"Invalid request: {field}",
        }
        mock_db.execute.assert_not_awaited()

    def test_query_school_id(
        self, app: FastAPI, client: TestClient, mock_db: AsyncMock, super_admin: Caller
    ) -> None:
        as_caller(app, super_admin)

        response = client.get("/api/v1/students", params={"school_id": "abc"})

        assert response.status_code == 400
        assert error_of(response)["message"] == "Invalid request: school_id"
        mock_db.execute.assert_not_awaited()

    def test_class_member_body_id(
        self, app: FastAPI, client: TestClient, mock_db: AsyncMock, teacher: Caller
    ) -> None:
        as_caller(app, teacher)

        response = client.post(
            f"/api/v1/classes/{uuid4()}/students", json={"student_id": "abc"}
        )

        assert response.status_code == 400
        assert error_of(response)["message"] == "Invalid request: student_id"
        mock_db.execute.assert_not_awaited()

    def test_student_school_body_id(
        self, app: FastAPI, client: TestClient, mock_db: AsyncMock, super_admin: Caller
    ) -> None:
        as_caller(app, super_admin)

        response = client.post(
            "/api/v1/students", json={"school_id": "abc", "name": "Avery"}
        )

        assert response.status_code == 400
        assert error_of(response)["message"] == "Invalid request: school_id"
        mock_db.get.assert_not_awaited()

    def test_provision_school_id(
        self, app: FastAPI, client: TestClient, mock_db: AsyncMock, super_admin: Caller
    ) -> None:
        """Test that a malformed school id is rejected after the caller resolves."""
        mock_db.execute.return_value = make_result(
            scalar_one_or_none=Principal(
                id=super_admin.principal_id,
                email=super_admin.email,
                role=Role.SUPER_ADMIN,
            )
        )
        app.dependency_overrides[get_identity] = lambda: VerifiedIdentity(
            principal_id=super_admin.principal_id,
            email=super_admin.email,
            email_verified=True,
        )

        response = client.post(
            "/api/v1/users/provision",
            json={"email": "t@school.test", "role": "teacher", "school_id": "abc"},
        )

        assert response.status_code == 400
        assert error_of(response) == {
            "kind": "invalid_argument",
            "message": "Provided schoolId is not valid.",
        }
