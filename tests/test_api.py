"""HTTP-level tests: authentication, ownership isolation, analysis round trip, export, triage endpoints."""

import unittest
import uuid
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import hash_password
from app.main import app
from app.models import AnalysisSession, SecurityIssue
from app.services.reasoning import ReasoningServiceError

from analysis_fixtures import (
    MODEL_ANSWER,
    add_project,
    add_user,
    auth_headers,
    make_engine,
    make_session_factory,
)

ASSESS_TARGET = "app.services.analysis.assess"


class ApiTestCase(unittest.TestCase):
    """App wired to an in-memory database; alice owns one project, bob owns none."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.SessionLocal = make_session_factory(self.engine)

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

        self.alice = add_user(self.SessionLocal, "alice")
        self.bob = add_user(self.SessionLocal, "bob")
        self.project_id = add_project(self.SessionLocal, self.alice, name="shop-api")
        self.alice_headers = auth_headers(self.alice)
        self.bob_headers = auth_headers(self.bob)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.engine.dispose()

    def start_analysis(self, answer: str = MODEL_ANSWER) -> dict:
        with patch(ASSESS_TARGET, new=AsyncMock(return_value=answer)):
            response = self.client.post(
                "/api/v1/analysis/analyze",
                json={"project_id": self.project_id},
                headers=self.alice_headers,
            )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


class TestAuthentication(ApiTestCase):
    def test_missing_token(self) -> None:
        response = self.client.get("/api/v1/projects")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Authorization required")

    def test_garbage_token(self) -> None:
        response = self.client.get(
            "/api/v1/projects",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        self.assertEqual(response.status_code, 401)

    def test_token_for_unknown_principal(self) -> None:
        response = self.client.get("/api/v1/projects", headers=auth_headers(self.bob + 100))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "User not found")

    def test_analysis_requires_token(self) -> None:
        response = self.client.post(
            "/api/v1/analysis/analyze",
            json={"project_id": self.project_id},
        )
        self.assertEqual(response.status_code, 401)

    def test_login(self) -> None:
        add_user(self.SessionLocal, "carol", password_hash=hash_password("correct-horse"))
        response = self.client.post(
            "/api/v1/auth",
            json={"username": "carol", "password": "correct-horse"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertGreater(body["expires_in"], 0)

        projects = self.client.get(
            "/api/v1/projects",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        self.assertEqual(projects.status_code, 200)
        self.assertEqual(projects.json()["projects"], [])

    def test_login_wrong_password_and_unknown_user_look_the_same(self) -> None:
        add_user(self.SessionLocal, "carol", password_hash=hash_password("correct-horse"))
        wrong = self.client.post(
            "/api/v1/auth",
            json={"username": "carol", "password": "battery-staple"},
        )
        unknown = self.client.post(
            "/api/v1/auth",
            json={"username": "nobody", "password": "battery-staple"},
        )
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())


class TestHealth(ApiTestCase):
    def test_health(self) -> None:
        response = self.client.get("/api/v1/health/")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertGreaterEqual(body["uptime_seconds"], 0)


class TestProjects(ApiTestCase):
    def test_create_list_get(self) -> None:
        created = self.client.post(
            "/api/v1/projects",
            json={"name": "  payments  ", "content": "eval(input())", "source_url": "local"},
            headers=self.bob_headers,
        )
        self.assertEqual(created.status_code, 201, created.text)
        body = created.json()
        self.assertEqual(body["name"], "payments")
        self.assertEqual(body["content"], "eval(input())")

        listed = self.client.get("/api/v1/projects", headers=self.bob_headers)
        self.assertEqual([p["id"] for p in listed.json()["projects"]], [body["id"]])

        fetched = self.client.get(f"/api/v1/projects/{body['id']}", headers=self.bob_headers)
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["id"], body["id"])

    def test_rejects_blank_name_and_oversized_content(self) -> None:
        blank = self.client.post(
            "/api/v1/projects",
            json={"name": "   ", "content": "x"},
            headers=self.alice_headers,
        )
        self.assertEqual(blank.status_code, 422)
        oversized = self.client.post(
            "/api/v1/projects",
            json={"name": "big", "content": "x" * (200 * 1024 + 1)},
            headers=self.alice_headers,
        )
        self.assertEqual(oversized.status_code, 422)

    def test_other_principal_cannot_see_project(self) -> None:
        response = self.client.get(f"/api/v1/projects/{self.project_id}", headers=self.bob_headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Project not found")

    def test_delete_cascades(self) -> None:
        result = self.start_analysis()
        forbidden = self.client.delete(f"/api/v1/projects/{self.project_id}", headers=self.bob_headers)
        self.assertEqual(forbidden.status_code, 404)

        deleted = self.client.delete(f"/api/v1/projects/{self.project_id}", headers=self.alice_headers)
        self.assertEqual(deleted.status_code, 204)
        gone = self.client.get(f"/api/v1/analysis/{result['id']}", headers=self.alice_headers)
        self.assertEqual(gone.status_code, 404)
        with self.SessionLocal() as db:
            self.assertEqual(db.query(AnalysisSession).count(), 0)
            self.assertEqual(db.query(SecurityIssue).count(), 0)

    def test_update_project(self) -> None:
        response = self.client.put(
            f"/api/v1/projects/{self.project_id}",
            json={"name": "  shop-api v2 ", "status": "archived"},
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["name"], "shop-api v2")
        self.assertEqual(body["status"], "archived")

    def test_update_validation(self) -> None:
        url = f"/api/v1/projects/{self.project_id}"
        self.assertEqual(self.client.put(url, json={}, headers=self.alice_headers).status_code, 422)
        self.assertEqual(
            self.client.put(url, json={"status": "gone"}, headers=self.alice_headers).status_code,
            422,
        )
        self.assertEqual(
            self.client.put(url, json={"content": "x" * (200 * 1024 + 1)}, headers=self.alice_headers).status_code,
            422,
        )

    def test_other_principal_cannot_update(self) -> None:
        response = self.client.put(
            f"/api/v1/projects/{self.project_id}",
            json={"name": "taken"},
            headers=self.bob_headers,
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "Project not found")
        own = self.client.get(f"/api/v1/projects/{self.project_id}", headers=self.alice_headers)
        self.assertEqual(own.json()["name"], "shop-api")

    def test_history_newest_first(self) -> None:
        first = self.start_analysis()
        second = self.start_analysis()
        response = self.client.get(
            f"/api/v1/projects/{self.project_id}/history",
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual([s["id"] for s in body], [second["id"], first["id"]])
        self.assertNotIn("security_issues", body[0])
        self.assertEqual(body[0]["total_issues"], 2)

    def test_history_of_foreign_project(self) -> None:
        self.start_analysis()
        response = self.client.get(
            f"/api/v1/projects/{self.project_id}/history",
            headers=self.bob_headers,
        )
        self.assertEqual(response.status_code, 404)

    def test_history_empty(self) -> None:
        response = self.client.get(
            f"/api/v1/projects/{self.project_id}/history",
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])


class TestAnalysisEndpoints(ApiTestCase):
    def test_start_then_get_returns_same_data(self) -> None:
        started = self.start_analysis()
        self.assertEqual(started["status"], "completed")
        self.assertEqual(started["project_id"], self.project_id)
        self.assertEqual(started["total_issues"], 2)
        self.assertEqual(started["overall_score"], 5.0)
        self.assertEqual(len(started["security_issues"]), 2)

        fetched = self.client.get(f"/api/v1/analysis/{started['id']}", headers=self.alice_headers)
        self.assertEqual(fetched.status_code, 200)
        body = fetched.json()

        self.assertEqual(body, started)
        self.assertEqual(
            [i["type"] for i in body["security_issues"]],
            ["SQL Injection", "XSS"],
        )

    def test_degraded_reasoning_service_still_completes(self) -> None:
        failing = AsyncMock(side_effect=ReasoningServiceError("Ollama is unreachable."))
        with patch(ASSESS_TARGET, new=failing):
            response = self.client.post(
                "/api/v1/analysis/analyze",
                json={"project_id": self.project_id},
                headers=self.alice_headers,
            )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "completed")
        self.assertEqual(body["total_issues"], 0)
        self.assertEqual(body["overall_score"], 10.0)
        self.assertEqual(body["security_issues"], [])

    def test_persistence_failure_is_500(self) -> None:
        with patch(
            "app.api.v1.analysis.run_analysis",
            new=AsyncMock(side_effect=SQLAlchemyError("database unavailable")),
        ):
            response = self.client.post(
                "/api/v1/analysis/analyze",
                json={"project_id": self.project_id},
                headers=self.alice_headers,
            )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "Error performing analysis")

    def test_malformed_ids_are_422(self) -> None:
        bad_start = self.client.post(
            "/api/v1/analysis/analyze",
            json={"project_id": "not-a-uuid"},
            headers=self.alice_headers,
        )
        self.assertEqual(bad_start.status_code, 422)
        bad_get = self.client.get("/api/v1/analysis/not-a-uuid", headers=self.alice_headers)
        self.assertEqual(bad_get.status_code, 422)
        bad_resolve = self.client.patch("/api/v1/issues/not-a-uuid/resolve", headers=self.alice_headers)
        self.assertEqual(bad_resolve.status_code, 422)

    def test_unknown_and_foreign_sessions_look_the_same(self) -> None:
        started = self.start_analysis()
        foreign = self.client.get(f"/api/v1/analysis/{started['id']}", headers=self.bob_headers)
        absent = self.client.get(f"/api/v1/analysis/{uuid.uuid4()}", headers=self.alice_headers)
        self.assertEqual(foreign.status_code, 404)
        self.assertEqual(absent.status_code, 404)
        self.assertEqual(foreign.json(), absent.json())

    def test_other_principal_cannot_analyze_project(self) -> None:
        mock_assess = AsyncMock(return_value=MODEL_ANSWER)
        with patch(ASSESS_TARGET, new=mock_assess):
            response = self.client.post(
                "/api/v1/analysis/analyze",
                json={"project_id": self.project_id},
                headers=self.bob_headers,
            )
        self.assertEqual(response.status_code, 404)
        mock_assess.assert_not_awaited()

    def test_export_json(self) -> None:
        started = self.start_analysis()
        response = self.client.get(
            f"/api/v1/analysis/{started['id']}/export",
            params={"format": "json"},
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn(
            f'attachment; filename="analysis_{started["id"]}.json"',
            response.headers["content-disposition"],
        )
        body = response.json()
        self.assertEqual(body["project_name"], "shop-api")
        self.assertEqual(body["analysis_session"]["id"], started["id"])
        self.assertEqual(body["analysis_session"]["overall_score"], 5.0)
        self.assertEqual(len(body["security_issues"]), 2)
        self.assertIn("exported_at", body)

    def test_export_defaults_to_json(self) -> None:
        started = self.start_analysis()
        response = self.client.get(
            f"/api/v1/analysis/{started['id']}/export",
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 200)

    def test_export_unsupported_format(self) -> None:
        started = self.start_analysis()
        response = self.client.get(
            f"/api/v1/analysis/{started['id']}/export",
            params={"format": "pdf"},
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 422)

    def test_export_foreign_session(self) -> None:
        started = self.start_analysis()
        response = self.client.get(
            f"/api/v1/analysis/{started['id']}/export",
            headers=self.bob_headers,
        )
        self.assertEqual(response.status_code, 404)


class TestIssueEndpoints(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        started = self.start_analysis()
        self.session_id = started["id"]
        self.issue_ids = [issue["id"] for issue in started["security_issues"]]

    def test_resolve_twice_is_200(self) -> None:
        url = f"/api/v1/issues/{self.issue_ids[0]}/resolve"
        first = self.client.patch(url, headers=self.alice_headers)
        second = self.client.patch(url, headers=self.alice_headers)
        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertTrue(second.json()["resolved"])

    def test_false_positive(self) -> None:
        response = self.client.patch(
            f"/api/v1/issues/{self.issue_ids[1]}/false-positive",
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["false_positive"])

    def test_other_principal_cannot_toggle_or_read(self) -> None:
        issue_id = self.issue_ids[0]
        for method, url in (
            ("patch", f"/api/v1/issues/{issue_id}/resolve"),
            ("patch", f"/api/v1/issues/{issue_id}/false-positive"),
            ("get", f"/api/v1/issues/{issue_id}"),
        ):
            with self.subTest(url=url):
                response = getattr(self.client, method)(url, headers=self.bob_headers)
                self.assertEqual(response.status_code, 404)
                self.assertEqual(response.json()["detail"], "Issue not found")

        own = self.client.get(f"/api/v1/issues/{issue_id}", headers=self.alice_headers)
        self.assertFalse(own.json()["resolved"])
        self.assertEqual(own.json()["project_name"], "shop-api")
        self.assertEqual(own.json()["session_status"], "completed")

    def test_toggle_does_not_change_stored_session(self) -> None:
        before = self.client.get(f"/api/v1/analysis/{self.session_id}", headers=self.alice_headers).json()
        self.client.patch(f"/api/v1/issues/{self.issue_ids[0]}/resolve", headers=self.alice_headers)
        after = self.client.get(f"/api/v1/analysis/{self.session_id}", headers=self.alice_headers).json()
        self.assertEqual(after["total_issues"], before["total_issues"])
        self.assertEqual(after["overall_score"], before["overall_score"])

    def test_list_with_filters(self) -> None:
        everything = self.client.get("/api/v1/issues", headers=self.alice_headers)
        self.assertEqual(len(everything.json()), 2)
        critical = self.client.get(
            "/api/v1/issues",
            params={"severity": "critical"},
            headers=self.alice_headers,
        )
        self.assertEqual([i["type"] for i in critical.json()], ["SQL Injection"])
        by_type = self.client.get(
            "/api/v1/issues",
            params={"type": "XSS"},
            headers=self.alice_headers,
        )
        self.assertEqual(len(by_type.json()), 1)
        self.assertEqual(by_type.json()[0]["project_id"], self.project_id)
        bob_view = self.client.get("/api/v1/issues", headers=self.bob_headers)
        self.assertEqual(bob_view.json(), [])
        bad_limit = self.client.get(
            "/api/v1/issues",
            params={"limit": 1000},
            headers=self.alice_headers,
        )
        self.assertEqual(bad_limit.status_code, 422)

    def test_bulk_update(self) -> None:
        response = self.client.patch(
            "/api/v1/issues/bulk",
            json={"issue_ids": self.issue_ids, "resolved": True},
            headers=self.alice_headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["updated_count"], 2)

        foreign = self.client.patch(
            "/api/v1/issues/bulk",
            json={"issue_ids": self.issue_ids, "false_positive": True},
            headers=self.bob_headers,
        )
        self.assertEqual(foreign.status_code, 404)

        nothing_to_set = self.client.patch(
            "/api/v1/issues/bulk",
            json={"issue_ids": self.issue_ids},
            headers=self.alice_headers,
        )
        self.assertEqual(nothing_to_set.status_code, 422)

    def test_stats(self) -> None:
        self.client.patch(f"/api/v1/issues/{self.issue_ids[0]}/resolve", headers=self.alice_headers)
        response = self.client.get("/api/v1/issues/stats", headers=self.alice_headers)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["total_issues"], 2)
        self.assertEqual(body["severity_breakdown"]["critical"], 1)
        self.assertEqual(body["severity_breakdown"]["high"], 1)
        self.assertEqual(body["status_summary"], {"open": 1, "resolved": 1, "false_positive": 0})


class TestSystemLimits(ApiTestCase):
    def test_requires_token(self) -> None:
        self.assertEqual(self.client.get("/api/v1/system/limits").status_code, 401)

    def test_limits(self) -> None:
        response = self.client.get("/api/v1/system/limits", headers=self.alice_headers)
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        settings = get_settings()
        self.assertEqual(body["max_content_bytes"], settings.ANALYSIS_MAX_CONTENT_BYTES)
        self.assertEqual(body["export_formats"], ["json"])
        self.assertEqual(body["bulk_update_max_ids"], 100)
        self.assertEqual(body["issue_list_default_limit"], 50)
        self.assertEqual(body["issue_list_max_limit"], 100)
        self.assertEqual(body["reasoning_model"], settings.OLLAMA_MODEL)
        self.assertEqual(body["reasoning_timeout_seconds"], settings.OLLAMA_REQUEST_TIMEOUT_SEC)


if __name__ == "__main__":
    unittest.main()
