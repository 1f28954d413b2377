"""Tests for the project and course catalog."""

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from schemas import Course, Project, PROJECT_CATEGORIES

PROJECT = {
    "title": "Dr. AIRA",
    "category": "ai",
    "image": "/uploads/img-1.png",
    "description": "Medical assistant",
    "tags": ["Medical AI", "Healthcare"],
}

COURSE = {
    "title": "Web Development Projects",
    "level": "advanced",
    "description": "Full-stack apps",
    "duration": "6 weeks",
    "features": ["Dashboards"],
}


class TestProjectSchema:
    def test_defaults(self):
        project = Project(**PROJECT)

        assert project.link == "#contact"
        assert project.featured is False
        assert project.priority == 0
        assert project.badge is None

    @pytest.mark.parametrize("category", PROJECT_CATEGORIES)
    def test_every_category_accepted(self, category):
        assert Project(**{**PROJECT, "category": category}).category == category

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            Project(**{**PROJECT, "category": "gaming"})

    def test_unknown_level_rejected(self):
        with pytest.raises(ValidationError):
            Course(**{**COURSE, "level": "expert"})


class TestProjects:
    def test_create_requires_admin(self, client, mock_db):
        assert client.post("/api/projects", json=PROJECT).status_code == 401
        assert mock_db["project"].count_documents({}) == 0

    def test_create(self, client, admin_headers):
        response = client.post("/api/projects", json=PROJECT, headers=admin_headers)

        assert response.status_code == 200
        project = response.json()["project"]
        assert project["tags"] == ["Medical AI", "Healthcare"]
        assert project["link"] == "#contact"
        assert project["createdAt"]

    def test_create_with_bad_category_is_rejected(self, client, mock_db, admin_headers):
        response = client.post("/api/projects", json={**PROJECT, "category": "gaming"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}
        assert mock_db["project"].count_documents({}) == 0

    def test_create_missing_image_is_rejected(self, client, admin_headers):
        body = {k: v for k, v in PROJECT.items() if k != "image"}

        assert client.post("/api/projects", json=body, headers=admin_headers).status_code == 400

    def test_list_orders_by_priority_then_recency(self, client, mock_db):
        same_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for priority in (5, 10, 0):
            mock_db["project"].insert_one({**PROJECT, "title": f"p{priority}", "priority": priority, "createdAt": same_time})

        projects = client.get("/api/projects").json()["projects"]
        assert [p["priority"] for p in projects] == [10, 5, 0]

    def test_equal_priority_newest_first(self, client, mock_db):
        mock_db["project"].insert_one({**PROJECT, "title": "old", "priority": 1, "createdAt": datetime(2023, 1, 1, tzinfo=timezone.utc)})
        mock_db["project"].insert_one({**PROJECT, "title": "new", "priority": 1, "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)})

        assert [p["title"] for p in client.get("/api/projects").json()["projects"]] == ["new", "old"]

    def test_full_ties_break_on_id(self, client, mock_db):
        same_time = datetime(2024, 1, 1, tzinfo=timezone.utc)
        first = mock_db["project"].insert_one({**PROJECT, "title": "first", "createdAt": same_time}).inserted_id
        second = mock_db["project"].insert_one({**PROJECT, "title": "second", "createdAt": same_time}).inserted_id
        assert second > first

        assert [p["title"] for p in client.get("/api/projects").json()["projects"]] == ["second", "first"]

    def test_update_merges(self, client, admin_headers):
        project_id = client.post("/api/projects", json=PROJECT, headers=admin_headers).json()["project"]["_id"]

        response = client.put(f"/api/projects/{project_id}", json={"priority": 8, "featured": True}, headers=admin_headers)
        assert response.status_code == 200
        project = response.json()["project"]
        assert project["priority"] == 8
        assert project["featured"] is True
        assert project["title"] == "Dr. AIRA"

    def test_update_can_clear_badge(self, client, admin_headers):
        body = {**PROJECT, "badge": "Best Seller"}
        project_id = client.post("/api/projects", json=body, headers=admin_headers).json()["project"]["_id"]

        response = client.put(f"/api/projects/{project_id}", json={"badge": None}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["project"]["badge"] is None
        assert response.json()["project"]["title"] == "Dr. AIRA"

    def test_null_required_field_is_ignored(self, client, admin_headers):
        project_id = client.post("/api/projects", json=PROJECT, headers=admin_headers).json()["project"]["_id"]

        response = client.put(f"/api/projects/{project_id}", json={"title": None}, headers=admin_headers)
        assert response.json()["project"]["title"] == "Dr. AIRA"

    def test_update_with_bad_category(self, client, admin_headers):
        project_id = client.post("/api/projects", json=PROJECT, headers=admin_headers).json()["project"]["_id"]

        response = client.put(f"/api/projects/{project_id}", json={"category": "gaming"}, headers=admin_headers)
        assert response.status_code == 400

    def test_update_missing(self, client, admin_headers):
        response = client.put(f"/api/projects/{ObjectId()}", json={"title": "x"}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}

    def test_delete(self, client, mock_db, admin_headers):
        project_id = client.post("/api/projects", json=PROJECT, headers=admin_headers).json()["project"]["_id"]

        response = client.delete(f"/api/projects/{project_id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["project"]["title"] == "Dr. AIRA"
        assert mock_db["project"].count_documents({}) == 0


class TestCourses:
    def test_create_defaults_session_type(self, client, admin_headers):
        response = client.post("/api/courses", json=COURSE, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["course"]["sessionType"] == "training-demo"

    def test_create_with_bad_level(self, client, admin_headers):
        response = client.post("/api/courses", json={**COURSE, "level": "expert"}, headers=admin_headers)

        assert response.status_code == 400

    def test_list_newest_first(self, client, mock_db):
        mock_db["course"].insert_one({**COURSE, "title": "old", "createdAt": datetime(2023, 1, 1, tzinfo=timezone.utc)})
        mock_db["course"].insert_one({**COURSE, "title": "new", "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)})

        assert [c["title"] for c in client.get("/api/courses").json()["courses"]] == ["new", "old"]

    def test_update_can_clear_badge(self, client, admin_headers):
        course_id = client.post("/api/courses", json={**COURSE, "badge": "New"}, headers=admin_headers).json()["course"]["_id"]

        response = client.put(f"/api/courses/{course_id}", json={"badge": None}, headers=admin_headers)
        assert response.json()["course"]["badge"] is None
        assert response.json()["course"]["level"] == "advanced"

    def test_update_and_delete(self, client, admin_headers):
        course_id = client.post("/api/courses", json=COURSE, headers=admin_headers).json()["course"]["_id"]

        updated = client.put(f"/api/courses/{course_id}", json={"duration": "8 weeks"}, headers=admin_headers)
        assert updated.json()["course"]["duration"] == "8 weeks"
        assert updated.json()["course"]["level"] == "advanced"

        assert client.delete(f"/api/courses/{course_id}", headers=admin_headers).status_code == 200
        assert client.delete(f"/api/courses/{course_id}", headers=admin_headers).status_code == 404


class TestStats:
    def test_defaults_to_zero(self, client, admin_headers):
        assert client.get("/api/stats", headers=admin_headers).json() == {"totalVisits": 0}

    def test_reads_counter(self, client, mock_db, admin_headers):
        mock_db["sitestats"].insert_one({"totalVisits": 42})

        assert client.get("/api/stats", headers=admin_headers).json() == {"totalVisits": 42}
