"""Tests for template endpoints."""

from fastapi.testclient import TestClient

from squadron.templates.builtin import get_dental_clinic_template


def template_body(name: str = "dental-clinic-v2", version: str = "v2.0", **overrides) -> dict:
    body = {
        "name": name,
        "version": version,
        "display_name": f"Dental Clinic Squad {version}",
        "member_configs": [
            {"name": "Triage Receptionist", "destinations": ["Scheduling"]},
            {"name": "Scheduling", "tool_group": "scheduling"},
        ],
    }
    body.update(overrides)
    return body


class TestListTemplates:
    """Tests for GET /v1/templates."""

    def test_lists_builtin(self, client: TestClient) -> None:
        response = client.get("/v1/templates")

        assert response.status_code == 200
        data = response.json()
        assert [t["name"] for t in data] == ["dental-clinic"]
        assert data[0]["is_builtin"] is True
        assert data[0]["member_count"] == 4

    def test_can_exclude_builtin(self, client: TestClient) -> None:
        response = client.get("/v1/templates", params={"include_builtin": False})

        assert response.json() == []


class TestImportTemplate:
    """Tests for POST /v1/templates."""

    def test_creates_template(self, client: TestClient) -> None:
        response = client.post("/v1/templates", json=template_body())

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "dental-clinic-v2"
        assert data["category"] == "dental-clinic"
        assert data["is_builtin"] is False

        fetched = client.get(f"/v1/templates/{data['id']}")
        assert fetched.status_code == 200
        assert len(fetched.json()["member_configs"]) == 2

    def test_duplicate_name_rejected(self, client: TestClient) -> None:
        client.post("/v1/templates", json=template_body())

        response = client.post("/v1/templates", json=template_body(version="v2.1"))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_empty_members_rejected(self, client: TestClient) -> None:
        response = client.post("/v1/templates", json=template_body(member_configs=[]))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestTemplateLookups:
    """Tests for GET /v1/templates/{id}, compare and activation."""

    def test_missing_template_404(self, client: TestClient) -> None:
        response = client.get("/v1/templates/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TEMPLATE_NOT_FOUND"

    def test_compare(self, client: TestClient) -> None:
        created = client.post("/v1/templates", json=template_body()).json()

        response = client.get(
            "/v1/templates/compare",
            params={"from_id": get_dental_clinic_template().id, "to_id": created["id"]},
        )

        assert response.status_code == 200
        report = response.json()
        assert report["from_version"] == "v1.0"
        assert report["to_version"] == "v2.0"
        assert sorted(report["removed_members"]) == ["Clinic Information", "Emergency Transfer"]
        assert report["has_breaking_changes"] is True

    def test_deactivate(self, client: TestClient) -> None:
        created = client.post("/v1/templates", json=template_body()).json()

        response = client.patch(
            f"/v1/templates/{created['id']}/activation", json={"is_active": False}
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
