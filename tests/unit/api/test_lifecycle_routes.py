"""Tests for deployment, upgrade, rollback, reconciliation and overview endpoints."""

from fastapi.testclient import TestClient

from squadron.provisioning.inmemory import InMemoryProvisioningClient
from squadron.templates.builtin import get_dental_clinic_template


def import_v2(client: TestClient, *, is_active: bool = True) -> str:
    response = client.post(
        "/v1/templates",
        json={
            "name": "dental-clinic-v2",
            "version": "v2.0",
            "display_name": "Dental Clinic Squad v2.0",
            "is_active": is_active,
            "member_configs": [{"name": "Triage Receptionist"}, {"name": "Scheduling"}],
        },
    )
    return response.json()["id"]


def upgrade(client: TestClient, account_id: str, template_id: str | None = None, **extra):
    body = {"target_template_id": template_id, **extra}
    return client.post(f"/v1/deployments/{account_id}/upgrade", json=body)


class TestDeployments:
    """Tests for /v1/deployments."""

    def test_unknown_deployment_404(self, client: TestClient) -> None:
        response = client.get("/v1/deployments/acct-1")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ACCOUNT_NOT_FOUND"

    def test_unknown_account_history_404(self, client: TestClient) -> None:
        response = client.get("/v1/deployments/nobody/history")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "ACCOUNT_NOT_FOUND"
        assert error["account_id"] == "nobody"

    def test_upgrade_then_read_back(
        self, client: TestClient, provisioning: InMemoryProvisioningClient
    ) -> None:
        template_id = import_v2(client)

        response = upgrade(client, "acct-1", template_id, actor="alice")

        assert response.status_code == 200
        data = response.json()
        assert data["resolution_reason"] == "explicit"
        assert data["transition"]["to_version"] == "v2.0"
        assert data["transition"]["actor"] == "alice"

        deployment = client.get("/v1/deployments/acct-1").json()
        assert deployment["current_version"] == "v2.0"
        assert deployment["routing_binding_id"] == "phone-1"
        assert deployment["transition_count"] == 1
        assert deployment["external_resource_id"] in provisioning.resources

        history = client.get("/v1/deployments/acct-1/history").json()
        assert [t["to_version"] for t in history] == ["v2.0"]

    def test_upgrade_without_target_uses_effective_template(self, client: TestClient) -> None:
        response = upgrade(client, "acct-1")

        assert response.status_code == 200
        assert response.json()["resolution_reason"] == "built-in"
        assert response.json()["transition"]["to_template_id"] == get_dental_clinic_template().id

    def test_effective_template(self, client: TestClient) -> None:
        template_id = import_v2(client)
        upgrade(client, "acct-1", template_id)

        response = client.get("/v1/deployments/acct-1/effective-template")

        assert response.status_code == 200
        assert response.json()["reason"] == "db-newer"
        assert response.json()["template"]["id"] == template_id

    def test_effective_template_is_read_only(self, client: TestClient) -> None:
        response = client.get("/v1/deployments/acct-new/effective-template")

        assert response.status_code == 200
        assert response.json()["reason"] == "built-in"
        assert client.get("/v1/deployments/acct-new").status_code == 404

    def test_inactive_target_409(self, client: TestClient) -> None:
        template_id = import_v2(client, is_active=False)

        response = upgrade(client, "acct-1", template_id)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "TEMPLATE_INACTIVE"

    def test_create_failure_502(
        self, client: TestClient, provisioning: InMemoryProvisioningClient
    ) -> None:
        provisioning.fail("create")

        response = upgrade(client, "acct-1")

        assert response.status_code == 502
        body = response.json()["error"]
        assert body["code"] == "PROVISION_FAILED"
        assert body["account_id"] == "acct-1"


class TestBulkUpgrade:
    """Tests for POST /v1/upgrades/plan."""

    def test_dry_run_plan(
        self, client: TestClient, provisioning: InMemoryProvisioningClient
    ) -> None:
        template_id = import_v2(client)
        upgrade(client, "acct-1")
        upgrade(client, "acct-2")
        provisioning.calls.clear()

        response = client.post("/v1/upgrades/plan", json={"target_template_id": template_id})

        assert response.status_code == 200
        plan = response.json()
        assert plan["dry_run"] is True
        assert plan["summary"]["pending"] == 2
        assert plan["migration"]["has_breaking_changes"] is True
        assert provisioning.calls == []

    def test_execute_with_failure_reports_entries(
        self, client: TestClient, provisioning: InMemoryProvisioningClient
    ) -> None:
        template_id = import_v2(client)
        upgrade(client, "acct-1")
        provisioning.fail("create")

        response = client.post(
            "/v1/upgrades/plan",
            json={
                "target_template_id": template_id,
                "account_ids": ["acct-1", "ghost"],
                "dry_run": False,
            },
        )

        assert response.status_code == 200
        entries = {e["account_id"]: e for e in response.json()["entries"]}
        assert entries["acct-1"]["status"] == "failed"
        assert entries["acct-1"]["error_code"] == "PROVISION_FAILED"
        assert entries["ghost"]["error_code"] == "ACCOUNT_NOT_FOUND"

    def test_unknown_target_404(self, client: TestClient) -> None:
        response = client.post("/v1/upgrades/plan", json={"target_template_id": "missing"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TEMPLATE_NOT_FOUND"


class TestRollbacks:
    """Tests for /v1/rollbacks."""

    def test_rollback_to_previous(self, client: TestClient) -> None:
        template_id = import_v2(client)
        upgrade(client, "acct-1")
        upgrade(client, "acct-1", template_id)

        response = client.post("/v1/rollbacks", json={"account_ids": ["acct-1", "acct-new"]})

        assert response.status_code == 200
        results = {r["account_id"]: r for r in response.json()["results"]}
        assert results["acct-1"]["status"] == "rolled_back"
        assert results["acct-1"]["to_version"] == "v1.0"
        assert results["acct-new"]["status"] == "no_history"
        assert client.get("/v1/deployments/acct-1").json()["current_version"] == "v1.0"

    def test_conflicting_targets_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/v1/rollbacks",
            json={"account_ids": ["acct-1"], "target_template_id": "x", "use_built_in": True},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_preview_without_history_409(self, client: TestClient) -> None:
        response = client.get("/v1/rollbacks/acct-new/target")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "NO_HISTORY"

    def test_preview_with_built_in(self, client: TestClient) -> None:
        response = client.get("/v1/rollbacks/acct-new/target", params={"use_built_in": True})

        assert response.status_code == 200
        assert response.json()["is_builtin"] is True


class TestReconciliation:
    """Tests for GET /v1/reconciliation."""

    def test_reports_orphans(
        self, client: TestClient, provisioning: InMemoryProvisioningClient
    ) -> None:
        upgrade(client, "acct-1")
        provisioning.add_resource("squad-stray")

        response = client.get("/v1/reconciliation")

        assert response.status_code == 200
        assert response.json()["orphaned_resources"] == ["squad-stray"]
        assert response.json()["orphaned_deployments"] == []

    def test_provisioning_failure_502(
        self, client: TestClient, provisioning: InMemoryProvisioningClient
    ) -> None:
        provisioning.fail("list")

        response = client.get("/v1/reconciliation")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "PROVISIONING_UNAVAILABLE"


class TestVersionOverview:
    """Tests for GET /v1/versions/overview."""

    def test_overview(self, client: TestClient) -> None:
        template_id = import_v2(client)
        upgrade(client, "acct-1")
        upgrade(client, "acct-2", template_id)

        response = client.get("/v1/versions/overview")

        assert response.status_code == 200
        data = response.json()
        assert [g["version"] for g in data["version_groups"]] == ["v2.0", "v1.0"]
        assert data["stats"]["total_accounts"] == 2
