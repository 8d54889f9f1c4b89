"""Tests for VersionLedger and InMemoryDeploymentStore."""

import pytest

from squadron.db.errors import ConflictError
from squadron.deployments.ledger import VersionLedger
from squadron.deployments.models import Transition
from squadron.deployments.stores.inmemory import InMemoryDeploymentStore
from squadron.lifecycle.errors import LifecycleValidationError


@pytest.fixture
def store() -> InMemoryDeploymentStore:
    return InMemoryDeploymentStore()


@pytest.fixture
def ledger(store: InMemoryDeploymentStore) -> VersionLedger:
    return VersionLedger(store)


def make_transition(account_id: str = "acct-1", **overrides) -> Transition:
    values = {
        "account_id": account_id,
        "from_version": "v1.0",
        "from_template_name": "dental-clinic",
        "to_version": "v2.0",
        "to_template_name": "custom",
        "to_template_id": "tpl-2",
        "old_resource_id": "squad-old",
        "new_resource_id": "squad-new",
    }
    values.update(overrides)
    return Transition(**values)


class TestLoadOrCreate:
    """Tests for lazy deployment creation."""

    async def test_creates_empty_record(
        self, ledger: VersionLedger, store: InMemoryDeploymentStore
    ) -> None:
        deployment = await ledger.load_or_create("acct-1")

        assert deployment.current_template_id is None
        assert deployment.history == []
        assert await store.get_deployment("acct-1") is not None

    async def test_returns_existing(self, ledger: VersionLedger) -> None:
        first = await ledger.load_or_create("acct-1")
        second = await ledger.load_or_create("acct-1")

        assert first.created_at == second.created_at

    async def test_get_does_not_create(
        self, ledger: VersionLedger, store: InMemoryDeploymentStore
    ) -> None:
        assert await ledger.get("acct-1") is None
        assert await store.get_deployment("acct-1") is None


class TestAppend:
    """Tests for recording transitions."""

    async def test_append_moves_current_fields(self, ledger: VersionLedger) -> None:
        transition = make_transition()

        deployment = await ledger.append("acct-1", transition, routing_binding_id="phone-1")

        assert deployment.current_version == "v2.0"
        assert deployment.current_template_id == "tpl-2"
        assert deployment.current_template_name == "custom"
        assert deployment.external_resource_id == "squad-new"
        assert deployment.routing_binding_id == "phone-1"
        assert deployment.last_transition == transition

    async def test_history_is_append_only(self, ledger: VersionLedger) -> None:
        first = make_transition()
        second = make_transition(
            from_version="v2.0",
            to_version="v3.0",
            old_resource_id="squad-new",
            new_resource_id="squad-newer",
        )

        await ledger.append("acct-1", first)
        await ledger.append("acct-1", second)

        assert [t.id for t in await ledger.history("acct-1")] == [first.id, second.id]
        last = await ledger.last_transition("acct-1")
        assert last is not None
        assert last.to_version == "v3.0"

    async def test_delete_failed_records_stale_resource(self, ledger: VersionLedger) -> None:
        deployment = await ledger.append("acct-1", make_transition(delete_failed=True))

        assert deployment.deleted_resource_id == "squad-old"

    async def test_wrong_account_rejected(self, ledger: VersionLedger) -> None:
        with pytest.raises(LifecycleValidationError):
            await ledger.append("acct-2", make_transition("acct-1"))

    async def test_duplicate_transition_conflicts(self, ledger: VersionLedger) -> None:
        transition = make_transition()
        await ledger.append("acct-1", transition)

        with pytest.raises(ConflictError):
            await ledger.append("acct-1", transition)

    async def test_unknown_account_has_no_history(self, ledger: VersionLedger) -> None:
        assert await ledger.history("nobody") == []
        assert await ledger.last_transition("nobody") is None


class TestInMemoryDeploymentStore:
    """Tests for store isolation."""

    async def test_save_never_rewrites_history(
        self, ledger: VersionLedger, store: InMemoryDeploymentStore
    ) -> None:
        await ledger.append("acct-1", make_transition())
        deployment = await store.get_deployment("acct-1")
        assert deployment is not None

        deployment.history = []
        await store.save_deployment(deployment)

        stored = await store.get_deployment("acct-1")
        assert stored is not None
        assert len(stored.history) == 1

    async def test_reads_are_copies(self, store: InMemoryDeploymentStore) -> None:
        await VersionLedger(store).load_or_create("acct-1")
        deployment = await store.get_deployment("acct-1")
        assert deployment is not None

        deployment.current_version = "v9"

        stored = await store.get_deployment("acct-1")
        assert stored is not None
        assert stored.current_version is None
