"""Lifecycle models: upgrade plans, rollback results and scan reports."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from squadron.deployments.models import Transition, utc_now
from squadron.lifecycle.errors import ErrorCode
from squadron.templates.diff import MigrationReport

# =============================================================================
# Enums
# =============================================================================


class PlanStatus(str, Enum):
    """Per-tenant status inside a bulk upgrade plan."""

    PENDING = "pending"
    SKIPPED = "skipped"
    UPGRADED = "upgraded"
    FAILED = "failed"


class ResolutionReason(str, Enum):
    """Why a template was chosen as a tenant's effective template."""

    EXPLICIT = "explicit"
    BUILT_IN = "built-in"
    DB_NEWER = "db-newer"


class RollbackStatus(str, Enum):
    """Outcome of a rollback for one account."""

    ROLLED_BACK = "rolled_back"
    FAILED = "failed"
    NO_HISTORY = "no_history"


# Skip and failure reasons recorded on plan entries
ALREADY_ON_TARGET = "already on target version"
NO_RESOURCE_DEPLOYED = "no resource deployed"
ACCOUNT_NOT_FOUND = "account not found"
BULK_RUN_CANCELLED = "bulk run cancelled"


# =============================================================================
# Upgrade plans
# =============================================================================


class UpgradeFilter(BaseModel):
    """Selects which tenants a bulk upgrade considers.

    With neither field set every deployment record is a candidate.
    """

    account_ids: list[str] | None = Field(default=None, description="Explicit accounts")
    from_version: str | None = Field(
        default=None, description="Only tenants currently on this version"
    )


class UpgradePlanEntry(BaseModel):
    """One tenant's line in a bulk upgrade plan."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    account_id: str
    current_version: str | None = None
    current_template_name: str | None = None
    target_version: str
    status: PlanStatus = PlanStatus.PENDING
    reason: str | None = None
    error_code: ErrorCode | None = None
    transition_id: str | None = None


class PlanSummary(BaseModel):
    """Counts by status."""

    total: int = 0
    pending: int = 0
    upgraded: int = 0
    skipped: int = 0
    failed: int = 0


class UpgradePlan(BaseModel):
    """Result of planning (and optionally executing) a bulk upgrade."""

    target_template_id: str
    target_template_name: str
    target_version: str
    dry_run: bool
    force: bool
    entries: list[UpgradePlanEntry] = Field(default_factory=list)
    migration: MigrationReport | None = Field(
        default=None, description="Advisory diff against the most common current template"
    )
    cancelled: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    @computed_field
    @property
    def summary(self) -> PlanSummary:
        """Counts of entries by status."""
        counts = {status: 0 for status in PlanStatus}
        for entry in self.entries:
            counts[entry.status] += 1
        return PlanSummary(
            total=len(self.entries),
            pending=counts[PlanStatus.PENDING],
            upgraded=counts[PlanStatus.UPGRADED],
            skipped=counts[PlanStatus.SKIPPED],
            failed=counts[PlanStatus.FAILED],
        )

    def pending_entries(self) -> list[UpgradePlanEntry]:
        """Entries that still need a swap."""
        return [e for e in self.entries if e.status == PlanStatus.PENDING]


# =============================================================================
# Rollback
# =============================================================================


class RollbackResult(BaseModel):
    """Outcome of rolling back one account."""

    account_id: str
    status: RollbackStatus
    from_version: str | None = None
    to_version: str | None = None
    to_template_name: str | None = None
    transition: Transition | None = None
    error_code: ErrorCode | None = None
    reason: str | None = None


class RollbackSummary(BaseModel):
    """Counts by rollback status."""

    total: int = 0
    rolled_back: int = 0
    failed: int = 0
    no_history: int = 0


class RollbackBatch(BaseModel):
    """Results of a multi-account rollback."""

    results: list[RollbackResult] = Field(default_factory=list)

    @computed_field
    @property
    def summary(self) -> RollbackSummary:
        """Counts of results by status."""
        return RollbackSummary(
            total=len(self.results),
            rolled_back=sum(1 for r in self.results if r.status == RollbackStatus.ROLLED_BACK),
            failed=sum(1 for r in self.results if r.status == RollbackStatus.FAILED),
            no_history=sum(1 for r in self.results if r.status == RollbackStatus.NO_HISTORY),
        )


# =============================================================================
# Reconciliation
# =============================================================================


class ReconciliationReport(BaseModel):
    """Drift between the provisioning API and the deployment records.

    Nothing is repaired automatically; the report is for an operator.
    """

    orphaned_resources: list[str] = Field(
        default_factory=list, description="Live resources no deployment points at"
    )
    orphaned_deployments: list[str] = Field(
        default_factory=list, description="Accounts whose recorded resource is missing"
    )
    stale_deleted_resources: list[str] = Field(
        default_factory=list, description="Resources whose failed deletion left them live"
    )
    resources_scanned: int = 0
    deployments_scanned: int = 0
    scanned_at: datetime = Field(default_factory=utc_now)


# =============================================================================
# Version overview
# =============================================================================


class AccountVersion(BaseModel):
    """One tenant's row in the version overview."""

    account_id: str
    template_id: str | None = None
    template_name: str | None = None
    version: str | None = None
    category: str | None = None
    has_resource: bool = False
    upgrade_count: int = 0
    last_upgrade_at: datetime | None = None
    last_upgrade_by: str | None = None
    is_on_latest_default: bool = False


class VersionGroup(BaseModel):
    """Tenants with a live resource sharing one version."""

    version: str
    count: int
    account_ids: list[str] = Field(default_factory=list)


class OverviewStats(BaseModel):
    """Totals across the overview."""

    total_accounts: int = 0
    with_resource: int = 0
    without_resource: int = 0
    on_latest_default: int = 0
    unique_versions: int = 0


class VersionOverview(BaseModel):
    """Which version is everyone on."""

    accounts: list[AccountVersion] = Field(default_factory=list)
    version_groups: list[VersionGroup] = Field(default_factory=list)
    default_template_id: str | None = None
    default_version: str | None = None
    stats: OverviewStats = Field(default_factory=OverviewStats)
