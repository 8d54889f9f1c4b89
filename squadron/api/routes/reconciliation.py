"""Reconciliation endpoint."""

from fastapi import APIRouter

from squadron.api.dependencies import ReconciliationScannerDep
from squadron.lifecycle.models import ReconciliationReport

router = APIRouter(prefix="/reconciliation")


@router.get("", response_model=ReconciliationReport)
async def scan(scanner: ReconciliationScannerDep) -> ReconciliationReport:
    """Report live resources and deployment records that disagree."""
    return await scanner.scan()
