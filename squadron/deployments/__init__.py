"""Deployment records and the version ledger."""

from squadron.deployments.models import Deployment, Transition

__all__ = ["Deployment", "Transition"]
