"""Deployment store implementations."""

from squadron.deployments.stores.inmemory import InMemoryDeploymentStore
from squadron.deployments.stores.postgres import PostgresDeploymentStore

__all__ = ["InMemoryDeploymentStore", "PostgresDeploymentStore"]
