"""Template lifecycle: resolve, plan, swap, roll back and reconcile.

The resolvers and the planner are read-only advisors. The
DeploymentOrchestrator is the only component that writes to the
provisioning API and to the version ledger.
"""
