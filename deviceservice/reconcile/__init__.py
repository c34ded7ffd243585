"""Resource naming and reconciliation."""

from deviceservice.reconcile.naming import asset_name, digest, scheduled_job_name
from deviceservice.reconcile.reconciler import ReconcileResult, ResourceReconciler

__all__ = [
    "ReconcileResult",
    "ResourceReconciler",
    "asset_name",
    "digest",
    "scheduled_job_name",
]
