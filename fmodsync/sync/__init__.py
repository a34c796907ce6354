"""Reconciliation engine: identity index, reconciler, driver and project runs."""

from fmodsync.sync.driver import SyncDriver
from fmodsync.sync.engine import MultiSyncReport, ProjectSynchronizer
from fmodsync.sync.index import DocRef, IdentityIndex, scan_documents
from fmodsync.sync.models import SkipReason, SyncError, SyncProgress, SyncReport, SyncStats
from fmodsync.sync.reconciler import Action, ReconcileResult, Reconciler
from fmodsync.sync.writer import VaultWriter

__all__ = [
    "Action",
    "DocRef",
    "IdentityIndex",
    "MultiSyncReport",
    "ProjectSynchronizer",
    "ReconcileResult",
    "Reconciler",
    "SkipReason",
    "SyncDriver",
    "SyncError",
    "SyncProgress",
    "SyncReport",
    "SyncStats",
    "VaultWriter",
    "scan_documents",
]
