"""
Plugin system for the Pet reconciler.

This package provides the reconciler plugin interface and the Pet reconciler
that the operator runtime discovers through the 'no8s.reconcilers' entry
point group.
"""

from plugins.reconcilers.base import (
    ReconcilerPlugin,
    ReconcilerContext,
    ReconcileResult,
    ResourceStatus,
    ResourceStore,
)
from plugins.reconcilers.pet import PetReconciler

__all__ = [
    "ReconcilerPlugin",
    "ReconcilerContext",
    "ReconcileResult",
    "ResourceStatus",
    "ResourceStore",
    "PetReconciler",
]
