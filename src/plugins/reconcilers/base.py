"""
Reconciler Plugin Base - Abstract interface for reconciler plugins.

Reconciler plugins own the reconciliation logic for one or more resource
types. They are discovered via Python entry points and run their own
continuous reconciliation loops against the operator's resource store.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ResourceStatus(Enum):
    """Status of a resource."""

    PENDING = "pending"
    RECONCILING = "reconciling"
    READY = "ready"
    FAILED = "failed"
    DELETING = "deleting"


@dataclass
class ReconcileResult:
    """Result from a reconciler's reconcile() call."""

    success: bool = False
    message: str = ""
    requeue_after: Optional[int] = None


class ResourceStore(ABC):
    """
    Persistence for resources, owned by the operator runtime.

    Reconcilers never persist anything themselves; statuses, observations,
    external names and finalizers all live on the resource record.
    """

    @abstractmethod
    async def get_resources_needing_reconciliation_by_type(
        self, resource_type_names: List[str], limit: int
    ) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def update_resource_status(
        self,
        resource_id: int,
        status: ResourceStatus,
        message: str = "",
        observed_generation: Optional[int] = None,
    ) -> None:
        pass

    @abstractmethod
    async def update_resource_outputs(
        self, resource_id: int, outputs: Dict[str, Any]
    ) -> None:
        pass

    @abstractmethod
    async def set_external_name(self, resource_id: int, external_name: str) -> None:
        pass

    @abstractmethod
    async def record_reconciliation(
        self,
        resource_id: int,
        success: bool,
        phase: str,
        error_message: Optional[str] = None,
        duration_seconds: Optional[float] = None,
        trigger_reason: Optional[str] = None,
        drift_detected: bool = False,
    ) -> None:
        pass

    @abstractmethod
    async def remove_finalizer(self, resource_id: int, finalizer: str) -> None:
        pass

    @abstractmethod
    async def get_finalizers(self, resource_id: int) -> List[str]:
        pass

    @abstractmethod
    async def hard_delete_resource(self, resource_id: int) -> bool:
        pass


class ReconcilerContext:
    """
    Context provided to reconciler plugins by the operator.

    Gives reconcilers access to the resource store and status reporting.
    """

    def __init__(self, store: ResourceStore, shutdown_event: asyncio.Event):
        self.store = store
        self.shutdown_event = shutdown_event

    async def get_resources_needing_reconciliation(
        self,
        resource_type_names: List[str],
        limit: int = 10,
    ) -> List[Dict[str, Any]]:
        """
        Get resources needing reconciliation, filtered by resource type.

        Args:
            resource_type_names: Resource type names to filter by.
            limit: Maximum number of resources to return.

        Returns:
            List of resource dicts needing reconciliation.
        """
        return await self.store.get_resources_needing_reconciliation_by_type(
            resource_type_names=resource_type_names,
            limit=limit,
        )

    async def update_status(
        self,
        resource_id: int,
        status: str,
        message: str = "",
        observed_generation: Optional[int] = None,
    ) -> None:
        """
        Update a resource's status.

        Args:
            resource_id: The resource ID.
            status: New status string (e.g. 'reconciling', 'ready', 'failed').
            message: Human-readable status message.
            observed_generation: Set the observed generation on success.
        """
        resource_status = ResourceStatus(status)
        await self.store.update_resource_status(
            resource_id=resource_id,
            status=resource_status,
            message=message,
            observed_generation=observed_generation,
        )

    async def update_observation(
        self, resource_id: int, observation: Dict[str, Any]
    ) -> None:
        """
        Record the observed state of the external resource.

        Args:
            resource_id: The resource ID.
            observation: Observed fields, stored under 'atProvider'.
        """
        await self.store.update_resource_outputs(
            resource_id, {"atProvider": observation}
        )

    async def set_external_name(self, resource_id: int, external_name: str) -> None:
        """
        Bind the external resource's identity to a resource.

        Args:
            resource_id: The resource ID.
            external_name: Identity assigned by the external system.
        """
        await self.store.set_external_name(resource_id, external_name)

    async def record_reconciliation(
        self,
        resource_id: int,
        result: ReconcileResult,
        duration_seconds: Optional[float] = None,
        trigger_reason: Optional[str] = None,
        drift_detected: bool = False,
    ) -> None:
        """
        Record a reconciliation attempt in history.

        Args:
            resource_id: The resource ID.
            result: The ReconcileResult from reconciliation.
            duration_seconds: How long reconciliation took.
            trigger_reason: Why reconciliation was triggered.
            drift_detected: Whether drift was detected.
        """
        await self.store.record_reconciliation(
            resource_id=resource_id,
            success=result.success,
            phase="completed" if result.success else "failed",
            error_message=result.message if not result.success else None,
            duration_seconds=duration_seconds,
            trigger_reason=trigger_reason,
            drift_detected=drift_detected,
        )

    async def remove_finalizer(self, resource_id: int, finalizer: str) -> None:
        """Remove a finalizer from a resource."""
        await self.store.remove_finalizer(resource_id, finalizer)

    async def get_finalizers(self, resource_id: int) -> List[str]:
        """Get the finalizers list for a resource."""
        return await self.store.get_finalizers(resource_id)

    async def hard_delete_resource(self, resource_id: int) -> bool:
        """
        Permanently delete a resource (only if soft-deleted and no finalizers).

        Returns:
            True if deleted, False otherwise.
        """
        return await self.store.hard_delete_resource(resource_id)


class ReconcilerPlugin(ABC):
    """
    Abstract base class for reconciler plugins.

    Reconciler plugins own the reconciliation logic for one or more
    resource types. They run their own continuous reconciliation loop,
    reading from the operator's resource store and reporting status back.

    Reconcilers are discovered via Python entry points in the
    'no8s.reconcilers' group.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this reconciler."""
        pass

    @property
    @abstractmethod
    def resource_types(self) -> List[str]:
        """Resource type names this reconciler handles."""
        pass

    @abstractmethod
    async def start(self, ctx: ReconcilerContext) -> None:
        """
        Start the reconciliation loop.

        The reconciler should run its own loop, watching the store for
        resources that need reconciliation. Use ctx.shutdown_event to
        detect when the operator is shutting down.

        Args:
            ctx: ReconcilerContext providing access to resources and status.
        """
        pass

    @abstractmethod
    async def reconcile(
        self, resource: Dict[str, Any], ctx: ReconcilerContext
    ) -> ReconcileResult:
        """
        Reconcile a single resource.

        Compare desired state against actual state and take action.
        Report status back via ctx.update_status().

        Args:
            resource: The resource dict from the store.
            ctx: ReconcilerContext for status updates.

        Returns:
            ReconcileResult indicating success/failure.
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Graceful shutdown. Clean up any resources."""
        pass
