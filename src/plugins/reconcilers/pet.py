"""
Pet Reconciler - Reconciles Pet resources against the pet store.

Each cycle observes the pet bound to a resource, then creates it, replaces
it, or leaves it alone. Resources marked for deletion have their pet removed
before the reconciler's finalizer is released.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from config import Config, get_config
from errors import PetstoreError
from external import (
    ExternalPet,
    ObservationState,
    connect,
    get_external_name,
    get_pet_parameters,
)
from plugins.reconcilers.base import (
    ReconcilerContext,
    ReconcilerPlugin,
    ReconcileResult,
    ResourceStatus,
)

logger = logging.getLogger(__name__)

FINALIZER = "petstore"


def determine_trigger_reason(resource: Dict[str, Any]) -> str:
    """Determine why this reconciliation was triggered."""
    if (
        resource.get("status") == ResourceStatus.DELETING.value
        or resource.get("deleted_at") is not None
    ):
        return "deletion"
    elif resource.get("last_reconcile_time") is None:
        return "initial"
    elif resource.get("generation", 0) > resource.get("observed_generation", 0):
        return "spec_change"
    elif resource.get("status") == ResourceStatus.FAILED.value:
        return "retry"
    else:
        return "scheduled"


class PetReconciler(ReconcilerPlugin):
    """
    Reconciler plugin for the 'Pet' resource type.

    Runs a polling loop over Pet resources, reconciling up to
    max_concurrent_reconciles of them at a time.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        connect_fn: Callable[..., ExternalPet] = connect,
    ):
        self.config = config or get_config()
        self._connect = connect_fn
        self._semaphore = asyncio.Semaphore(
            self.config.controller.max_concurrent_reconciles
        )
        self._running = False

    @property
    def name(self) -> str:
        return "petstore"

    @property
    def resource_types(self) -> List[str]:
        return ["Pet"]

    async def start(self, ctx: ReconcilerContext) -> None:
        """Poll for Pet resources until the operator shuts down."""
        self._running = True
        interval = self.config.controller.reconcile_interval
        logger.info(f"Starting pet reconciler (interval={interval}s)")

        while self._running and not ctx.shutdown_event.is_set():
            try:
                resources = await ctx.get_resources_needing_reconciliation(
                    self.resource_types,
                    limit=self.config.controller.max_concurrent_reconciles * 2,
                )
                if resources:
                    logger.info(f"Found {len(resources)} pets needing reconciliation")
                    await asyncio.gather(
                        *[self._reconcile_bounded(r, ctx) for r in resources],
                        return_exceptions=True,
                    )
            except Exception as e:
                logger.error(f"Error in pet reconciliation loop: {e}", exc_info=True)

            try:
                await asyncio.wait_for(ctx.shutdown_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

        logger.info("Pet reconciler stopped")

    async def stop(self) -> None:
        self._running = False

    async def _reconcile_bounded(
        self, resource: Dict[str, Any], ctx: ReconcilerContext
    ) -> ReconcileResult:
        async with self._semaphore:
            return await self.reconcile(resource, ctx)

    async def reconcile(
        self, resource: Dict[str, Any], ctx: ReconcilerContext
    ) -> ReconcileResult:
        """
        Reconcile a single Pet resource.

        Failures are reported through the resource status and history rather
        than raised. Retryable failures carry a requeue_after hint; a
        malformed resource or pet does not, since retrying cannot fix it.

        A resource being deleted keeps its 'deleting' status throughout,
        including when the delete fails, so the next cycle retries the delete.
        """
        resource_id = resource["id"]
        resource_name = resource.get("name", str(resource_id))
        start_time = time.monotonic()
        trigger_reason = determine_trigger_reason(resource)
        deleting = trigger_reason == "deletion"
        drift_detected = False

        try:
            if not deleting:
                await ctx.update_status(
                    resource_id,
                    ResourceStatus.RECONCILING.value,
                    message="Starting reconciliation",
                )

            external = self._connect(resource, self.config.petstore)
            external_name = get_external_name(resource)

            if deleting:
                result = await self._delete(resource, external, external_name, ctx)
            else:
                params = get_pet_parameters(resource)
                observed = await external.observe(params, external_name)

                if observed.observation is not None:
                    await ctx.update_observation(
                        resource_id, observed.observation.to_dict()
                    )

                if observed.state in (
                    ObservationState.NO_IDENTITY,
                    ObservationState.ABSENT,
                ):
                    new_name = await external.create(params)
                    try:
                        await ctx.set_external_name(resource_id, new_name)
                    except Exception as e:
                        logger.error(
                            f"Created pet {new_name} but could not bind it to "
                            f"{resource_name}: {e}"
                        )
                        raise
                    message = f"Created pet {new_name}"
                elif observed.state is ObservationState.EXISTS_STALE:
                    drift_detected = trigger_reason == "scheduled"
                    await external.update(external_name, params)
                    message = f"Updated pet {external_name}"
                else:
                    message = f"Pet {external_name} is up to date"

                await ctx.update_status(
                    resource_id,
                    ResourceStatus.READY.value,
                    message=message,
                    observed_generation=resource.get("generation"),
                )
                logger.info(f"Reconciled {resource_name}: {message}")
                result = ReconcileResult(success=True, message=message)

        except PetstoreError as e:
            logger.error(f"Failed to reconcile {resource_name}: {e}")
            requeue_after = None
            if e.kind.retryable:
                requeue_after = self.config.controller.requeue_delay
            result = ReconcileResult(
                success=False, message=str(e), requeue_after=requeue_after
            )
            await self._report_failure(ctx, resource_id, deleting, str(e))

        except Exception as e:
            logger.error(
                f"Reconciliation error for {resource_name}: {e}", exc_info=True
            )
            result = ReconcileResult(success=False, message=str(e))
            await self._report_failure(ctx, resource_id, deleting, str(e))

        await ctx.record_reconciliation(
            resource_id=resource_id,
            result=result,
            duration_seconds=time.monotonic() - start_time,
            trigger_reason=trigger_reason,
            drift_detected=drift_detected,
        )
        return result

    async def _report_failure(
        self,
        ctx: ReconcilerContext,
        resource_id: int,
        deleting: bool,
        message: str,
    ) -> None:
        status = ResourceStatus.DELETING if deleting else ResourceStatus.FAILED
        await ctx.update_status(resource_id, status.value, message=message)

    async def _delete(
        self,
        resource: Dict[str, Any],
        external: ExternalPet,
        external_name: Optional[str],
        ctx: ReconcilerContext,
    ) -> ReconcileResult:
        resource_id = resource["id"]

        if external_name:
            await external.delete(external_name)

        await ctx.remove_finalizer(resource_id, FINALIZER)
        remaining = await ctx.get_finalizers(resource_id)
        if not remaining:
            await ctx.hard_delete_resource(resource_id)
            logger.info(f"Deleted pet resource {resource.get('name')}")
        else:
            logger.info(
                f"Finalizer removed for {resource.get('name')}, "
                f"waiting on: {remaining}"
            )

        return ReconcileResult(success=True, message="Pet deleted")
