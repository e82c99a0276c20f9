"""
Tenant lifecycle operations against the orchestrator's resource store.

Mutations follow read-current -> apply-change -> submit-patch. The patch
carries the resource version that was read, so a concurrent writer causes a
conflict instead of a lost update; on conflict the whole pipeline is re-run
from a fresh read, a bounded number of times.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from console.context import TenantContext
from console.deadline import Deadline
from console.errors import (
    MutationStep,
    StoreConflictError,
    TenantError,
    ValidationErrorKind,
    ZoneValidationError,
)
from console.models import (
    TenantResource,
    TenantSummary,
    UpdateTenantRequest,
    UsageInfo,
    ZoneSpec,
)
from console.orchestrator import zone_to_manifest
from console.services.admin_client import resolve_admin_client
from console.services.topology import validate_zone
from console.services.translator import to_summary

logger = logging.getLogger(__name__)

PatchBuilder = Callable[[TenantResource], Dict[str, Any]]


class TenantManager:
    """
    Tenant operations: delete, add zone, attribute update, and reads.
    """

    def __init__(self, ctx: TenantContext):
        self.ctx = ctx

    def _deadline(self, timeout: Optional[float]) -> Deadline:
        return Deadline(timeout if timeout is not None else self.ctx.timeout_seconds)

    # ========================================================================
    # READ -> MUTATE -> PATCH PIPELINE
    # ========================================================================

    def _read_modify_write(
        self,
        namespace: str,
        name: str,
        build_patch: PatchBuilder,
        deadline: Deadline,
    ) -> TenantResource:
        attempts = max(1, self.ctx.conflict_retries)
        conflict: Optional[StoreConflictError] = None

        for attempt in range(1, attempts + 1):
            try:
                current = self.ctx.store.get(namespace, name, timeout=deadline.timeout())
            except TenantError as e:
                raise e.at_step(MutationStep.FETCHING)

            try:
                document = build_patch(current)
            except TenantError as e:
                raise e.at_step(MutationStep.MUTATING)

            try:
                updated = self.ctx.store.patch(
                    namespace,
                    name,
                    document,
                    resource_version=current.resource_version,
                    timeout=deadline.timeout(),
                )
            except StoreConflictError as e:
                logger.warning(
                    f"Conflict patching tenant {namespace}/{name} "
                    f"(attempt {attempt}/{attempts}, version {current.resource_version}); re-reading"
                )
                conflict = e
                continue
            except TenantError as e:
                raise e.at_step(MutationStep.SUBMITTING)

            return updated

        raise conflict.at_step(MutationStep.SUBMITTING)

    # ========================================================================
    # DELETE
    # ========================================================================

    def delete_tenant(self, namespace: str, name: str, timeout: Optional[float] = None) -> None:
        deadline = self._deadline(timeout)
        self.ctx.store.delete(namespace, name, timeout=deadline.timeout())
        logger.info(f"Deleted tenant {namespace}/{name}")

    # ========================================================================
    # ZONE EXPANSION
    # ========================================================================

    def add_zone(
        self,
        namespace: str,
        name: str,
        zone: ZoneSpec,
        timeout: Optional[float] = None,
    ) -> TenantResource:
        """
        Append a validated zone to the tenant.

        Validation runs before the store is touched. Existing zones are kept
        exactly as stored; zones are never resized or removed here.

        Raises:
            ZoneValidationError: invalid topology or duplicate zone name
            TenantLookupError / StoreWriteError: store failures, tagged with
                the pipeline step
        """
        validate_zone(zone)
        deadline = self._deadline(timeout)

        def build_patch(current: TenantResource) -> Dict[str, Any]:
            if any(z.name == zone.name for z in current.zones):
                raise ZoneValidationError(
                    ValidationErrorKind.DUPLICATE_ZONE_NAME,
                    f"Zone '{zone.name}' already exists in tenant '{name}'",
                )
            existing = current.zone_manifests or [zone_to_manifest(z) for z in current.zones]
            return {"spec": {"zones": list(existing) + [zone_to_manifest(zone)]}}

        updated = self._read_modify_write(namespace, name, build_patch, deadline)
        logger.info(
            f"Added zone '{zone.name}' to tenant {namespace}/{name}: "
            f"{zone.servers} servers x {zone.volumes_per_server} volumes x {zone.volume_bytes} bytes"
        )
        return updated

    # ========================================================================
    # ATTRIBUTE UPDATE (image, console image, pull secret)
    # ========================================================================

    def update_tenant(
        self,
        namespace: str,
        name: str,
        request: UpdateTenantRequest,
        timeout: Optional[float] = None,
    ) -> TenantResource:
        """
        Apply the supplied attribute changes in a single patch.

        An empty image asks for the latest published release; if that cannot
        be determined the current image is kept and the update still goes on.
        """
        deadline = self._deadline(timeout)

        latest: Optional[str] = None
        if not request.image:
            latest = self.ctx.image_lookup.latest(timeout=deadline.timeout())
            if latest is None:
                logger.warning(f"Keeping current image for tenant {namespace}/{name}: latest release unknown")

        def build_patch(current: TenantResource) -> Dict[str, Any]:
            spec: Dict[str, Any] = {"image": request.image or latest or current.image}
            if request.console_image:
                spec["console"] = {"image": request.console_image}
            if request.image_pull_secret:
                spec["imagePullSecret"] = {"name": request.image_pull_secret}
            return {"spec": spec}

        updated = self._read_modify_write(namespace, name, build_patch, deadline)
        logger.info(f"Updated tenant {namespace}/{name}: image={updated.image}")
        return updated

    # ========================================================================
    # READS
    # ========================================================================

    def list_tenants(self, namespace: Optional[str] = None, timeout: Optional[float] = None) -> List[TenantSummary]:
        deadline = self._deadline(timeout)
        tenants = self.ctx.store.list(namespace, timeout=deadline.timeout())
        return [to_summary(t) for t in tenants]

    def tenant_info(self, namespace: str, name: str, timeout: Optional[float] = None) -> TenantSummary:
        deadline = self._deadline(timeout)
        tenant = self.ctx.store.get(namespace, name, timeout=deadline.timeout())
        try:
            usage = self.ctx.usage_provider.usage(tenant, timeout=deadline.timeout())
        except TenantError:
            raise
        except Exception as e:
            logger.warning(f"Usage unavailable for tenant {namespace}/{name}: {e}")
            usage = UsageInfo()
        return to_summary(tenant, usage)

    def tenant_health(
        self,
        namespace: str,
        name: str,
        service_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        deadline = self._deadline(timeout)
        client = resolve_admin_client(
            self.ctx.secrets,
            self.ctx.services,
            namespace,
            name,
            service_name=service_name,
            scheme=self.ctx.admin_scheme,
            insecure=self.ctx.admin_insecure,
            factory=self.ctx.admin_client_factory,
            deadline=deadline,
        )
        with client:
            healthy = client.health(timeout=deadline.timeout())
        return {"tenant": name, "namespace": namespace, "endpoint": client.endpoint.url, "healthy": healthy}
