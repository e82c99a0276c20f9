"""
Collaborator bundle handed to every console operation.

Nothing in the core reaches for a process-wide client; operations receive a
TenantContext, and tests build one out of in-memory doubles.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Protocol

from console import config
from console.models import TenantResource, UsageInfo
from console.orchestrator import (
    KubeClient,
    KubeSecretRegistry,
    KubeServiceRegistry,
    KubeTenantStore,
    SecretRegistry,
    ServiceRegistry,
    TenantStore,
)
from console.services.admin_client import AdminClientFactory, build_admin_client
from console.services.image_lookup import LatestImageLookup

logger = logging.getLogger(__name__)


class UsageProvider(Protocol):
    def usage(self, tenant: TenantResource, timeout: Optional[float] = None) -> UsageInfo:
        ...


class NoUsageProvider:
    """Used when no metrics source is wired in; reports zero usage."""

    def usage(self, tenant: TenantResource, timeout: Optional[float] = None) -> UsageInfo:
        return UsageInfo(disks_usage=0)


@dataclass
class TenantContext:
    store: TenantStore
    secrets: SecretRegistry
    services: ServiceRegistry
    image_lookup: LatestImageLookup
    admin_client_factory: AdminClientFactory = build_admin_client
    usage_provider: UsageProvider = field(default_factory=NoUsageProvider)
    admin_scheme: str = config.TENANT_ADMIN_SCHEME
    admin_insecure: bool = config.TENANT_ADMIN_INSECURE
    timeout_seconds: Optional[float] = config.OPERATION_TIMEOUT_SECONDS
    conflict_retries: int = config.CONFLICT_RETRIES


def _read_token() -> Optional[str]:
    if config.K8S_TOKEN:
        return config.K8S_TOKEN
    if os.path.exists(config.K8S_TOKEN_FILE):
        with open(config.K8S_TOKEN_FILE) as f:
            return f.read().strip()
    logger.warning("No Kubernetes API token configured; requests will be anonymous")
    return None


def _tls_verify():
    if not config.K8S_VERIFY_TLS:
        return False
    if os.path.exists(config.K8S_CA_FILE):
        return config.K8S_CA_FILE
    return True


def build_context() -> TenantContext:
    """Wire the production collaborators from environment configuration."""
    kube = KubeClient(config.K8S_API_URL, token=_read_token(), verify=_tls_verify())
    logger.info(f"Tenant context bound to orchestrator {config.K8S_API_URL}")
    return TenantContext(
        store=KubeTenantStore(kube),
        secrets=KubeSecretRegistry(kube),
        services=KubeServiceRegistry(kube),
        image_lookup=LatestImageLookup(url=config.RELEASE_URL),
    )
